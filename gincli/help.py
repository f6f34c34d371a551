"""Help pages, version printing, the built-in ``help`` command, and the shell-completion protocol."""

from collections.abc import Callable, Iterable, Sequence
from typing import TYPE_CHECKING

from gincli.command import Command
from gincli.config import DispatchConfig
from gincli.exceptions import ExitError
from gincli.flag import BoolFlag, Flag, StringFlag, StringSliceFlag, visible_flags
from gincli.utils import prefix_for

if TYPE_CHECKING:
    from rich.console import Console, RenderableType

    from gincli.category import CommandCategory
    from gincli.context import Context
    from gincli.core import App

__all__ = [
    "HELP_FLAG",
    "VERSION_FLAG",
    "check_command_completions",
    "check_command_help",
    "check_completions",
    "check_help",
    "check_shell_complete_flag",
    "check_subcommand_help",
    "check_version",
    "default_app_complete",
    "default_complete_with_flags",
    "help_command",
    "print_command_suggestions",
    "print_flag_suggestions",
    "print_version",
    "show_app_help",
    "show_command_help",
    "show_subcommand_help",
]

HELP_FLAG = BoolFlag(names="help,h", usage="show help")
VERSION_FLAG = BoolFlag(names="version,v", usage="print the version")

INDENT = 3


##########
# Output #
##########
def _echo(console: "Console", line: str = "") -> None:
    console.print(line, markup=False, highlight=False, emoji=False, soft_wrap=True)


def _section(title: str, body: "RenderableType | str") -> list["RenderableType"]:
    from rich.padding import Padding
    from rich.text import Text

    if isinstance(body, str):
        body = Text(body)
    return [Text(f"{title}:"), Padding(body, (0, 0, 1, INDENT))]


def _grid(rows: Iterable[tuple[str, str]]) -> "RenderableType":
    from rich.table import Table
    from rich.text import Text

    table = Table.grid(padding=(0, 2))
    table.add_column(no_wrap=True)
    table.add_column()
    for left, right in rows:
        table.add_row(Text(left), Text(right))
    return table


def _flag_default_text(flag: Flag) -> str:
    if isinstance(flag, BoolFlag):
        return ""
    if isinstance(flag, StringSliceFlag):
        if not flag.value:
            return ""
        return " (default: " + ", ".join(f'"{x}"' for x in flag.value) + ")"  # pyright: ignore[reportGeneralTypeIssues]
    if isinstance(flag, StringFlag):
        return f' (default: "{flag.value}")' if flag.value else ""
    return f" (default: {flag.default})"


def flag_help_row(flag: Flag) -> tuple[str, str]:
    """Two-column help entry for ``flag``: spelled names and description."""
    placeholder = f" {flag.type_name}" if flag.takes_value else ""
    names = ", ".join(f"{prefix_for(x)}{x}{placeholder}" for x in flag.names)
    description = flag.usage + _flag_default_text(flag)
    if flag.env_var:
        description += f" [${flag.env_var}]"
    return names, description.strip()


def _command_rows(commands: Iterable[Command]) -> list[tuple[str, str]]:
    return [(", ".join(command.names()), command.usage) for command in commands if not command.hidden]


def _commands_body(categories: Sequence["CommandCategory"]) -> "RenderableType":
    from rich.console import Group
    from rich.padding import Padding
    from rich.text import Text

    renderables: list[RenderableType] = []
    for category in categories:
        rows = _command_rows(category.visible_commands())
        if category.name:
            renderables.append(Text(f"{category.name}:"))
            renderables.append(Padding(_grid(rows), (0, 0, 0, 2)))
        else:
            renderables.append(_grid(rows))
    return Group(*renderables)


def _print(console: "Console", renderables: list["RenderableType"]) -> None:
    from rich.console import Group

    console.print(Group(*renderables), markup=False, highlight=False, emoji=False)


def show_app_help(context: "Context"):
    """Print the help page of ``context.app``."""
    app = context.app
    renderables: list[RenderableType] = []

    title = app.help_name
    if app.usage:
        title += f" - {app.usage}"
    renderables += _section("NAME", title)

    usage_text = app.usage_text or (
        f"{app.help_name} {'[global options]' if app.visible_flags() else ''}"
        f"{' command [command options]' if app.visible_commands() else ''} "
        f"{app.args_usage or '[arguments...]'}"
    )
    renderables += _section("USAGE", " ".join(usage_text.split()))

    if app.version and not app.hide_version:
        renderables += _section("VERSION", app.version)
    if app.description:
        renderables += _section("DESCRIPTION", app.description)
    if app.authors:
        renderables += _section("AUTHOR" if len(app.authors) == 1 else "AUTHORS", "\n".join(app.authors))
    if app.visible_commands():
        renderables += _section("COMMANDS", _commands_body(app.visible_categories()))
    if app.visible_flags():
        renderables += _section("GLOBAL OPTIONS", _grid(flag_help_row(x) for x in app.visible_flags()))
    if app.copyright:
        renderables += _section("COPYRIGHT", app.copyright)

    _print(app.console, renderables)


def show_command_help(context: "Context", name: str):
    """Print the help page for the command ``name`` of ``context.app``.

    Raises
    ------
    ExitError
        No such command and no ``command_not_found`` hook is registered.
    """
    app = context.app
    if not name:
        show_app_help(context)
        return

    command = app.command(name)
    if command is None:
        if app.command_not_found is None:
            raise ExitError(f"No help topic for '{name}'", 3)
        app.command_not_found(context, name)
        return

    help_name = command.help_name or f"{app.help_name} {command.name}"
    renderables: list[RenderableType] = []
    title = help_name + (f" - {command.usage}" if command.usage else "")
    renderables += _section("NAME", title)

    flags = visible_flags(command._flags_with_help())
    usage_text = command.usage_text or (
        f"{help_name}{' [command options]' if flags else ''} {command.args_usage or '[arguments...]'}"
    )
    renderables += _section("USAGE", usage_text)
    if command.category:
        renderables += _section("CATEGORY", command.category)
    if command.description:
        renderables += _section("DESCRIPTION", command.description)
    if flags:
        renderables += _section("OPTIONS", _grid(flag_help_row(x) for x in flags))

    _print(app.console, renderables)


def show_subcommand_help(context: "Context"):
    """Help page of the command whose subcommands (or own flags) are being dispatched."""
    if context.command is not None:
        show_command_help(context, context.command.name)
        return

    app = context.app
    renderables: list[RenderableType] = []
    title = app.help_name + (f" - {app.usage}" if app.usage else "")
    renderables += _section("NAME", title)
    renderables += _section(
        "USAGE", app.usage_text or f"{app.help_name} command [command options] {app.args_usage or '[arguments...]'}"
    )
    if app.description:
        renderables += _section("DESCRIPTION", app.description)
    if app.visible_commands():
        renderables += _section("COMMANDS", _commands_body(app.visible_categories()))
    if app.visible_flags():
        renderables += _section("OPTIONS", _grid(flag_help_row(x) for x in app.visible_flags()))

    _print(app.console, renderables)


def print_version(context: "Context"):
    app = context.app
    _echo(app.console, f"{app.name} version {app.version}")


def check_help(context: "Context") -> bool:
    return bool(context.result.get(HELP_FLAG.name))


def check_version(context: "Context") -> bool:
    return bool(context.result.get(VERSION_FLAG.name))


def check_subcommand_help(context: "Context") -> bool:
    return check_help(context)


def check_command_help(context: "Context", name: str) -> bool:
    if check_help(context):
        show_command_help(context, name)
        return True
    return False


def _help_action(context: "Context"):
    args = context.args
    if args.present():
        show_command_help(context, args.first())
        return
    show_app_help(context)


help_command = Command(
    "help",
    "Shows a list of commands or help for one command",
    aliases=("h",),
    args_usage="[command]",
    action=_help_action,
)


####################
# Shell completion #
####################
def check_shell_complete_flag(app: "App", arguments: Sequence[str], config: DispatchConfig) -> tuple[bool, list[str]]:
    """Detect and strip the trailing completion marker.

    Only the final token is considered, so the marker can never be taken as a preceding flag's value.
    """
    arguments = list(arguments)
    if not app.enable_bash_completion or not arguments:
        return False, arguments

    if arguments[-1] != "--" + config.shell_complete_flag:
        return False, arguments

    return True, arguments[:-1]


def check_completions(context: "Context") -> bool:
    """In completion mode, print suggestions for ``context.app`` unless a command will handle them."""
    if not context.shell_complete:
        return False

    args = context.args
    if args.present() and context.app.command(args.first()) is not None:
        # Let the command handle the completion.
        return False

    show_completions(context)
    return True


def check_command_completions(context: "Context", name: str) -> bool:
    if not context.shell_complete:
        return False

    show_command_completions(context, name)
    return True


def show_completions(context: "Context"):
    complete = context.app.bash_complete or default_app_complete
    complete(context)


def show_command_completions(context: "Context", name: str):
    command = context.app.command(name)
    if command is None:
        return
    if command.bash_complete is not None:
        command.bash_complete(context)
    else:
        default_complete_with_flags(command)(context)


def default_app_complete(context: "Context"):
    """Print the application's commands, or matching flags after a partial flag."""
    default_complete_with_flags(None)(context)


def _is_flag_prefix(token: str) -> bool:
    # A flag with an attached value ("--name=x") is complete, not a prefix.
    return token.startswith("-") and "=" not in token


def default_complete_with_flags(command: Command | None) -> Callable[["Context"], None]:
    def complete(context: "Context"):
        raw_args = context.raw_args
        if len(raw_args) > 2:
            last_arg = raw_args[-2]
            if _is_flag_prefix(last_arg):
                print_flag_suggestions(last_arg, context.app.flags, context)
                if command is not None:
                    print_flag_suggestions(last_arg, command.flags, context)
                return

        if command is not None:
            print_command_suggestions(command.subcommands, context)
        else:
            print_command_suggestions(context.app.commands, context)

    return complete


def print_command_suggestions(commands: Iterable[Command], context: "Context"):
    console = context.app.console
    zsh = context.config.zsh_completion
    for command in commands:
        if command.hidden:
            continue
        for name in command.names():
            _echo(console, f"{name}:{command.usage}" if zsh else name)


def _cli_arg_contains(flag: Flag, raw_args: Sequence[str]) -> bool:
    return any(f"{prefix_for(name)}{name}" in raw_args for name in flag.names)


def print_flag_suggestions(last_arg: str, flags: Iterable[Flag], context: "Context"):
    """Print flag spellings that complete ``last_arg``.

    Hidden flags, exact matches, and flags already present on the command line are skipped,
    as are single-character names when ``last_arg`` starts with ``--``.
    """
    console = context.app.console
    cur = last_arg.removeprefix("-").removeprefix("-")
    for flag in flags:
        if flag.hidden:
            continue
        for name in flag.names:
            if last_arg.startswith("--") and len(name) == 1:
                continue
            if name.startswith(cur) and cur != name and not _cli_arg_contains(flag, context.raw_args):
                _echo(console, f"{prefix_for(name)}{name}")
