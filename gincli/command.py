from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from attrs import define, evolve, field

from gincli.action import Action, as_action
from gincli.context import Context
from gincli.exceptions import FlagNormalizeError, RequiredFlagMissing, UsageError
from gincli.flag import Flag, inject_flag, visible_flags
from gincli.flag_set import FlagSet, check_required, normalize
from gincli.utils import to_list_converter, to_tuple_converter

if TYPE_CHECKING:
    from gincli.core import App

__all__ = ["Command"]


def _docstring_summary(action: Action | None) -> str:
    """First line of the action's docstring, for use as default usage text."""
    if action is None or not action.func.__doc__:
        return ""

    import docstring_parser

    return docstring_parser.parse(action.func.__doc__).short_description or ""


@define
class Command:
    """A named, aliasable unit with its own flags, optional subcommands, and an action.

    A command with subcommands is dispatched as a mini-application.
    """

    name: str

    usage: str = field(default="")
    """Short description shown in command listings. Defaults to the first line of the action's docstring."""

    # Everything below must be kw_only

    # This can ONLY ever be a Tuple[str, ...] due to converter.
    aliases: str | Iterable[str] = field(default=(), converter=to_tuple_converter, kw_only=True)
    usage_text: str = field(default="", kw_only=True)
    description: str = field(default="", kw_only=True)
    args_usage: str = field(default="", kw_only=True)
    category: str = field(default="", kw_only=True)

    # This can ONLY ever be a List[Flag] due to converter.
    flags: Iterable[Flag] = field(factory=list, converter=to_list_converter, kw_only=True)

    # This can ONLY ever be a List[Command] due to converter.
    subcommands: Iterable["Command"] = field(factory=list, converter=to_list_converter, kw_only=True)

    # This can ONLY ever be an Action or None due to converter.
    action: Action | Callable[["Context"], Any] | None = field(default=None, converter=as_action, kw_only=True)
    before: Callable[["Context"], Any] | None = field(default=None, kw_only=True)
    after: Callable[["Context"], Any] | None = field(default=None, kw_only=True)
    on_usage_error: Callable[["Context", "UsageError", bool], BaseException | None] | None = field(
        default=None, kw_only=True
    )
    bash_complete: Callable[["Context"], Any] | None = field(default=None, kw_only=True)

    skip_flag_parsing: bool = field(default=False, kw_only=True)
    """Treat every argument as positional."""

    skip_arg_reorder: bool = field(default=False, kw_only=True)
    """Stop flag parsing at the first positional argument instead of accepting flags anywhere."""

    use_short_option_handling: bool = field(default=False, kw_only=True)
    hide_help: bool = field(default=False, kw_only=True)
    hidden: bool = field(default=False, kw_only=True)

    help_name: str = field(default="", kw_only=True)
    """Full name for help pages; stamped as ``"<parent> <name>"`` during setup if empty."""

    def __attrs_post_init__(self):
        if not self.usage:
            self.usage = _docstring_summary(self.action)  # pyright: ignore[reportArgumentType]

    def names(self) -> tuple[str, ...]:
        """Primary name followed by aliases."""
        return (self.name, *self.aliases)  # pyright: ignore[reportReturnType]

    def has_name(self, name: str) -> bool:
        return name in self.names()

    def visible_flags(self) -> list[Flag]:
        return visible_flags(self.flags)

    def copy(self) -> "Command":
        return evolve(self, flags=list(self.flags), subcommands=list(self.subcommands))

    def _flags_with_help(self) -> list[Flag]:
        from gincli.help import HELP_FLAG

        flags = list(self.flags)
        if not self.hide_help:
            inject_flag(flags, HELP_FLAG)
        return flags

    def run(self, parent: "Context") -> None:
        """Invoke the command given the parent context; parses ``parent.args.tail()`` for command flags."""
        from gincli.help import check_command_completions, check_command_help, show_command_help

        if self.subcommands:
            self.start_app(parent)
            return

        app = parent.app
        flags = self._flags_with_help()
        flag_set = FlagSet(
            self.name,
            flags,
            short_option_handling=self.use_short_option_handling or app.use_short_option_handling,
        )
        result = flag_set.parse(
            parent.args.tail(),
            interspersed=not self.skip_arg_reorder,
            skip_flag_parsing=self.skip_flag_parsing,
            environ=parent.config.resolve_environ(),
            shell_complete=parent.shell_complete,
        )
        context = Context(app, result, parent, command=self)

        try:
            normalize(result)
        except FlagNormalizeError as e:
            app.console.print(str(e), markup=False, highlight=False)
            app.console.print()
            show_command_help(context, self.name)
            raise

        if check_command_completions(context, self.name):
            return

        if result.error is not None:
            self._handle_usage_error(context, result.error)
            return

        if check_command_help(context, self.name):
            return

        try:
            check_required(flags, result)
        except RequiredFlagMissing:
            show_command_help(context, self.name)
            raise

        app._lifecycle(
            context,
            self._dispatch,
            before=self.before,
            after=self.after,
            on_before_error=lambda ctx: show_command_help(ctx, self.name),
        )

    def _dispatch(self, context: "Context") -> None:
        from gincli.core import invoke_hook, tag_command_chain
        from gincli.help import show_subcommand_help

        action = self.action if self.action is not None else show_subcommand_help
        try:
            invoke_hook(action, context)
        except Exception as e:
            tag_command_chain(context, e)
            context.app.handle_exit_coder(context, e)
            raise

    def _handle_usage_error(self, context: "Context", error: BaseException) -> None:
        from gincli.help import show_command_help

        if self.on_usage_error is not None:
            replacement = self.on_usage_error(context, UsageError(error=error, is_subcommand=False), False)
            if replacement is not None:
                context.app.handle_exit_coder(context, replacement)
                raise replacement
            return
        context.app.console.print(f"Incorrect Usage: {error}\n", markup=False, highlight=False)
        show_command_help(context, self.name)
        raise error

    def start_app(self, parent: "Context") -> None:
        """Dispatch this command's subcommands as a mini-application."""
        self.to_app(parent.app).run_as_subcommand(parent)

    def to_app(self, parent_app: "App") -> "App":
        """Build the mini-application used to dispatch this command's subcommands."""
        from gincli.core import App
        from gincli.help import show_subcommand_help

        return App(
            self.name,
            self.usage,
            help_name=self.help_name or self.name,
            usage_text=self.usage_text,
            args_usage=self.args_usage,
            description=self.description,
            commands=self.subcommands,
            flags=self.flags,
            hide_help=self.hide_help,
            enable_bash_completion=parent_app.enable_bash_completion,
            use_short_option_handling=self.use_short_option_handling or parent_app.use_short_option_handling,
            bash_complete=self.bash_complete,
            before=self.before,
            after=self.after,
            action=self.action if self.action is not None else show_subcommand_help,
            on_usage_error=self.on_usage_error,
            command_not_found=parent_app.command_not_found,
            exit_err_handler=parent_app.exit_err_handler,
            metadata=parent_app.metadata,
            console=parent_app.console,
            error_console=parent_app.error_console,
        )
