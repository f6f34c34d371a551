import shlex
import sys
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from attrs import define, field

from gincli.action import Action, as_action
from gincli.category import CommandCategories
from gincli.command import Command
from gincli.config import DispatchConfig
from gincli.context import Context
from gincli.exceptions import (
    FlagNormalizeError,
    FlagParseError,
    GinError,
    RequiredFlagMissing,
    UsageError,
    exit_code_of,
)
from gincli.flag import Flag, inject_flag, visible_flags
from gincli.flag_set import FlagSet, check_required, normalize
from gincli.utils import to_list_converter

if TYPE_CHECKING:
    from rich.console import Console

__all__ = ["App", "normalize_tokens"]

Hook = Callable[[Context], Any]
UsageErrorHook = Callable[[Context, UsageError, bool], BaseException | None]
ExitErrHandler = Callable[[Context, BaseException], Any]
CommandNotFoundHook = Callable[[Context, str], Any]


def _default_name() -> str:
    return Path(sys.argv[0]).name if sys.argv and sys.argv[0] else "app"


def _stderr_console(console: "Console") -> "Console":
    """Console writing to stderr, laid out like ``console`` so errors line up with help output."""
    from rich.console import Console

    return Console(
        stderr=True,
        width=console.width,
        color_system=console.color_system or "auto",  # type: ignore[arg-type]
        no_color=console.no_color,
        legacy_windows=console.legacy_windows,
    )


def normalize_tokens(tokens: None | str | Iterable[str]) -> list[str]:
    if tokens is None:
        tokens = sys.argv[1:]  # Remove the executable
    elif isinstance(tokens, str):
        tokens = shlex.split(tokens)
    else:
        tokens = list(tokens)
    return tokens


def tag_command_chain(context: Context, error: BaseException) -> None:
    if isinstance(error, GinError) and error.command_chain is None:
        error.command_chain = context.command_path()


def invoke_hook(hook: Hook, context: Context) -> None:
    """Call a Before/After/Action callable; a returned exception is raised."""
    result = hook(context)
    if isinstance(result, BaseException):
        raise result


@define
class App:
    name: str = field(factory=_default_name)
    """Name of the program. Defaults to the basename of ``sys.argv[0]``."""

    usage: str = field(default="A new cli application")
    """One-line description of the program."""

    # Everything below must be kw_only

    _help_name: str = field(default="", alias="help_name", kw_only=True)
    usage_text: str = field(default="", kw_only=True)
    args_usage: str = field(default="", kw_only=True)
    version: str = field(default="", kw_only=True)
    description: str = field(default="", kw_only=True)

    # This can ONLY ever be a List[Command] due to converter.
    commands: Iterable[Command] = field(factory=list, converter=to_list_converter, kw_only=True)

    # This can ONLY ever be a List[Flag] due to converter.
    flags: Iterable[Flag] = field(factory=list, converter=to_list_converter, kw_only=True)

    enable_bash_completion: bool = field(default=False, kw_only=True)
    hide_help: bool = field(default=False, kw_only=True)
    hide_version: bool = field(default=False, kw_only=True)
    use_short_option_handling: bool = field(default=False, kw_only=True)
    """Allow several single-character boolean flags to be combined: ``-o -v`` as ``-ov``."""

    bash_complete: Hook | None = field(default=None, kw_only=True)
    """Run in completion mode instead of the action. Defaults to suggesting commands and flags."""

    before: Hook | None = field(default=None, kw_only=True)
    """Run after the context is ready but before any command or action. Raising aborts dispatch."""

    after: Hook | None = field(default=None, kw_only=True)
    """Run after the command or action, on every exit path, including when Before fails."""

    # This can ONLY ever be an Action or None due to converter.
    action: Action | Callable[[Context], Any] | None = field(default=None, converter=as_action, kw_only=True)
    """Run when no command is specified. Defaults to showing the help page."""

    command_not_found: CommandNotFoundHook | None = field(default=None, kw_only=True)
    on_usage_error: UsageErrorHook | None = field(default=None, kw_only=True)
    exit_err_handler: ExitErrHandler | None = field(default=None, kw_only=True)

    metadata: dict[str, Any] | None = field(default=None, kw_only=True)
    authors: list[str] = field(factory=list, converter=to_list_converter, kw_only=True)
    copyright: str = field(default="", kw_only=True)

    _console: Optional["Console"] = field(default=None, kw_only=True, alias="console")
    _error_console: Optional["Console"] = field(default=None, kw_only=True, alias="error_console")

    ######################
    # Private Attributes #
    ######################
    _did_setup: bool = field(init=False, default=False)
    _categories: CommandCategories = field(init=False, factory=CommandCategories)
    _fallback_console: Optional["Console"] = field(init=False, default=None)
    _fallback_error_console: Optional["Console"] = field(init=False, default=None)

    @property
    def help_name(self) -> str:
        """Full name of the program for help pages; defaults to :attr:`name`."""
        return self._help_name or self.name

    @help_name.setter
    def help_name(self, value: str):
        self._help_name = value

    @property
    def console(self) -> "Console":
        if self._console is not None:
            return self._console

        # We always want to return back the same console object.
        if self._fallback_console is None:
            from rich.console import Console

            self._fallback_console = Console()

        return self._fallback_console

    @console.setter
    def console(self, console: Optional["Console"]):
        self._console = console

    @property
    def error_console(self) -> "Console":
        if self._error_console is not None:
            return self._error_console

        if self._fallback_error_console is None:
            self._fallback_error_console = _stderr_console(self.console)

        return self._fallback_error_console

    @error_console.setter
    def error_console(self, console: Optional["Console"]):
        self._error_console = console

    @property
    def categories(self) -> CommandCategories:
        """Commands grouped by category; populated by :meth:`setup`."""
        return self._categories

    ###########
    # Methods #
    ###########
    def setup(self) -> None:
        """Prepare all data structures for :meth:`run` or for inspection prior to :meth:`run`.

        Called internally by :meth:`run`; returns early if setup has already happened.
        """
        if self._did_setup:
            return
        self._did_setup = True

        from gincli.help import HELP_FLAG, VERSION_FLAG, help_command

        if self.command(help_command.name) is None and not self.hide_help:
            self.commands.append(help_command.copy())  # pyright: ignore[reportAttributeAccessIssue]
            self.append_flag(HELP_FLAG)

        if not self.version:
            self.hide_version = True

        if not self.hide_version:
            self.append_flag(VERSION_FLAG)

        self._stamp_help_names()
        self._build_categories()

        if self.metadata is None:
            self.metadata = {}

    def _setup_as_subcommand(self) -> None:
        if self._did_setup:
            return
        self._did_setup = True

        from gincli.help import HELP_FLAG, help_command

        if self.commands and self.command(help_command.name) is None and not self.hide_help:
            self.commands.append(help_command.copy())  # pyright: ignore[reportAttributeAccessIssue]
            self.append_flag(HELP_FLAG)

        self._stamp_help_names()
        self._build_categories()

        if self.metadata is None:
            self.metadata = {}

    def _stamp_help_names(self) -> None:
        for command in self.commands:
            if not command.help_name:
                command.help_name = f"{self.help_name} {command.name}"

    def _build_categories(self) -> None:
        self._categories = CommandCategories()
        for command in self.commands:
            self._categories.add_command(command.category, command)
        self._categories.sort()

    def command(self, name: str) -> Command | None:
        """The first command answering to ``name`` (primary name or alias), in declaration order."""
        for command in self.commands:
            if command.has_name(name):
                return command
        return None

    def visible_categories(self):
        return self._categories.visible()

    def visible_commands(self) -> list[Command]:
        return [command for command in self.commands if not command.hidden]

    def visible_flags(self) -> list[Flag]:
        return visible_flags(self.flags)

    def has_flag(self, flag: Flag) -> bool:
        """Whether ``flag`` (or another flag with the same canonical name) is already declared."""
        return flag in self.flags or flag.name in {x.name for x in self.flags}

    def append_flag(self, flag: Flag) -> None:
        """Append ``flag`` unless :meth:`has_flag`; aliases already in use are dropped from it."""
        inject_flag(self.flags, flag)  # pyright: ignore[reportArgumentType]

    def new_flag_set(self) -> FlagSet:
        return FlagSet(self.name, self.flags, short_option_handling=self.use_short_option_handling)

    def handle_exit_coder(self, context: Context, error: BaseException | None) -> None:
        if error is not None and self.exit_err_handler is not None:
            self.exit_err_handler(context, error)

    def run(self, arguments: Sequence[str] | None = None, *, config: DispatchConfig | None = None) -> None:
        """Parse the argument vector and route it to the proper command or action.

        Parameters
        ----------
        arguments: Sequence[str] | None
            Full argument vector, program name first. Defaults to ``sys.argv``.
        config: DispatchConfig | None
            Dispatch settings. Defaults to :class:`DispatchConfig`'s defaults.

        Raises
        ------
        Exception
            The single error reported for this invocation; exit-status translation is left to the caller.
        """
        from gincli.help import (
            check_completions,
            check_help,
            check_shell_complete_flag,
            check_version,
            print_version,
            show_app_help,
        )

        self.setup()

        arguments = list(sys.argv if arguments is None else arguments)
        config = DispatchConfig() if config is None else config
        raw_args = tuple(arguments)

        # Handle the completion flag separately from the flag set since completion
        # could be attempted after a flag but before its value was put on the command line.
        # The shell always appends the completion flag at the very end.
        shell_complete, arguments = check_shell_complete_flag(self, arguments, config)

        result = self.new_flag_set().parse(
            arguments[1:],
            environ=config.resolve_environ(),
            shell_complete=shell_complete,
        )
        context = Context(self, result, shell_complete=shell_complete, config=config, raw_args=raw_args)

        try:
            normalize(result)
        except FlagNormalizeError as e:
            self.console.print(str(e), markup=False, highlight=False)
            raise

        if check_completions(context):
            return

        if result.error is not None:
            self._handle_usage_error(context, result.error, is_subcommand=False)
            return

        if not self.hide_help and check_help(context):
            show_app_help(context)
            return

        if not self.hide_version and check_version(context):
            print_version(context)
            return

        try:
            check_required(self.flags, result)
        except RequiredFlagMissing:
            show_app_help(context)
            raise

        self._lifecycle(context, self._dispatch, before=self.before, after=self.after)

    def run_as_subcommand(self, parent: Context) -> None:
        """Dispatch ``parent.args.tail()`` against this (mini-)application's flags and commands."""
        from gincli.help import check_completions, check_subcommand_help, show_subcommand_help

        self._setup_as_subcommand()

        result = self.new_flag_set().parse(
            parent.args.tail(),
            environ=parent.config.resolve_environ(),
            shell_complete=parent.shell_complete,
        )
        context = Context(self, result, parent)

        try:
            normalize(result)
        except FlagNormalizeError as e:
            self.console.print(str(e), markup=False, highlight=False)
            self.console.print()
            raise

        if check_completions(context):
            return

        if result.error is not None:
            self._handle_usage_error(context, result.error, is_subcommand=True)
            return

        if self.commands and check_subcommand_help(context):
            show_subcommand_help(context)
            return

        try:
            check_required(self.flags, result)
        except RequiredFlagMissing:
            show_subcommand_help(context)
            raise

        self._lifecycle(context, self._dispatch, before=self.before, after=self.after)

    def _handle_usage_error(self, context: Context, error: BaseException, *, is_subcommand: bool) -> None:
        if self.on_usage_error is not None:
            replacement = self.on_usage_error(context, UsageError(error=error, is_subcommand=is_subcommand), is_subcommand)
            if replacement is not None:
                self.handle_exit_coder(context, replacement)
                raise replacement
            return
        self.console.print(f"Incorrect Usage. {error}\n", markup=False, highlight=False)
        raise error

    def _dispatch(self, context: Context) -> None:
        from gincli.help import show_app_help

        args = context.args
        if args.present():
            name = args.first()
            command = self.command(name)
            if command is not None:
                command.run(context)
                return
            if self.action is None and self.command_not_found is not None:
                self.command_not_found(context, name)
                return

        action = self.action if self.action is not None else show_app_help
        try:
            invoke_hook(action, context)
        except Exception as e:
            tag_command_chain(context, e)
            self.handle_exit_coder(context, e)
            raise

    def _lifecycle(
        self,
        context: Context,
        dispatch: Callable[[Context], None],
        *,
        before: Hook | None,
        after: Hook | None,
        on_before_error: Callable[[Context], Any] | None = None,
    ) -> None:
        """Before, dispatch, and an After that runs on every exit path.

        If both dispatch (or Before) and After fail, the earlier error is the one raised;
        the After error is still routed through :attr:`exit_err_handler`.
        """
        error: BaseException | None = None
        try:
            if before is not None:
                try:
                    invoke_hook(before, context)
                except Exception as e:
                    if on_before_error is not None:
                        on_before_error(context)
                    self.handle_exit_coder(context, e)
                    raise
            dispatch(context)
        except BaseException as e:
            error = e

        if after is not None:
            try:
                invoke_hook(after, context)
            except Exception as e:
                self.handle_exit_coder(context, e)
                if error is None:
                    error = e

        if error is not None:
            raise error

    def __call__(
        self,
        tokens: None | str | Iterable[str] = None,
        *,
        config: DispatchConfig | None = None,
        print_error: bool = True,
        exit_on_error: bool = True,
    ) -> None:
        """Process entry point: run, report the error, and exit with its status.

        Parameters
        ----------
        tokens : None | str | Iterable[str]
            Either a string, or a list of strings, **without** the program name.
            Defaults to ``sys.argv[1:]``.
        config: DispatchConfig | None
            Defaults to :meth:`DispatchConfig.from_env`.
        print_error: bool
            Print a rich-formatted error panel for errors not already reported.
        exit_on_error: bool
            On error, invoke ``sys.exit`` with the error's exit status.
            Otherwise, continue to raise the exception.
        """
        from gincli.panel import GinPanel

        arguments = [sys.argv[0] if tokens is None and sys.argv else self.name, *normalize_tokens(tokens)]
        config = DispatchConfig.from_env() if config is None else config

        try:
            self.run(arguments, config=config)
        except KeyboardInterrupt:
            sys.exit(130)  # Use the same exit code as Python's default KeyboardInterrupt handling.
        except Exception as e:
            already_reported = isinstance(e, FlagParseError | FlagNormalizeError | UsageError)
            if print_error and not already_reported and str(e):
                self.error_console.print(GinPanel(e))
            if exit_on_error:
                sys.exit(exit_code_of(e))
            raise

    def __repr__(self):
        return f"App(name={self.name!r}, commands={[x.name for x in self.commands]!r})"
