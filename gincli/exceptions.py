from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

from attrs import define, field

from gincli.utils import prefix_for

if TYPE_CHECKING:
    from rich.console import Console

    from gincli.context import Context
    from gincli.core import App
    from gincli.flag import Flag


__all__ = [
    "ExitCoder",
    "ExitError",
    "FlagDefinitionError",
    "FlagNormalizeError",
    "FlagParseError",
    "GinError",
    "InvalidActionType",
    "RequiredFlagMissing",
    "UsageError",
    "exit_code_of",
    "handle_exit_coder",
]


class FlagDefinitionError(Exception):
    """Two flag specifications in the same flag set share a name."""

    # This doesn't derive from GinError since this is a developer error
    # rather than a runtime error.


class InvalidActionType(TypeError):
    """An object that is not a supported Action signature was registered as an Action."""

    def __init__(self, obj: Any = None):
        self.obj = obj
        super().__init__(f"ERROR invalid Action type: {obj!r}")


@define
class GinError(Exception):
    """Root exception for runtime errors.

    As GinErrors bubble up the dispatch call-stack, more information is added to it.
    """

    msg: str | None = None
    """
    If set, override automatic message generation.
    """

    app: Optional["App"] = field(default=None, kw_only=True)
    """
    The application (or mini-application for commands with subcommands) that raised.
    """

    command_chain: Sequence[str] | None = field(default=None, kw_only=True)
    """
    Names of the commands that lead to the failing level.
    """

    def __str__(self):
        if self.msg is not None:
            return self.msg
        return ""


@define(kw_only=True)
class FlagParseError(GinError):
    """Unknown or malformed flag token."""

    token: str = ""
    """The offending argument, exactly as supplied."""

    reason: str = "flag provided but not defined"

    def __str__(self):
        if self.msg is not None:
            return self.msg
        return f"{self.reason}: {self.token}"


@define(kw_only=True)
class FlagNormalizeError(GinError):
    """More than one alias of the same flag was used in a single invocation."""

    names: tuple[str, ...] = ()

    def __str__(self):
        if self.msg is not None:
            return self.msg
        return "Cannot use two forms of the same flag: " + " ".join(self.names)


@define(kw_only=True)
class RequiredFlagMissing(GinError):
    """A flag marked as required was supplied neither on the command line nor by its environment variable."""

    flag: "Flag"

    def __str__(self):
        if self.msg is not None:
            return self.msg
        name = self.flag.name
        response = f'Required flag "{prefix_for(name)}{name}" not set'
        if self.flag.env_var:
            response += f' (environment variable "{self.flag.env_var}")'
        return response + "."


@define(kw_only=True)
class UsageError(GinError):
    """Parsing-phase failure, as seen by an exit handler.

    Wraps the underlying :class:`FlagParseError` / :class:`RequiredFlagMissing`
    together with whether it happened at the top level or inside a command.
    """

    error: BaseException
    is_subcommand: bool = False

    def __str__(self):
        return str(self.error)


@runtime_checkable
class ExitCoder(Protocol):
    """An error that also carries a specific process exit status."""

    exit_code: int


@define
class ExitError(GinError):
    """Error with an explicit process exit status."""

    exit_code: int = 1


def exit_code_of(error: BaseException | None) -> int:
    """Process exit status for ``error``.

    ``0`` for no error; the carried status for an :class:`ExitCoder`
    (including a wrapped one inside :class:`UsageError`); ``1`` otherwise.
    """
    if error is None:
        return 0
    if isinstance(error, UsageError):
        error = error.error
    if isinstance(error, ExitCoder) and isinstance(error.exit_code, int):
        return error.exit_code
    return 1


def handle_exit_coder(context: "Context", error: BaseException | None, console: Optional["Console"] = None) -> None:
    """Default exit handler: report an :class:`ExitCoder` error's message.

    Exit translation itself is left to the caller of :meth:`App.run`.
    """
    if error is None or not isinstance(error, ExitCoder):
        return
    message = str(error)
    if not message:
        return
    if console is None:
        console = context.app.error_console
    console.print(message, markup=False, highlight=False)
