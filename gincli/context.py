from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Optional

from attrs import define, field

from gincli.config import DispatchConfig
from gincli.flag_set import ParseResult

if TYPE_CHECKING:
    from gincli.command import Command
    from gincli.core import App

__all__ = ["Args", "Context"]


class Args(tuple):
    """Positional arguments left over after flag parsing."""

    def first(self) -> str:
        """The first argument, or an empty string."""
        return self.get(0)

    def get(self, n: int, default: str = "") -> str:
        if 0 <= n < len(self):
            return self[n]
        return default

    def tail(self) -> "Args":
        """Everything but the first argument."""
        return Args(self[1:])

    def present(self) -> bool:
        return len(self) > 0


@define
class Context:
    """Read-only view of the parsed values at one nesting level.

    Each level borrows its parent; flag lookups fall back to ancestor levels,
    which is how a command sees a "global" flag declared on the root application.
    A context only lives for the duration of the dispatch call that created it.
    """

    app: "App"
    """Application (or mini-application of a command with subcommands) dispatching this level."""

    result: ParseResult
    """Flag values and positional arguments parsed at this level."""

    parent: Optional["Context"] = None

    command: Optional["Command"] = field(default=None, kw_only=True)
    """Command being run, when this level belongs to a leaf command."""

    shell_complete: bool = field(default=False, kw_only=True)
    """Completion mode; inherited from the parent."""

    _config: DispatchConfig | None = field(default=None, alias="config", kw_only=True)
    _raw_args: tuple[str, ...] | None = field(default=None, alias="raw_args", kw_only=True)

    def __attrs_post_init__(self):
        if self.parent is not None and self.parent.shell_complete:
            self.shell_complete = True

    @property
    def root(self) -> "Context":
        ctx = self
        while ctx.parent is not None:
            ctx = ctx.parent
        return ctx

    @property
    def config(self) -> DispatchConfig:
        for ctx in self.lineage():
            if ctx._config is not None:
                return ctx._config
        return DispatchConfig()

    @property
    def raw_args(self) -> tuple[str, ...]:
        """The complete argument vector given to the root application, before any stripping."""
        for ctx in self.lineage():
            if ctx._raw_args is not None:
                return ctx._raw_args
        return ()

    @property
    def args(self) -> Args:
        return Args(self.result.args)

    @property
    def metadata(self) -> dict[str, Any]:
        return self.app.metadata

    def command_path(self) -> tuple[str, ...]:
        """Names of the commands leading to this level, outermost first."""
        names = []
        for ctx in self.lineage():
            if ctx.command is not None:
                names.append(ctx.command.name)
            elif ctx.parent is not None:
                names.append(ctx.app.name)
        return tuple(reversed(names))

    def narg(self) -> int:
        return len(self.result.args)

    def lineage(self) -> Iterator["Context"]:
        """This context followed by its ancestors, innermost first."""
        ctx: Context | None = self
        while ctx is not None:
            yield ctx
            ctx = ctx.parent

    def get(self, name: str, default: Any = None) -> Any:
        """Value of flag ``name`` (any alias).

        The first level, starting here and walking outward, that declares the flag provides the value.
        """
        for ctx in self.lineage():
            if name in ctx.result.flag_set:
                return ctx.result.get(name)
        return default

    def global_get(self, name: str, default: Any = None) -> Any:
        """Like :meth:`get`, but starting from the parent level."""
        if self.parent is None:
            return default
        return self.parent.get(name, default)

    def is_set(self, name: str) -> bool:
        """Whether ``name`` was supplied (command line or environment) at this or any enclosing level."""
        return any(ctx.result.is_set(name) for ctx in self.lineage())

    def source(self, name: str) -> str | None:
        """``"cli"``, ``"env"`` or ``"default"`` for the level that provides ``name``; :obj:`None` if undeclared."""
        for ctx in self.lineage():
            if name in ctx.result.flag_set:
                return ctx.result.source(name)
        return None

    def flag_names(self) -> list[str]:
        """Canonical names of the flags explicitly supplied at this level."""
        return [flag.name for flag in self.result.flag_set.flags if flag.name in self.result.tokens]

    def num_flags(self) -> int:
        return len(self.result.tokens)
