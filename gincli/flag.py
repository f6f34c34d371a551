"""Flag specifications.

A flag specification is an immutable value describing one named option:
its aliases, default value, environment-variable source, visibility and
whether it is required. Equality is structural, so two identically
declared flags compare equal.
"""

from collections.abc import Iterable
from typing import Any, ClassVar

from attrs import evolve, field, frozen

from gincli._env_var import env_var_split
from gincli.utils import names_converter, prefix_for, to_tuple_converter

__all__ = [
    "BoolFlag",
    "Flag",
    "IntFlag",
    "StringFlag",
    "StringSliceFlag",
    "inject_flag",
    "visible_flags",
]

_TRUE_STRINGS = frozenset({"1", "t", "true", "y", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "f", "false", "n", "no", "off"})


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    raise ValueError(f"invalid boolean value {raw!r}")


def _names_validator(instance, attribute, value):
    if not value:
        raise ValueError("A flag requires at least one name.")


@frozen(kw_only=True)
class Flag:
    """Base flag specification.

    Subclasses define how a raw string is converted and folded into the running value.
    """

    # This can ONLY ever be a Tuple[str, ...] due to converter.
    names: str | Iterable[str] = field(converter=names_converter, validator=_names_validator)
    """
    Ordered aliases. The first is the canonical name.
    May be given as a comma-separated string: ``"port,p"``.
    """

    usage: str = ""
    """One-line help text."""

    env_var: str | None = None
    """Environment variable consulted when the flag is absent from the command line."""

    hidden: bool = False
    """Exclude from help pages and shell completion."""

    required: bool = False
    """Must be supplied on the command line or through :attr:`env_var`."""

    takes_value: ClassVar[bool] = True
    """Whether the flag consumes a value token."""

    type_name: ClassVar[str] = "value"

    @property
    def name(self) -> str:
        """Canonical name."""
        return self.names[0]  # pyright: ignore[reportIndexIssue]

    @property
    def default(self) -> Any:
        return getattr(self, "value", None)

    def display_names(self) -> tuple[str, ...]:
        return tuple(prefix_for(x) + x for x in self.names)

    def convert(self, raw: str) -> Any:
        return raw

    def apply(self, current: Any, raw: str, *, first: bool) -> Any:
        """Fold ``raw`` into the running value.

        ``first`` is :obj:`True` for the first occurrence at this parse, so
        accumulating flags can discard their default.
        """
        return self.convert(raw)

    def apply_env(self, raw: str) -> Any:
        return self.convert(raw)

    def __str__(self):
        names = ", ".join(self.display_names())
        placeholder = f" {self.type_name}" if self.takes_value else ""
        return f"{names}{placeholder}"


@frozen(kw_only=True)
class StringFlag(Flag):
    value: str = ""


@frozen(kw_only=True)
class IntFlag(Flag):
    value: int = 0

    def convert(self, raw: str) -> int:
        # Base auto-detection: "0x1F", "0o17", "0b11" are accepted.
        try:
            return int(raw, 0)
        except ValueError:
            return int(raw)


@frozen(kw_only=True)
class BoolFlag(Flag):
    value: bool = False

    takes_value: ClassVar[bool] = False

    def convert(self, raw: str) -> bool:
        return _parse_bool(raw)


@frozen(kw_only=True)
class StringSliceFlag(Flag):
    # This can ONLY ever be a Tuple[str, ...] due to converter.
    value: str | Iterable[str] = field(default=(), converter=to_tuple_converter)

    def convert(self, raw: str) -> tuple[str, ...]:
        return (raw,)

    def apply(self, current: Any, raw: str, *, first: bool) -> tuple[str, ...]:
        if first:
            return (raw,)
        return tuple(current) + (raw,)

    def apply_env(self, raw: str) -> tuple[str, ...]:
        return tuple(env_var_split(raw, delimiter=","))


def visible_flags(flags: Iterable[Flag]) -> list[Flag]:
    """Flags with ``hidden=False``, in declaration order."""
    return [flag for flag in flags if not flag.hidden]


def inject_flag(flags: list[Flag], flag: Flag) -> None:
    """Append a built-in ``flag`` unless a flag with its canonical name is already declared.

    Aliases claimed by a declared flag are dropped from the appended copy,
    so a user's ``-v`` keeps meaning ``--verbose`` next to ``--version``.
    """
    taken = {name for declared in flags for name in declared.names}
    if flag in flags or flag.name in taken:
        return
    names = tuple(name for name in flag.names if name not in taken)
    flags.append(flag if names == flag.names else evolve(flag, names=names))
