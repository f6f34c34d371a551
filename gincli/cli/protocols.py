"""Contracts of the collaborators the gin tool drives.

Implementations live outside this package; the dispatch engine only ever
reaches them through these narrow interfaces.
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from attrs import field, frozen

from gincli.exceptions import GinError
from gincli.utils import to_tuple_converter

__all__ = [
    "BuildError",
    "BuildOptions",
    "Builder",
    "BuilderFactory",
    "EnvBootstrap",
    "Runner",
    "RunnerFactory",
]


class BuildError(GinError):
    """The build failed; :meth:`Builder.errors` holds the compiler output."""


@frozen(kw_only=True)
class BuildOptions:
    """Everything a :class:`Builder` needs to know, gathered from the command line."""

    build_path: str = "."
    bin_name: str = "gin-bin"
    godep: bool = False
    wd: str = "."
    # This can ONLY ever be a Tuple[str, ...] due to converter.
    build_args: Sequence[str] = field(default=(), converter=to_tuple_converter)


@runtime_checkable
class Builder(Protocol):
    def build(self) -> None:
        """Build the binary. Raises :class:`BuildError` on failure."""
        ...

    def binary(self) -> str:
        """File name of the built binary, relative to the working directory."""
        ...

    def errors(self) -> str:
        """Output of the last failed build."""
        ...


@runtime_checkable
class Runner(Protocol):
    def run(self) -> Any:
        """Start the binary. May block for the lifetime of the process."""
        ...

    def kill(self) -> None: ...


EnvBootstrap = Callable[[], Mapping[str, str]]
"""Produces the environment variables declared by the project (e.g. from a ``.env`` file)."""

BuilderFactory = Callable[[BuildOptions], Builder]
RunnerFactory = Callable[[str, Sequence[str]], Runner]
