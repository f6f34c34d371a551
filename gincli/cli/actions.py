import logging
import os
import shlex
import sys
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Optional

from attrs import define, field

from gincli.cli.protocols import BuildError, Builder, BuilderFactory, BuildOptions, EnvBootstrap, Runner, RunnerFactory
from gincli.exceptions import ExitError

if TYPE_CHECKING:
    from rich.console import Console

    from gincli.context import Context

__all__ = ["GinActions", "build", "get_logger"]

LOGGER_NAME = "gin"


def get_logger(prefix: str = "gin") -> logging.Logger:
    """The tool's logger, writing ``[<prefix>] message`` lines to stdout.

    Calling again with a different prefix re-labels the existing handler.
    """
    logger = logging.getLogger(LOGGER_NAME)
    formatter = logging.Formatter(f"[{prefix}] %(message)s")
    handler = next((h for h in logger.handlers if h.get_name() == LOGGER_NAME), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(LOGGER_NAME)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    handler.setFormatter(formatter)
    return logger


def build(
    builder: Builder,
    runner: Runner,
    logger: logging.Logger,
    *,
    immediate: bool = False,
    console: Optional["Console"] = None,
) -> bool:
    """Build once; start the runner afterwards when ``immediate``.

    Parameters
    ----------
    console: Optional[~rich.console.Console]
        Where the compiler output of a failed build is printed, unprefixed.
        Defaults to a new stdout console.

    Returns
    -------
    bool
        Whether the build succeeded.
    """
    logger.info("Building...")
    try:
        builder.build()
    except BuildError:
        logger.info("Build failed")
        if console is None:
            from rich.console import Console

            console = Console()
        console.print(builder.errors(), markup=False, highlight=False, emoji=False, soft_wrap=True)
        return False

    logger.info("Build finished")
    if immediate:
        runner.run()
    return True


@define
class GinActions:
    """Actions of the gin tool, bound to their collaborators."""

    builder_factory: BuilderFactory
    runner_factory: RunnerFactory
    bootstrap: EnvBootstrap

    environ: MutableMapping[str, str] = field(factory=lambda: os.environ, kw_only=True)
    """Process environment that bootstrapped variables and ``PORT`` are written to."""

    cwd: str | None = field(default=None, kw_only=True)

    def main(self, ctx: "Context"):
        """Run the gin proxy in the current working directory."""
        logger = get_logger(ctx.get("logPrefix"))

        self.environ.update(self.bootstrap())

        app_port = str(ctx.get("appPort"))
        self.environ["PORT"] = app_port

        wd = self.cwd if self.cwd is not None else os.getcwd()

        try:
            build_args = shlex.split(ctx.get("buildArgs"))
        except ValueError as e:
            return ExitError(f"Invalid --buildArgs: {e}", 1)

        builder = self.builder_factory(
            BuildOptions(
                build_path=ctx.get("build") or ctx.get("path"),
                bin_name=ctx.get("bin"),
                godep=ctx.get("godep"),
                wd=wd,
                build_args=build_args,
            )
        )
        runner = self.runner_factory(os.path.join(wd, builder.binary()), tuple(ctx.args))

        logger.info("Proxy target http://localhost:%s", app_port)
        build(builder, runner, logger, immediate=ctx.get("immediate"), console=ctx.app.console)

    def env(self, ctx: "Context"):
        """Display environment variables set by the .env file."""
        get_logger(ctx.get("logPrefix"))

        for key, value in self.bootstrap().items():
            ctx.app.console.print(f"{key}: {value}", markup=False, highlight=False, emoji=False, soft_wrap=True)
