"""The gin live-reload tool's command line, built on :mod:`gincli`."""

from collections.abc import MutableMapping

from gincli.cli.actions import GinActions, build, get_logger
from gincli.cli.protocols import (
    BuildError,
    Builder,
    BuilderFactory,
    BuildOptions,
    EnvBootstrap,
    Runner,
    RunnerFactory,
)
from gincli.command import Command
from gincli.core import App
from gincli.flag import BoolFlag, IntFlag, StringFlag, StringSliceFlag

__all__ = [
    "BuildError",
    "BuildOptions",
    "Builder",
    "BuilderFactory",
    "EnvBootstrap",
    "GinActions",
    "Runner",
    "RunnerFactory",
    "build",
    "create_app",
    "get_logger",
]


def gin_flags() -> list:
    return [
        StringFlag(names="laddr,l", env_var="GIN_LADDR", usage="listening address for the proxy server"),
        IntFlag(names="port,p", value=3000, env_var="GIN_PORT", usage="port for the proxy server"),
        IntFlag(names="appPort,a", value=3001, env_var="BIN_APP_PORT", usage="port for the Go web server"),
        StringFlag(names="bin,b", value="gin-bin", env_var="GIN_BIN", usage="name of generated binary file"),
        StringFlag(names="path,t", value=".", env_var="GIN_PATH", usage="Path to watch files from"),
        StringFlag(
            names="build,d",
            env_var="GIN_BUILD",
            usage="Path to build files from (defaults to same value as --path)",
        ),
        StringSliceFlag(names="excludeDir,x", env_var="GIN_EXCLUDE_DIR", usage="Relative directories to exclude"),
        BoolFlag(names="immediate,i", env_var="GIN_IMMEDIATE", usage="run the server immediately after it's built"),
        BoolFlag(
            names="all",
            env_var="GIN_ALL",
            usage="reloads whenever any file changes, as opposed to reloading only on .go file change",
        ),
        BoolFlag(names="godep,g", env_var="GIN_GODEP", usage="use godep when building"),
        StringFlag(names="buildArgs", env_var="GIN_BUILD_ARGS", usage="Additional go build arguments"),
        StringFlag(names="certFile", env_var="GIN_CERT_FILE", usage="TLS Certificate"),
        StringFlag(names="keyFile", env_var="GIN_KEY_FILE", usage="TLS Certificate Key"),
        StringFlag(names="logPrefix", value="gin", env_var="GIN_LOG_PREFIX", usage="Log prefix"),
    ]


def create_app(
    builder_factory: BuilderFactory,
    runner_factory: RunnerFactory,
    bootstrap: EnvBootstrap,
    *,
    environ: MutableMapping[str, str] | None = None,
    cwd: str | None = None,
    **kwargs,
) -> App:
    """Assemble the ``gin`` application around its collaborators.

    Parameters
    ----------
    builder_factory: BuilderFactory
        Creates the :class:`Builder` from the parsed :class:`BuildOptions`.
    runner_factory: RunnerFactory
        Creates the :class:`Runner` from the binary path and the remaining arguments.
    bootstrap: EnvBootstrap
        Produces the project's environment variables.
    environ: MutableMapping[str, str] | None
        Environment that bootstrapped variables are written to. Defaults to :obj:`os.environ`.
    cwd: str | None
        Working directory for builds. Defaults to :func:`os.getcwd` at run time.
    **kwargs
        Forwarded to :class:`~gincli.App` (e.g. ``console``).
    """
    actions_kwargs = {"cwd": cwd}
    if environ is not None:
        actions_kwargs["environ"] = environ
    actions = GinActions(builder_factory, runner_factory, bootstrap, **actions_kwargs)

    return App(
        "gin",
        "A live reload utility for Go web applications.",
        action=actions.main,
        flags=gin_flags(),
        commands=[
            Command("run", aliases="r", action=actions.main, skip_flag_parsing=True),
            Command("env", aliases="e", action=actions.env),
        ],
        **kwargs,
    )
