import os
from collections.abc import Mapping

from attrs import field, frozen

__all__ = ["DispatchConfig"]

ZSH_COMPLETION_ENV_VAR = "_CLI_ZSH_AUTOCOMPLETE_HACK"


@frozen(kw_only=True)
class DispatchConfig:
    """Per-invocation settings handed to :meth:`App.run <gincli.App.run>`.

    Everything the dispatch engine would otherwise read from the process
    environment lives here, so a run is fully determined by its arguments.
    """

    shell_complete_flag: str = "generate-bash-completion"
    """Name of the trailing flag (without ``--``) that switches a run into completion mode."""

    zsh_completion: bool = False
    """Emit completion candidates as ``name:usage`` pairs instead of bare names."""

    environ: Mapping[str, str] | None = field(default=None, eq=False, hash=False)
    """Environment consulted for flag ``env_var`` fallback. :obj:`None` means :obj:`os.environ`."""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **kwargs) -> "DispatchConfig":
        """Build a config from the process environment.

        Honors ``_CLI_ZSH_AUTOCOMPLETE_HACK=1``.
        """
        source = os.environ if environ is None else environ
        kwargs.setdefault("zsh_completion", source.get(ZSH_COMPLETION_ENV_VAR) == "1")
        return cls(environ=environ, **kwargs)

    def resolve_environ(self) -> Mapping[str, str]:
        return os.environ if self.environ is None else self.environ
