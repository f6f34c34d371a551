__version__ = "0.0.0"

__all__ = [
    "Action",
    "ActionKind",
    "App",
    "Args",
    "BoolFlag",
    "Command",
    "CommandCategories",
    "CommandCategory",
    "Context",
    "DispatchConfig",
    "ExitCoder",
    "ExitError",
    "Flag",
    "FlagDefinitionError",
    "FlagNormalizeError",
    "FlagParseError",
    "FlagSet",
    "GinError",
    "GinPanel",
    "IntFlag",
    "InvalidActionType",
    "ParseResult",
    "RequiredFlagMissing",
    "StringFlag",
    "StringSliceFlag",
    "Token",
    "UsageError",
    "action",
    "cli",
    "env_var_split",
    "exit_code_of",
    "handle_exit_coder",
]

from gincli._env_var import env_var_split
from gincli.action import Action, ActionKind, action
from gincli.category import CommandCategories, CommandCategory
from gincli.command import Command
from gincli.config import DispatchConfig
from gincli.context import Args, Context
from gincli.core import App
from gincli.exceptions import (
    ExitCoder,
    ExitError,
    FlagDefinitionError,
    FlagNormalizeError,
    FlagParseError,
    GinError,
    InvalidActionType,
    RequiredFlagMissing,
    UsageError,
    exit_code_of,
    handle_exit_coder,
)
from gincli.flag import BoolFlag, Flag, IntFlag, StringFlag, StringSliceFlag
from gincli.flag_set import FlagSet, ParseResult
from gincli.panel import GinPanel
from gincli.token import Token

# Lazy imports for opt-in features.
# These modules are only loaded when explicitly accessed by user code
_LAZY_IMPORTS = {
    "cli": "gincli.cli",  # The gin tool itself, built on this package
}


def __getattr__(name: str):
    """Lazy-load opt-in features."""
    if name in _LAZY_IMPORTS:
        import importlib

        module = importlib.import_module(_LAZY_IMPORTS[name])
        globals()[name] = module
        return module
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
