"""To prevent circular dependencies, this module should never import anything else from gincli."""

import inspect
import unicodedata
from collections.abc import Iterable
from typing import Any


def is_iterable(obj) -> bool:
    if isinstance(obj, list | tuple | set | dict):  # Fast path for common types
        return True
    return not isinstance(obj, str) and isinstance(obj, Iterable)


def to_tuple_converter(value: None | Any | Iterable[Any]) -> tuple[Any, ...]:
    """Convert a single element or an iterable of elements into a tuple.

    Intended to be used in an ``attrs.Field``. If :obj:`None` is provided, returns an empty tuple.
    If a single element is provided, returns a tuple containing just that element.
    If an iterable is provided, converts it into a tuple.

    Parameters
    ----------
    value: Any | Iterable[Any] | None
        An element, an iterable of elements, or None.

    Returns
    -------
    tuple[Any, ...]: A tuple containing the elements.
    """
    if value is None:
        return ()
    elif is_iterable(value):
        return tuple(value)
    else:
        return (value,)


def to_list_converter(value: None | Any | Iterable[Any]) -> list[Any]:
    return list(to_tuple_converter(value))


def names_converter(value: None | str | Iterable[str]) -> tuple[str, ...]:
    """Convert a flag/command name declaration into a tuple of names.

    A string may hold several comma-separated names (``"port,p"``).
    Surrounding whitespace and leading hyphens are removed from every name.
    """
    if value is None:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    names = tuple(x.strip().lstrip("-") for x in value)
    return tuple(x for x in names if x)


def prefix_for(name: str) -> str:
    """Hyphen prefix used when displaying a flag name: ``-p`` or ``--port``."""
    return "-" if len(name) == 1 else "--"


def lexicographic_key(s: str) -> tuple[str, str]:
    """Case-insensitive sort key; ties broken by the exact string."""
    return (unicodedata.normalize("NFKD", s).casefold(), s)


def accepts_single_positional(func) -> bool:
    """Whether ``func`` can be called with exactly one positional argument."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures; assume the best.
        return True
    try:
        signature.bind(None)
    except TypeError:
        return False
    return True
