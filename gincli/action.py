"""Actions: the callables run by an :class:`~gincli.App` or :class:`~gincli.Command`.

Three call shapes are supported, all taking the :class:`~gincli.Context` as the only positional argument:

* :attr:`ActionKind.ACTION_FUNC` – wrapped explicitly with :func:`action` (or :class:`Action`).
  Failure is reported by raising, or by returning an exception instance.
* :attr:`ActionKind.ERROR_FUNC` – any other plain callable; identical semantics.
* :attr:`ActionKind.LEGACY` – callables annotated ``-> None``. The return value is ignored.
  Deprecated; a :class:`DeprecationWarning` is issued at registration.

The shape is resolved once, when the action is registered, so an unsupported
object is rejected before the application ever runs.
"""

import inspect
import warnings
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from attrs import frozen

from gincli.exceptions import InvalidActionType
from gincli.utils import accepts_single_positional

if TYPE_CHECKING:
    from gincli.context import Context

__all__ = [
    "Action",
    "ActionKind",
    "action",
    "as_action",
]


class ActionKind(Enum):
    ACTION_FUNC = "action_func"
    ERROR_FUNC = "error_func"
    LEGACY = "legacy"


@frozen
class Action:
    func: Callable[["Context"], Any]
    kind: ActionKind = ActionKind.ACTION_FUNC

    def __call__(self, context: "Context") -> BaseException | None:
        """Invoke the action.

        Returns
        -------
        BaseException | None
            The error returned by the action, if any. Raised errors propagate.
        """
        result = self.func(context)
        if self.kind is ActionKind.LEGACY:
            return None
        if isinstance(result, BaseException):
            return result
        return None


def _returns_none(func) -> bool:
    try:
        annotation = inspect.signature(func).return_annotation
    except (TypeError, ValueError):
        return False
    return annotation is None or annotation == "None"


def as_action(obj: Any) -> Action | None:
    """Resolve ``obj`` into an :class:`Action`.

    Intended to be used as an ``attrs.Field`` converter.

    Raises
    ------
    InvalidActionType
        ``obj`` is neither :obj:`None`, an :class:`Action`, nor a callable accepting a single positional argument.
    """
    if obj is None or isinstance(obj, Action):
        return obj
    if not callable(obj) or isinstance(obj, type) or not accepts_single_positional(obj):
        raise InvalidActionType(obj)
    if _returns_none(obj):
        warnings.warn(
            f"Action {getattr(obj, '__name__', obj)!r} is annotated to return None; "
            "this signature is deprecated, return an error (or None) instead.",
            DeprecationWarning,
            stacklevel=3,
        )
        return Action(obj, ActionKind.LEGACY)
    return Action(obj, ActionKind.ERROR_FUNC)


def action(func: Callable[["Context"], Any]) -> Action:
    """Decorator marking ``func`` as an :attr:`ActionKind.ACTION_FUNC`.

    .. code-block:: python

        @action
        def serve(ctx):
            ...
    """
    if not callable(func) or not accepts_single_positional(func):
        raise InvalidActionType(func)
    return Action(func, ActionKind.ACTION_FUNC)
