"""Binding of handler references to a subject.

A handler reference is either a method name looked up on the subject or a
callable that runs with the subject as its receiver (it is bound like a method,
so ``self`` is the subject). Either way the bound handler is called with the
error if it declares a parameter for it, and without it otherwise.

Example:
    >>> class Door(Rescuable):
    ...     def seal(self):
    ...         self.sealed = True
    ...
    >>> bound = bind("seal", Door())
    >>> bound.signature
    <HandlerSignature.NO_ARGS: 'no_args'>
    >>> bound(RuntimeError("breach"))  # error is dropped for NO_ARGS handlers
"""

import inspect
import types
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from ..exceptions import HandlerNotFoundError
from .registry import HandlerRef

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL,
)


class HandlerSignature(str, Enum):
    """How a bound handler is called."""

    NO_ARGS = "no_args"
    ERROR_ARG = "error_arg"


def signature_of(func: Callable[..., Any]) -> HandlerSignature:
    """Determine whether ``func`` accepts the error as a positional argument.

    Callables whose signature cannot be inspected (some builtins) are assumed
    to accept the error.
    """
    try:
        parameters = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return HandlerSignature.ERROR_ARG

    if any(param.kind in _POSITIONAL_KINDS for param in parameters):
        return HandlerSignature.ERROR_ARG
    return HandlerSignature.NO_ARGS


@dataclass(frozen=True)
class BoundHandler:
    """A handler bound to its subject, callable with the error.

    Attributes:
        func: The bound callable
        signature: Whether ``func`` receives the error
        subject: The object the handler runs against
    """

    func: Callable[..., Any]
    signature: HandlerSignature
    subject: Any

    def __call__(self, error: BaseException) -> Any:
        if self.signature is HandlerSignature.NO_ARGS:
            return self.func()
        return self.func(error)

    @property
    def name(self) -> str:
        return getattr(self.func, "__name__", repr(self.func))


def _bind_callable(handler: Callable[..., Any], subject: Any) -> Callable[..., Any]:
    # Plain functions and lambdas run as if they were methods of the subject
    if isinstance(handler, types.FunctionType):
        try:
            parameters = inspect.signature(handler).parameters.values()
        except (TypeError, ValueError):
            return types.MethodType(handler, subject)
        if any(param.kind in _POSITIONAL_KINDS for param in parameters):
            return types.MethodType(handler, subject)
    # Already-bound methods, partials and callable objects are used as given
    return handler


def bind(handler: HandlerRef, subject: Any) -> BoundHandler:
    """Bind a handler reference to ``subject``.

    Args:
        handler: A method name or a callable
        subject: The object the handler runs against

    Returns:
        A BoundHandler whose signature was determined once, here

    Raises:
        HandlerNotFoundError: If a method name does not exist on ``subject``
    """
    if isinstance(handler, str):
        method = getattr(subject, handler, None)
        if method is None or not callable(method):
            raise HandlerNotFoundError(subject, handler)
        func = method
    else:
        func = _bind_callable(handler, subject)

    return BoundHandler(func=func, signature=signature_of(func), subject=subject)
