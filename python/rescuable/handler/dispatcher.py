"""Dispatch of raised errors to registered rescue handlers.

Handlers are searched from the most recently declared entry to the first, so
later declarations (including a subclass's, which are appended after the
inherited ones) take priority. There is no ranking between classifiers beyond
that order.

If no handler matches an error, its cause is tried next. In Python the cause
is ``__cause__`` (``raise ... from ...``) or, failing that, the implicit
``__context__`` unless it was suppressed. Each error is visited at most once
per dispatch, so cyclic cause chains terminate as unhandled.
"""

import logging
from typing import Any, List, Optional, Set

from .invoker import BoundHandler, bind
from .registry import HandlerRef, HandlerRegistry
from .resolver import ClassifierResolver, classifier_resolver

logger = logging.getLogger(__name__)


def cause_of(error: BaseException) -> Optional[BaseException]:
    """Return the error that led to ``error``, or None."""
    if error.__cause__ is not None:
        return error.__cause__
    if error.__suppress_context__:
        return None
    return error.__context__


def find_match(
    registry: HandlerRegistry,
    error: Optional[BaseException],
    scope: type,
    resolver: Optional[ClassifierResolver] = None,
) -> Optional[List[HandlerRef]]:
    """Find the handlers of the last-declared entry matching ``error``.

    Args:
        registry: Entries to search, in declaration order
        error: The error to match; None never matches
        scope: The subject's type, used to resolve classifier names
        resolver: Classifier resolver (defaults to the global resolver)

    Returns:
        The matching entry's handler references, or None if nothing matches
    """
    if error is None:
        return None

    resolver = resolver or classifier_resolver
    for entry in reversed(registry):
        if resolver.matches(entry.classifier, error, scope):
            logger.debug(
                f"{type(error).__name__} matched rescue entry '{entry.key}' "
                f"on {scope.__name__}"
            )
            return list(entry.handlers)
    return None


def handlers_for_rescue(
    error: Optional[BaseException],
    subject: Any,
    resolver: Optional[ClassifierResolver] = None,
) -> Optional[List[BoundHandler]]:
    """Resolve the handlers for ``error`` and bind them to ``subject``.

    Only ``error`` itself is matched; its cause chain is not consulted.

    Returns:
        Bound handlers ready to be called with ``error``, or None
    """
    scope = type(subject)
    handler_refs = find_match(scope.rescue_handlers, error, scope, resolver)
    if not handler_refs:
        return None
    return [bind(ref, subject) for ref in handler_refs]


def dispatch(
    error: Optional[BaseException],
    subject: Any,
    visited: Set[int],
    resolver: Optional[ClassifierResolver] = None,
) -> Optional[BaseException]:
    """Run the handlers for ``error``, falling back through its causes.

    Args:
        error: The error to handle, or None
        subject: The object handlers run against
        visited: Identities of errors already examined in this dispatch
        resolver: Classifier resolver (defaults to the global resolver)

    Returns:
        The error that was handled (``error`` or one of its causes), or None
    """
    if error is None:
        return None
    visited.add(id(error))

    handlers = handlers_for_rescue(error, subject, resolver)
    if handlers:
        # Handler failures propagate to the caller untouched
        for handler in handlers:
            handler(error)
        return error

    cause = cause_of(error)
    if cause is None:
        return None
    if id(cause) in visited:
        logger.debug(
            f"Cause chain of {type(error).__name__} loops back to an examined "
            "error, giving up"
        )
        return None

    logger.debug(
        f"No rescue handler for {type(error).__name__}, trying its cause "
        f"{type(cause).__name__}"
    )
    return dispatch(cause, subject, visited, resolver)


def rescue_with_handler(
    error: BaseException,
    subject: Any,
    resolver: Optional[ClassifierResolver] = None,
) -> Optional[BaseException]:
    """Dispatch ``error`` to the rescue handlers of ``subject``'s type.

    Errors are never caught or suppressed here: the caller captures the error
    and must re-raise it when this returns None.

        try:
            ...
        except Exception as e:
            if rescue_with_handler(e, self) is None:
                raise

    Returns:
        The handled error, or None if no handler matched it or any of its causes
    """
    handled = dispatch(error, subject, set(), resolver)
    if handled is None:
        logger.debug(
            f"{type(error).__name__} is unhandled by {type(subject).__name__}"
        )
    return handled
