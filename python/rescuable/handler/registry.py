"""Handler registry for managing rescue handlers declared on a type."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Iterator, List, Sequence, Tuple, Union

from ..exceptions import ConfigurationError
from .classifier import Classifier, classifier_name, is_matchable

logger = logging.getLogger(__name__)

# A method name looked up on the subject, or a callable bound to the subject.
HandlerRef = Union[str, Callable[..., Any]]
ClassifierKey = Union[str, type, Classifier]


@dataclass(frozen=True)
class HandlerEntry:
    """One (classifier, handlers) pair.

    Attributes:
        key: Display name of the classifier, used for inspection and logging
        classifier: The type or Classifier itself, or a name resolved at match time
        handlers: Handlers invoked in order when the classifier matches
    """

    key: str
    classifier: ClassifierKey
    handlers: Tuple[HandlerRef, ...]


def normalize_handlers(handler: Any) -> Tuple[HandlerRef, ...]:
    """Validate a handler spec and return it as a tuple of handler references.

    Args:
        handler: A method name, a callable, or a list/tuple of those

    Raises:
        ConfigurationError: If the spec is empty or contains anything else
    """
    if handler is None or (isinstance(handler, str) and not handler):
        raise ConfigurationError(
            "Need a handler. Pass the handler argument or use rescue_from as a decorator."
        )

    refs: Sequence[Any]
    if isinstance(handler, (list, tuple)):
        if not handler:
            raise ConfigurationError(
                "Need a handler. An empty handler list was given."
            )
        refs = handler
    else:
        refs = (handler,)

    for ref in refs:
        if isinstance(ref, str):
            if not ref:
                raise ConfigurationError("Handler method names must not be empty")
        elif not callable(ref):
            raise ConfigurationError(
                f"{ref!r} must be a method name or a callable to be used as a handler"
            )
    return tuple(refs)


def normalize_classifier(value: Any) -> Tuple[str, ClassifierKey]:
    """Validate a classifier and return its (display name, stored key).

    Types and Classifier instances are kept as-is; strings are stored verbatim
    and resolved when an error is matched.

    Raises:
        ConfigurationError: If ``value`` is neither a type, a string nor a Classifier
    """
    if isinstance(value, str):
        if not value:
            raise ConfigurationError("Classifier names must not be empty")
        return value, value
    if is_matchable(value):
        return classifier_name(value), value
    raise ConfigurationError(
        f"{value!r} must be an exception class, a Classifier or a string "
        "referencing an exception class"
    )


class HandlerRegistry:
    """Ordered, append-only list of handler entries owned by one type.

    Entries live in a tuple, so a registry derived from a parent never shares
    mutable state with it: appending rebinds the child's tuple only.
    """

    def __init__(self, entries: Iterable[HandlerEntry] = ()) -> None:
        self._entries: Tuple[HandlerEntry, ...] = tuple(entries)

    def derive(self) -> "HandlerRegistry":
        """Create a registry for a subtype, starting from this one's entries."""
        return HandlerRegistry(self._entries)

    def register(self, classifiers: Sequence[Any], handler: Any) -> None:
        """Append one entry per classifier, each carrying the same handlers.

        Everything is validated before anything is appended, so a failed call
        leaves the registry untouched.

        Args:
            classifiers: Exception types, Classifier instances or names
            handler: A method name, a callable, or a list/tuple of those

        Raises:
            ConfigurationError: On an invalid classifier or handler
        """
        handlers = normalize_handlers(handler)
        keys = [normalize_classifier(classifier) for classifier in classifiers]

        new_entries = tuple(
            HandlerEntry(key=key, classifier=classifier, handlers=handlers)
            for key, classifier in keys
        )
        # Appended at the end: the list is searched in reverse
        self._entries = self._entries + new_entries

        for entry in new_entries:
            logger.debug(
                "Registered rescue handler %s -> %s",
                entry.key,
                [_handler_name(ref) for ref in handlers],
            )

    @property
    def entries(self) -> Tuple[HandlerEntry, ...]:
        """All entries in declaration order."""
        return self._entries

    def keys(self) -> List[str]:
        """List classifier display names in declaration order."""
        return [entry.key for entry in self._entries]

    def __iter__(self) -> Iterator[HandlerEntry]:
        return iter(self._entries)

    def __reversed__(self) -> Iterator[HandlerEntry]:
        return reversed(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"HandlerRegistry({self.keys()!r})"


def _handler_name(ref: HandlerRef) -> str:
    if isinstance(ref, str):
        return ref
    return getattr(ref, "__qualname__", repr(ref))
