"""Classifiers decide whether a raised error belongs to a handler entry.

A plain exception type is its own classifier (``isinstance`` test, which also
honors metaclass ``__instancecheck__`` hooks). Anything else that wants to take
part in matching implements the ``Classifier`` interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Union


class Classifier(ABC):
    """Capability with a single membership test."""

    @abstractmethod
    def matches(self, error: BaseException) -> bool:
        """Return True if ``error`` is recognized by this classifier."""
        pass

    @property
    def name(self) -> str:
        """Display name stored as the registry key."""
        return type(self).__name__


class TypeClassifier(Classifier):
    """Adapter that matches errors by structural subtype test."""

    def __init__(self, error_type: type) -> None:
        self.error_type = error_type

    def matches(self, error: BaseException) -> bool:
        return isinstance(error, self.error_type)

    @property
    def name(self) -> str:
        return self.error_type.__qualname__

    def __repr__(self) -> str:
        return f"TypeClassifier({self.error_type.__qualname__})"


class PredicateClassifier(Classifier):
    """Adapter for a custom predicate function.

    Example:
        >>> weird = PredicateClassifier(lambda e: hasattr(e, "weird"), name="WeirdError")
        >>> class Ship(Rescuable): ...
        >>> Ship.rescue_from(weird, handler="panic")
    """

    def __init__(
        self, predicate: Callable[[BaseException], Any], name: Optional[str] = None
    ) -> None:
        self.predicate = predicate
        self._name = name or getattr(predicate, "__name__", type(predicate).__name__)

    def matches(self, error: BaseException) -> bool:
        return bool(self.predicate(error))

    @property
    def name(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"PredicateClassifier({self._name})"


def is_matchable(value: Any) -> bool:
    """Check whether ``value`` can be used directly as a classifier."""
    return isinstance(value, (type, Classifier))


def classifier_name(value: Union[type, Classifier]) -> str:
    """Return the display name of a type or Classifier."""
    if isinstance(value, type):
        return value.__qualname__
    return value.name


def as_classifier(value: Union[type, Classifier]) -> Classifier:
    """Wrap a plain type so types and custom classifiers match uniformly."""
    if isinstance(value, Classifier):
        return value
    return TypeClassifier(value)
