"""Classifier resolution for rescue handler entries.

Entries declared with a string name are resolved each time an error is
matched, relative to the subject's type, so a name declared on a superclass can
resolve to an exception type that only exists in a subclass.

## Name Resolution Priority Order

1. **Scope**: attributes of the subject's type (nested classes, inherited
   through the MRO), then the module globals where each class in the MRO was
   defined
2. **Global**: importable dotted paths (``"pkg.errors.Timeout"``) and builtins

A name that no strategy resolves is skipped, not an error, so entries can
reference optional dependencies that may not be installed.

## Usage Examples

```python
from rescuable.handler.resolver import ClassifierResolver, NameResolver

class RegistryNameResolver(NameResolver):
    def __init__(self, types):
        self.types = types

    def resolve_name(self, name, scope):
        return self.types.get(name)

resolver = ClassifierResolver([RegistryNameResolver({"Timeout": TimeoutError})])
classifier = resolver.resolve("Timeout", MyController)
```
"""

import builtins
import importlib
import logging
import sys
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Set, Tuple

from ..config import RescueConfig, parse_environment_variables
from .classifier import Classifier, as_classifier, is_matchable
from .registry import ClassifierKey

logger = logging.getLogger(__name__)

_MISSING = object()


class NameResolver(ABC):
    """Strategy that turns a classifier name into an object."""

    @abstractmethod
    def resolve_name(self, name: str, scope: type) -> Optional[Any]:
        """Look up ``name`` for a subject of type ``scope``.

        Returns:
            The object found, or None if this strategy cannot resolve the name
        """
        pass


def _split_name(name: str) -> Optional[List[str]]:
    # ".Foo", "Foo." and "a..b" can never name an attribute or a module
    parts = name.split(".")
    if not all(parts):
        return None
    return parts


def _walk_attributes(root: Any, parts: List[str]) -> Any:
    current = root
    for part in parts:
        current = getattr(current, part, _MISSING)
        if current is _MISSING:
            return _MISSING
    return current


class ScopeNameResolver(NameResolver):
    """Resolve names relative to the subject's type.

    ``"Error"`` finds ``Subject.Error`` (including classes nested in a base
    class), then a module-level ``Error`` next to any class in the MRO.
    Dotted names are walked attribute by attribute from the first hit.
    """

    def resolve_name(self, name: str, scope: type) -> Optional[Any]:
        parts = _split_name(name)
        if parts is None:
            return None

        found = _walk_attributes(scope, parts)
        if found is not _MISSING:
            return found

        seen: Set[str] = set()
        for klass in scope.__mro__:
            module_name = klass.__module__
            if module_name in seen:
                continue
            seen.add(module_name)

            module = sys.modules.get(module_name)
            if module is None:
                continue
            found = _walk_attributes(module, parts)
            if found is not _MISSING:
                return found

        return None


class GlobalNameResolver(NameResolver):
    """Resolve top-level names: importable dotted paths, then builtins."""

    def resolve_name(self, name: str, scope: type) -> Optional[Any]:
        parts = _split_name(name)
        if parts is None:
            return None

        # Longest importable module prefix wins, the rest is attribute access
        for split in range(len(parts) - 1, 0, -1):
            module_path = ".".join(parts[:split])
            try:
                module = importlib.import_module(module_path)
            except ImportError:
                # Missing or optional module - try a shorter prefix
                continue
            except Exception as e:
                # Broken module: the name stays unresolved like a missing one
                logger.debug(
                    f"Importing '{module_path}' for classifier '{name}' failed: "
                    f"{type(e).__name__}: {e}"
                )
                continue
            found = _walk_attributes(module, parts[split:])
            if found is not _MISSING:
                return found

        found = _walk_attributes(builtins, parts)
        if found is not _MISSING:
            return found
        return None


class ClassifierResolver:
    """Resolve stored classifier keys into Classifiers.

    Types and Classifier instances resolve to themselves. Names go through the
    name resolvers in priority order; the first matchable result wins.
    """

    def __init__(
        self,
        name_resolvers: Optional[List[NameResolver]] = None,
        config: Optional[RescueConfig] = None,
    ) -> None:
        """Initialize the classifier resolver.

        Args:
            name_resolvers: Strategies tried in order (defaults to scope, then global)
            config: Resolution options (defaults to the environment configuration)
        """
        if name_resolvers is None:
            name_resolvers = [ScopeNameResolver(), GlobalNameResolver()]
        self.name_resolvers = name_resolvers
        self.config = config or parse_environment_variables()
        self._reported: Set[Tuple[str, type]] = set()

    def resolve(self, key: ClassifierKey, scope: type) -> Optional[Classifier]:
        """Resolve ``key`` for a subject of type ``scope``.

        Returns:
            A Classifier, or None if the key is an unresolvable name
        """
        if not isinstance(key, str):
            return as_classifier(key)

        for name_resolver in self.name_resolvers:
            found = name_resolver.resolve_name(key, scope)
            if found is None:
                continue
            if is_matchable(found):
                return as_classifier(found)
            logger.debug(
                f"Classifier name '{key}' resolved to non-classifier {found!r}, skipping"
            )

        self._report_unresolved(key, scope)
        return None

    def matches(
        self, key: ClassifierKey, error: Optional[BaseException], scope: type
    ) -> bool:
        """Check whether ``error`` matches the classifier stored under ``key``."""
        if error is None:
            return False
        classifier = self.resolve(key, scope)
        return classifier is not None and classifier.matches(error)

    def _report_unresolved(self, name: str, scope: type) -> None:
        if not self.config.warn_unresolved:
            logger.debug(f"Classifier name '{name}' is unresolved for {scope.__name__}")
            return

        # Warn once per name and scope, dispatch may run many times
        if (name, scope) in self._reported:
            return
        self._reported.add((name, scope))
        logger.warning(
            f"Classifier name '{name}' does not resolve for {scope.__qualname__}; "
            "its rescue handlers will never run"
        )


# Global resolver instance
classifier_resolver = ClassifierResolver()
