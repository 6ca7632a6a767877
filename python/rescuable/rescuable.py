"""Declarative exception handling for classes.

Subclass ``Rescuable`` to centralize failure handling: register handlers per
exception classifier once, then hand captured errors to
``rescue_with_handler`` instead of repeating ``except`` blocks at every call
site.

```python
from rescuable import Rescuable, rescue_from

class Gate(Rescuable):
    class Breach(Exception):
        pass

    def __init__(self):
        self.log = []

    @rescue_from(Breach)
    def seal_doors(self):
        self.log.append("sealed")

    def open(self):
        try:
            self.force()
        except Exception as e:
            if self.rescue_with_handler(e) is None:
                raise

Gate.rescue_from(TimeoutError, handler="seal_doors")

@Gate.rescue_from("PowerFailure", ConnectionError)
def power_down(self, error):
    self.log.append(str(error))
```

Handlers are inherited. They are searched from bottom to top and from the
subclass up: the most recently declared entry whose classifier matches wins.
"""

from typing import Any, Callable, ClassVar, List, Optional, Tuple

from .exceptions import ConfigurationError
from .handler import dispatcher
from .handler.invoker import BoundHandler
from .handler.registry import HandlerRegistry, normalize_classifier
from .handler.resolver import ClassifierResolver
from .logging_config import logger

_RESCUE_ATTR = "__rescue_from__"


def rescue_from(*classifiers: Any) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark a method in a class body as the rescue handler for ``classifiers``.

    The method is registered by name when its ``Rescuable`` class is created,
    so subclasses overriding it change what runs. Decorators may be stacked;
    registrations keep source order.

    Raises:
        ConfigurationError: If a classifier is invalid (checked immediately)
    """
    for classifier in classifiers:
        normalize_classifier(classifier)

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        if not callable(func):
            raise ConfigurationError(
                f"@rescue_from can only decorate methods, got {func!r}"
            )
        declared: List[Tuple[Any, ...]] = list(getattr(func, _RESCUE_ATTR, []))
        declared.append(classifiers)
        setattr(func, _RESCUE_ATTR, declared)
        return func

    return decorator


class Rescuable:
    """Base class adding ``rescue_from`` handler registration.

    A subclass reads its parent's registry, including entries the parent
    registers later, until it registers handlers of its own. Its first
    registration copies the inherited entries and appends after them, so
    registering on a subclass never affects the parent.

    Attributes:
        rescue_handlers: Registry of handler entries for this class
        rescue_resolver: Classifier resolver used by this class's dispatches
            (None uses the global resolver)
    """

    rescue_handlers: ClassVar[HandlerRegistry] = HandlerRegistry()
    rescue_resolver: ClassVar[Optional[ClassifierResolver]] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        for attr_name, value in list(cls.__dict__.items()):
            declared = getattr(value, _RESCUE_ATTR, None)
            if not declared:
                continue
            # Stacked decorators apply bottom-up
            for classifiers in reversed(declared):
                cls._register_rescue_handlers(classifiers, attr_name)

        if "rescue_handlers" in cls.__dict__:
            logger.debug(
                "%s declared with %d rescue handler entries",
                cls.__qualname__,
                len(cls.rescue_handlers),
            )

    @classmethod
    def rescue_from(cls, *classifiers: Any, handler: Any = None) -> Any:
        """Register ``handler`` for exceptions matching ``classifiers``.

        Classifiers are exception classes, ``Classifier`` instances, or names
        resolved when an error is dispatched (relative to the subject's class,
        then globally). Unresolvable names are skipped.

        Handlers are method names on the subject, callables bound to the
        subject (``self`` is their first parameter), or a list of those run in
        order. Handlers declaring a parameter for it receive the error.

        Without ``handler``, returns a decorator registering the decorated
        function instead. Nothing is registered until that decorator is
        applied, so ``Host.rescue_from(KeyError)`` on its own is a no-op.

        Raises:
            ConfigurationError: On an invalid classifier or an empty handler
        """
        if handler is None:
            for classifier in classifiers:
                normalize_classifier(classifier)
            logger.debug(
                "%s.rescue_from called without a handler, registering on decoration",
                cls.__qualname__,
            )

            def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
                cls._register_rescue_handlers(classifiers, func)
                return func

            return decorator

        cls._register_rescue_handlers(classifiers, handler)
        return None

    @classmethod
    def _register_rescue_handlers(cls, classifiers: Tuple[Any, ...], handler: Any) -> None:
        if "rescue_handlers" in cls.__dict__:
            cls.rescue_handlers.register(classifiers, handler)
            return

        # First write: copy the inherited entries, assigned only once valid
        registry = cls.rescue_handlers.derive()
        registry.register(classifiers, handler)
        cls.rescue_handlers = registry

    def rescue_with_handler(self, error: BaseException) -> Optional[BaseException]:
        """Dispatch ``error`` to this object's rescue handlers.

        Falls back through the error's cause chain. Returns the handled error,
        or None when nothing matched; re-raise in that case.
        """
        return dispatcher.rescue_with_handler(error, self, type(self).rescue_resolver)

    def handlers_for_rescue(
        self, error: Optional[BaseException]
    ) -> Optional[List[BoundHandler]]:
        """Return the handlers bound to this object for ``error`` without running them."""
        return dispatcher.handlers_for_rescue(error, self, type(self).rescue_resolver)
