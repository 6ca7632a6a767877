"""Exceptions raised by rescuable itself.

Errors routed through ``rescue_with_handler`` are never wrapped in these; they
only describe misuse of the registration API and of bound handlers.
"""


class RescuableError(Exception):
    """Base exception for all rescuable errors."""

    pass


class ConfigurationError(RescuableError, ValueError):
    """Raised when ``rescue_from`` or the environment configuration is misused.

    Raised at registration time, never deferred to dispatch:
    - a classifier that is neither a type, a string nor a Classifier
    - a missing or empty handler
    - a handler list element that is neither a method name nor a callable
    """

    pass


class HandlerNotFoundError(RescuableError, AttributeError):
    """Raised when a handler registered by method name is missing on the subject."""

    def __init__(self, subject: object, method_name: str) -> None:
        self.subject = subject
        self.method_name = method_name
        super().__init__(
            f"{type(subject).__name__} has no rescue handler method '{method_name}'"
        )
