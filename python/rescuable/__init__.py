"""Declarative exception routing for Python classes.

Core API:
- Rescuable: base class providing rescue_from / rescue_with_handler
- rescue_from: class-body decorator for handler methods

Web integration should be imported from its submodule:
- FastAPI: from rescuable.fastapi import RequestRescuer, install_rescue_middleware
"""

from .exceptions import ConfigurationError, HandlerNotFoundError, RescuableError
from .handler import (
    Classifier,
    ClassifierResolver,
    HandlerRegistry,
    NameResolver,
    PredicateClassifier,
)
from .rescuable import Rescuable, rescue_from

__version__ = "0.1.0"

__all__ = [
    "Classifier",
    "ClassifierResolver",
    "ConfigurationError",
    "HandlerNotFoundError",
    "HandlerRegistry",
    "NameResolver",
    "PredicateClassifier",
    "Rescuable",
    "RescuableError",
    "rescue_from",
]
