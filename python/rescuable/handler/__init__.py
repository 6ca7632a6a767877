"""Rescue handler registry and dispatch."""

from .classifier import Classifier, PredicateClassifier, TypeClassifier
from .dispatcher import (
    cause_of,
    dispatch,
    find_match,
    handlers_for_rescue,
    rescue_with_handler,
)
from .invoker import BoundHandler, HandlerSignature, bind
from .registry import HandlerEntry, HandlerRegistry
from .resolver import (
    ClassifierResolver,
    GlobalNameResolver,
    NameResolver,
    ScopeNameResolver,
    classifier_resolver,
)

__all__ = [
    "BoundHandler",
    "Classifier",
    "ClassifierResolver",
    "GlobalNameResolver",
    "HandlerEntry",
    "HandlerRegistry",
    "HandlerSignature",
    "NameResolver",
    "PredicateClassifier",
    "ScopeNameResolver",
    "TypeClassifier",
    "bind",
    "cause_of",
    "classifier_resolver",
    "dispatch",
    "find_match",
    "handlers_for_rescue",
    "rescue_with_handler",
]
