"""Unit tests for matching and cause-chain dispatch."""

from unittest.mock import Mock

import pytest

from rescuable import Rescuable
from rescuable.config import RescueConfig
from rescuable.handler.dispatcher import (
    cause_of,
    dispatch,
    find_match,
    handlers_for_rescue,
    rescue_with_handler,
)
from rescuable.handler.registry import HandlerRegistry
from rescuable.handler.resolver import ClassifierResolver


class Breach(Exception):
    pass


class HullBreach(Breach):
    pass


class Ship(Rescuable):
    def __init__(self):
        self.calls = []

    def patch_hull(self, error):
        self.calls.append(("patch_hull", error))


Ship.rescue_from(Breach, handler="patch_hull")


@pytest.fixture
def resolver():
    return ClassifierResolver(config=RescueConfig(warn_unresolved=False))


class TestCauseOf:
    """Test which error counts as the cause."""

    def test_explicit_cause(self):
        cause = KeyError("root")
        error = RuntimeError("wrapper")
        error.__cause__ = cause

        assert cause_of(error) is cause

    def test_implicit_context(self):
        try:
            try:
                raise KeyError("root")
            except KeyError:
                raise RuntimeError("wrapper")
        except RuntimeError as e:
            error = e

        assert isinstance(cause_of(error), KeyError)

    def test_suppressed_context(self):
        try:
            try:
                raise KeyError("root")
            except KeyError:
                raise RuntimeError("wrapper") from None
        except RuntimeError as e:
            error = e

        assert cause_of(error) is None

    def test_no_cause(self):
        assert cause_of(RuntimeError("alone")) is None


class TestFindMatch:
    """Test reverse-order matching over a registry."""

    def test_latest_matching_entry_wins(self, resolver):
        registry = HandlerRegistry()
        registry.register([HullBreach], "narrow")
        registry.register([Breach], "broad")

        assert find_match(registry, HullBreach(), Ship, resolver) == ["broad"]

    def test_earlier_entry_used_when_later_does_not_match(self, resolver):
        registry = HandlerRegistry()
        registry.register([Breach], "breach")
        registry.register([KeyError], "key")

        assert find_match(registry, HullBreach(), Ship, resolver) == ["breach"]

    def test_no_match(self, resolver):
        registry = HandlerRegistry()
        registry.register([KeyError], "key")

        assert find_match(registry, Breach(), Ship, resolver) is None

    def test_none_error(self, resolver):
        registry = HandlerRegistry()
        registry.register([Exception], "anything")

        assert find_match(registry, None, Ship, resolver) is None

    def test_unresolved_names_are_skipped(self, resolver):
        registry = HandlerRegistry()
        registry.register([Breach], "breach")
        registry.register(["NoSuchError"], "never")

        assert find_match(registry, Breach(), Ship, resolver) == ["breach"]


class TestDispatch:
    """Test handler invocation and cause-chain fallback."""

    def test_handles_direct_match(self, resolver):
        ship = Ship()
        error = HullBreach("port side")

        assert dispatch(error, ship, set(), resolver) is error
        assert ship.calls == [("patch_hull", error)]

    def test_falls_back_one_level(self, resolver):
        ship = Ship()
        cause = Breach("root")
        error = RuntimeError("wrapper")
        error.__cause__ = cause

        assert rescue_with_handler(error, ship, resolver) is cause
        assert ship.calls == [("patch_hull", cause)]

    def test_falls_back_several_levels(self, resolver):
        ship = Ship()
        root = Breach("root")
        middle = ValueError("middle")
        middle.__cause__ = root
        top = RuntimeError("top")
        top.__cause__ = middle

        assert rescue_with_handler(top, ship, resolver) is root

    def test_direct_match_preferred_over_cause(self, resolver):
        ship = Ship()
        error = Breach("outer")
        error.__cause__ = Breach("inner")

        assert rescue_with_handler(error, ship, resolver) is error
        assert len(ship.calls) == 1

    def test_unhandled_without_cause(self, resolver):
        ship = Ship()

        assert rescue_with_handler(KeyError("x"), ship, resolver) is None
        assert ship.calls == []

    def test_none_error(self, resolver):
        assert dispatch(None, Ship(), set(), resolver) is None

    def test_two_error_cycle_terminates(self, resolver):
        first = RuntimeError("first")
        second = RuntimeError("second")
        first.__cause__ = second
        second.__cause__ = first

        assert rescue_with_handler(first, Ship(), resolver) is None

    def test_self_cycle_terminates(self, resolver):
        error = RuntimeError("self")
        error.__cause__ = error

        assert rescue_with_handler(error, Ship(), resolver) is None

    def test_cycle_with_handleable_member_is_handled(self, resolver):
        ship = Ship()
        first = RuntimeError("first")
        second = Breach("second")
        first.__cause__ = second
        second.__cause__ = first

        assert rescue_with_handler(first, ship, resolver) is second

    def test_visited_set_records_examined_errors(self, resolver):
        visited = set()
        first = RuntimeError("first")
        second = KeyError("second")
        first.__cause__ = second

        dispatch(first, Ship(), visited, resolver)

        assert visited == {id(first), id(second)}

    def test_visited_uses_identity_not_equality(self, resolver):
        class AlwaysEqual(Exception):
            def __eq__(self, other):
                return True

            def __hash__(self):
                return 0

        ship = Ship()
        root = Breach("root")
        top = AlwaysEqual("top")
        top.__cause__ = AlwaysEqual("middle")
        top.__cause__.__cause__ = root

        assert rescue_with_handler(top, ship, resolver) is root

    def test_handler_error_propagates(self, resolver):
        class Fragile(Rescuable):
            pass

        Fragile.rescue_from(Breach, handler=Mock(side_effect=OSError("disk full")))

        with pytest.raises(OSError, match="disk full"):
            rescue_with_handler(Breach(), Fragile(), resolver)


class TestHandlersForRescue:
    """Test lookup without invocation."""

    def test_binds_to_subject(self, resolver):
        ship = Ship()

        handlers = handlers_for_rescue(Breach(), ship, resolver)

        assert [handler.subject for handler in handlers] == [ship]
        assert ship.calls == []

    def test_no_handlers(self, resolver):
        assert handlers_for_rescue(KeyError(), Ship(), resolver) is None
