"""Unit tests for classifier name resolution."""

from unittest.mock import patch

import pytest

from rescuable.config import RescueConfig
from rescuable.handler.classifier import PredicateClassifier, TypeClassifier
from rescuable.handler.resolver import (
    ClassifierResolver,
    GlobalNameResolver,
    NameResolver,
    ScopeNameResolver,
)


class SiteError(Exception):
    pass


class Outpost:
    class Meltdown(Exception):
        pass

    not_a_classifier = "just a string"


class RemoteOutpost(Outpost):
    class Flood(Exception):
        pass


class TestScopeNameResolver:
    """Test lookup relative to the subject's type."""

    def setup_method(self):
        self.resolver = ScopeNameResolver()

    def test_nested_class_on_scope(self):
        assert self.resolver.resolve_name("Flood", RemoteOutpost) is RemoteOutpost.Flood

    def test_nested_class_inherited_from_base(self):
        assert self.resolver.resolve_name("Meltdown", RemoteOutpost) is Outpost.Meltdown

    def test_nested_class_of_subclass_invisible_from_base(self):
        assert self.resolver.resolve_name("Flood", Outpost) is None

    def test_module_global_of_scope(self):
        assert self.resolver.resolve_name("SiteError", Outpost) is SiteError

    def test_dotted_name(self):
        assert (
            self.resolver.resolve_name("RemoteOutpost.Flood", Outpost)
            is RemoteOutpost.Flood
        )

    def test_unknown_name(self):
        assert self.resolver.resolve_name("NoSuchError", Outpost) is None

    @pytest.mark.parametrize("name", [".Meltdown", "Meltdown.", "RemoteOutpost..Flood"])
    def test_malformed_dotted_name_is_unresolved(self, name):
        assert self.resolver.resolve_name(name, RemoteOutpost) is None


class TestGlobalNameResolver:
    """Test lookup of importable paths and builtins."""

    def setup_method(self):
        self.resolver = GlobalNameResolver()

    def test_builtin(self):
        assert self.resolver.resolve_name("ValueError", Outpost) is ValueError

    def test_module_attribute(self):
        import json

        assert (
            self.resolver.resolve_name("json.JSONDecodeError", Outpost)
            is json.JSONDecodeError
        )

    def test_nested_path_inside_module(self):
        name = f"{__name__}.Outpost.Meltdown"

        assert self.resolver.resolve_name(name, object) is Outpost.Meltdown

    def test_missing_module_is_unresolved(self):
        assert self.resolver.resolve_name("no_such_package_xyz.Error", Outpost) is None

    def test_missing_attribute_is_unresolved(self):
        assert self.resolver.resolve_name("json.NoSuchError", Outpost) is None

    @pytest.mark.parametrize("name", [".Foo", "..Foo", "Foo.", "json..JSONDecodeError", "."])
    def test_malformed_dotted_name_is_unresolved(self, name):
        assert self.resolver.resolve_name(name, Outpost) is None

    def test_module_failing_to_import_is_unresolved(self):
        with patch(
            "rescuable.handler.resolver.importlib.import_module",
            side_effect=SyntaxError("invalid syntax"),
        ):
            assert self.resolver.resolve_name("broken_plugin.Error", Outpost) is None


class TestClassifierResolver:
    """Test resolution of stored classifier keys."""

    def setup_method(self):
        self.resolver = ClassifierResolver(config=RescueConfig(warn_unresolved=False))

    def test_type_resolves_to_itself(self):
        classifier = self.resolver.resolve(SiteError, Outpost)

        assert isinstance(classifier, TypeClassifier)
        assert classifier.error_type is SiteError

    def test_custom_classifier_resolves_to_itself(self):
        custom = PredicateClassifier(bool)

        assert self.resolver.resolve(custom, Outpost) is custom

    def test_scope_wins_over_global(self):
        class Local:
            class ValueError(Exception):
                pass

        classifier = self.resolver.resolve("ValueError", Local)

        assert classifier.error_type is Local.ValueError

    def test_falls_back_to_global(self):
        classifier = self.resolver.resolve("json.JSONDecodeError", Outpost)

        assert classifier is not None
        assert classifier.matches(__import__("json").JSONDecodeError("bad", "", 0))

    def test_non_classifier_object_is_skipped(self):
        assert self.resolver.resolve("not_a_classifier", Outpost) is None

    def test_unresolved_name(self):
        assert self.resolver.resolve("NoSuchError", Outpost) is None

    def test_matches(self):
        assert self.resolver.matches("Meltdown", RemoteOutpost.Meltdown(), RemoteOutpost)
        assert not self.resolver.matches("Meltdown", SiteError(), RemoteOutpost)
        assert not self.resolver.matches("NoSuchError", SiteError(), RemoteOutpost)
        assert not self.resolver.matches(SiteError, None, RemoteOutpost)

    def test_custom_name_resolvers(self):
        class MappingResolver(NameResolver):
            def resolve_name(self, name, scope):
                return {"Boom": SiteError}.get(name)

        resolver = ClassifierResolver(
            [MappingResolver()], config=RescueConfig(warn_unresolved=False)
        )

        assert resolver.resolve("Boom", Outpost).error_type is SiteError
        assert resolver.resolve("ValueError", Outpost) is None


class TestUnresolvedReporting:
    """Test logging of classifier names that never resolve."""

    def test_debug_by_default(self):
        resolver = ClassifierResolver(config=RescueConfig(warn_unresolved=False))

        with patch("rescuable.handler.resolver.logger") as mock_logger:
            resolver.resolve("Typo", Outpost)

        mock_logger.warning.assert_not_called()
        mock_logger.debug.assert_called_once()

    def test_warns_once_per_name_and_scope(self):
        resolver = ClassifierResolver(config=RescueConfig(warn_unresolved=True))

        with patch("rescuable.handler.resolver.logger") as mock_logger:
            resolver.resolve("Typo", Outpost)
            resolver.resolve("Typo", Outpost)
            resolver.resolve("Typo", RemoteOutpost)

        assert mock_logger.warning.call_count == 2
        assert "Typo" in mock_logger.warning.call_args[0][0]

    @pytest.mark.parametrize("warn", [True, False])
    def test_resolution_result_does_not_depend_on_reporting(self, warn):
        resolver = ClassifierResolver(config=RescueConfig(warn_unresolved=warn))

        assert resolver.resolve("Typo", Outpost) is None
