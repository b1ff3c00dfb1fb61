"""Unit tests for PropertyResolver."""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from grove_di.domain import PropertyError, PropertyExpr, PropertyNotFoundError
from grove_di.infrastructure.properties import PropertyResolver


class Mode(Enum):
    FAST = "fast"
    SAFE = "safe"


class Unsupported:
    pass


class TestPropertyLookup:
    """Test cases for plain and expression lookups."""

    def test_plain_key(self):
        """Test that a plain key returns the raw string."""
        resolver = PropertyResolver({"app.name": "demo"}, include_environment=False)

        assert resolver.contains_property("app.name") is True
        assert resolver.get_property("app.name") == "demo"

    def test_missing_key_returns_none(self):
        """Test that a missing plain key returns None."""
        resolver = PropertyResolver(include_environment=False)

        assert resolver.contains_property("app.name") is False
        assert resolver.get_property("app.name") is None

    def test_default_argument(self):
        """Test that the default argument is used for missing keys."""
        resolver = PropertyResolver(include_environment=False)

        assert resolver.get_property("app.port", int, "8080") == 8080

    def test_expression_with_default(self):
        """Test ${key:default} expressions."""
        resolver = PropertyResolver({"app.name": "demo"}, include_environment=False)

        assert resolver.get_property("${app.name:other}") == "demo"
        assert resolver.get_property("${app.title:Grove}") == "Grove"
        assert resolver.get_property("${app.title:}") == ""

    def test_expression_without_default_is_required(self):
        """Test that ${key} fails for a missing key."""
        resolver = PropertyResolver(include_environment=False)

        with pytest.raises(PropertyNotFoundError, match="Property 'app.name' not found."):
            resolver.get_property("${app.name}")

    def test_nested_value_expressions(self):
        """Test that values referring to other properties are resolved recursively."""
        resolver = PropertyResolver(
            {"app.host": "localhost", "db.host": "${app.host}", "db.url": "${db.host}", "db.port": "${db.missing:5432}"},
            include_environment=False,
        )

        assert resolver.get_property("db.url") == "localhost"
        assert resolver.get_property("db.port", int) == 5432

    def test_expression_default_may_be_an_expression(self):
        """Test that a default is itself resolved."""
        resolver = PropertyResolver({"fallback": "7"}, include_environment=False)

        assert resolver.get_required_property("${missing:${fallback}}", int) == 7

    def test_get_required_property(self):
        """Test required lookups for present and missing keys."""
        resolver = PropertyResolver({"app.port": "9000"}, include_environment=False)

        assert resolver.get_required_property("app.port", int) == 9000
        with pytest.raises(PropertyNotFoundError):
            resolver.get_required_property("app.missing")

    def test_environment_is_loaded_and_overridden(self, monkeypatch):
        """Test that explicit properties override environment variables."""
        monkeypatch.setenv("GROVE_TEST_NAME", "from-env")
        monkeypatch.setenv("GROVE_TEST_PORT", "1")

        resolver = PropertyResolver({"GROVE_TEST_PORT": "2"})

        assert resolver.get_property("GROVE_TEST_NAME") == "from-env"
        assert resolver.get_property("GROVE_TEST_PORT", int) == 2

    def test_environment_can_be_excluded(self, monkeypatch):
        """Test include_environment=False."""
        monkeypatch.setenv("GROVE_TEST_NAME", "from-env")

        resolver = PropertyResolver(include_environment=False)

        assert resolver.contains_property("GROVE_TEST_NAME") is False

    def test_non_string_values_are_stored_as_strings(self):
        """Test that explicit values are stringified."""
        resolver = PropertyResolver({"app.port": 8080}, include_environment=False)

        assert resolver.get_property("app.port") == "8080"


class TestPropertyExpressions:
    """Test cases for parsing expressions."""

    def test_parse_plain_key(self):
        """Test that plain keys are not expressions."""
        assert PropertyResolver.parse_property_expr("app.name") is None
        assert PropertyResolver.parse_property_expr("${app.name") is None

    def test_parse_key_and_default(self):
        """Test parsing with and without default."""
        assert PropertyResolver.parse_property_expr("${app.name}") == PropertyExpr(key="app.name")
        assert PropertyResolver.parse_property_expr("${app.name:demo}") == PropertyExpr(key="app.name", default="demo")
        assert PropertyResolver.parse_property_expr("${url:http://x}") == PropertyExpr(key="url", default="http://x")

    @pytest.mark.parametrize("expression", ["${}", "${:default}"])
    def test_empty_key_is_an_error(self, expression):
        """Test that empty keys are rejected."""
        with pytest.raises(PropertyError, match="Invalid key"):
            PropertyResolver.parse_property_expr(expression)


class TestPropertyConversion:
    """Test cases for typed conversion."""

    @pytest.mark.parametrize(
        "raw, target_type, expected",
        [
            ("42", int, 42),
            ("1.5", float, 1.5),
            ("true", bool, True),
            ("false", bool, False),
            ("12.50", Decimal, Decimal("12.50")),
            ("2023-07-13", date, date(2023, 7, 13)),
            ("10:30:00", time, time(10, 30)),
            ("2023-07-13T10:30:00", datetime, datetime(2023, 7, 13, 10, 30)),
            ("PT1H", timedelta, timedelta(hours=1)),
            ("/tmp/data", Path, Path("/tmp/data")),
            ("fast", Mode, Mode.FAST),
        ],
    )
    def test_supported_types(self, raw, target_type, expected):
        """Test conversion of common property types."""
        resolver = PropertyResolver({"key": raw}, include_environment=False)

        assert resolver.get_property("key", target_type) == expected

    def test_zone_info(self):
        """Test ZoneInfo conversion."""
        resolver = PropertyResolver({"zone": "UTC"}, include_environment=False)

        assert resolver.get_property("zone", ZoneInfo) == ZoneInfo("UTC")

    def test_invalid_zone_info(self):
        """Test that an unknown time zone fails."""
        resolver = PropertyResolver({"zone": "Nowhere/Nothing"}, include_environment=False)

        with pytest.raises(PropertyError, match="Invalid time zone"):
            resolver.get_property("zone", ZoneInfo)

    def test_invalid_value(self):
        """Test that a value that cannot be converted fails."""
        resolver = PropertyResolver({"app.port": "eighty"}, include_environment=False)

        with pytest.raises(PropertyError, match="Cannot convert value 'eighty' to int"):
            resolver.get_property("app.port", int)

    def test_unsupported_type(self):
        """Test that types pydantic cannot validate fail."""
        resolver = PropertyResolver({"key": "value"}, include_environment=False)

        with pytest.raises(PropertyError, match="Unsupported value type"):
            resolver.get_property("key", Unsupported)
