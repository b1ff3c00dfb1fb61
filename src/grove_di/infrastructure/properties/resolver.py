import logging
import os
from typing import Any, Dict, Mapping, Optional, Type, TypeVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from grove_di.domain import IPropertySource, PropertyError, PropertyExpr, PropertyNotFoundError

T = TypeVar("T")

logger = logging.getLogger(__name__)


class PropertyResolver(IPropertySource):
    """Property source backed by environment variables and an explicit mapping.

    Keys and raw values may be ``${key}`` or ``${key:default}`` expressions.
    Expressions are resolved recursively, so a value may refer to another
    property. Raw strings are converted to the requested type with pydantic
    validation, which covers numbers, booleans, ``Decimal``, dates, times,
    ``timedelta``, ``Path`` and enums. ``ZoneInfo`` is supported as well.

    Attributes:
        _properties: Raw property values by key.
        _adapters: Cached pydantic adapters by target type.

    Example:
        >>> resolver = PropertyResolver({"app.port": "8080", "app.url": "http://${app.host:localhost}:${app.port}"})
        >>> resolver.get_property("app.port", int)
        8080
        >>> resolver.get_required_property("${app.timeout:30}", int)
        30
    """

    def __init__(self, properties: Optional[Mapping[str, Any]] = None, *, include_environment: bool = True) -> None:
        """Load the environment first, then the explicit properties on top of it.

        Args:
            properties: Explicit properties; values are stored as strings.
            include_environment: Whether ``os.environ`` is loaded.
        """
        self._properties: Dict[str, str] = {}
        if include_environment:
            self._properties.update(os.environ)
        if properties:
            self._properties.update({str(key): str(value) for key, value in properties.items()})
        self._adapters: Dict[Any, TypeAdapter] = {}

        if logger.isEnabledFor(logging.DEBUG):
            for key in sorted(self._properties):
                logger.debug("PropertyResolver: %s = %s", key, self._properties[key])

    def contains_property(self, key: str) -> bool:
        return key in self._properties

    def get_property(self, key: str, target_type: Type[T] = str, default: Optional[str] = None) -> Optional[T]:
        """Resolve and convert a property.

        Args:
            key: A plain key or a ``${key:default}`` expression.
            target_type: The type to convert the raw value to.
            default: Raw value used when the key is missing.

        Returns:
            The converted value, or None when missing and no default applies.

        Raises:
            PropertyNotFoundError: If a ``${key}`` expression without default refers to a missing key.
            PropertyError: If the value cannot be converted.
        """
        value = self._resolve(key)
        if value is None:
            if default is None:
                return None
            value = self._parse_value(default)
        return self.convert(value, target_type)

    def get_required_property(self, key: str, target_type: Type[T] = str) -> T:
        value = self.get_property(key, target_type)
        if value is None:
            raise PropertyNotFoundError(key)
        return value

    def _resolve(self, key: str) -> Optional[str]:
        expr = self.parse_property_expr(key)
        if expr is not None:
            return self._resolve_expr(expr)
        value = self._properties.get(key)
        if value is None:
            return None
        return self._parse_value(value)

    def _resolve_expr(self, expr: PropertyExpr) -> str:
        if expr.default is not None:
            value = self._resolve(expr.key)
            return value if value is not None else self._parse_value(expr.default)

        value = self._resolve(expr.key)
        if value is None:
            raise PropertyNotFoundError(expr.key)
        return value

    def _parse_value(self, value: str) -> str:
        expr = self.parse_property_expr(value)
        if expr is None:
            return value
        return self._resolve_expr(expr)

    @staticmethod
    def parse_property_expr(key: str) -> Optional[PropertyExpr]:
        """Parse ``${key}`` / ``${key:default}``; None for anything else.

        Raises:
            PropertyError: If the expression has an empty key.
        """
        if not key.startswith("${") or not key.endswith("}"):
            return None

        body = key[2:-1]
        name, separator, default = body.partition(":")
        if not name:
            raise PropertyError(f"Invalid key: {key}")
        return PropertyExpr(key=name, default=default if separator else None)

    def convert(self, value: str, target_type: Any) -> Any:
        """Convert a raw string to ``target_type``.

        Raises:
            PropertyError: If the type is unsupported or the value is invalid.
        """
        if target_type is str or target_type is Any:
            return value
        if target_type is ZoneInfo:
            try:
                return ZoneInfo(value)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise PropertyError(f"Invalid time zone: {value}") from e

        try:
            return self._adapter(target_type).validate_python(value)
        except ValidationError as e:
            raise PropertyError(
                f"Cannot convert value '{value}' to {getattr(target_type, '__name__', target_type)}"
            ) from e

    def _adapter(self, target_type: Any) -> TypeAdapter:
        adapter = self._adapters.get(target_type)
        if adapter is None:
            try:
                adapter = TypeAdapter(target_type)
            except PydanticSchemaGenerationError as e:
                raise PropertyError(f"Unsupported value type: {target_type!r}") from e
            self._adapters[target_type] = adapter
        return adapter
