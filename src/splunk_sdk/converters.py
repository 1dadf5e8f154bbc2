"""Value converters for typed access to entity records.

Records hold the loosely typed values parsed from Atom content: mostly
strings, with nested dicts and lists. A converter turns one such raw
value into a typed value and names the default to use when the field
is absent.

Converters are stateless; the module-level instances can be shared.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Generic, List, Optional, Type, TypeVar

from .exceptions import ConversionError

V = TypeVar("V")
E = TypeVar("E", bound=Enum)


class ValueConverter(Generic[V]):
    """Base class for record value converters.

    :param target_type: Type a converted value is an instance of
    :param default_value: Value returned for absent fields
    """

    target_type: type = object

    def __init__(self, default_value: Optional[V] = None):
        self._default_value = default_value

    @property
    def default_value(self) -> Optional[V]:
        return self._default_value

    def is_converted(self, value: Any) -> bool:
        """Whether ``value`` is already of the target type."""
        return isinstance(value, self.target_type)

    def convert(self, value: Any) -> V:
        raise NotImplementedError


class StringConverter(ValueConverter[str]):
    target_type = str

    def convert(self, value: Any) -> str:
        if value is None:
            return self.default_value
        return str(value)


class IntConverter(ValueConverter[int]):
    target_type = int

    def __init__(self, default_value: Optional[int] = 0):
        super().__init__(default_value)

    def is_converted(self, value: Any) -> bool:
        return isinstance(value, int) and not isinstance(value, bool)

    def convert(self, value: Any) -> int:
        if value is None:
            return self.default_value
        try:
            return int(value)
        except (TypeError, ValueError):
            pass
        try:
            # Splunk renders some counters as "12.0"
            return int(float(value))
        except (TypeError, ValueError) as exc:
            raise ConversionError(value, "int", str(exc)) from exc


class FloatConverter(ValueConverter[float]):
    target_type = float

    def __init__(self, default_value: Optional[float] = 0.0):
        super().__init__(default_value)

    def convert(self, value: Any) -> float:
        if value is None:
            return self.default_value
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ConversionError(value, "float", str(exc)) from exc


class BoolConverter(ValueConverter[bool]):
    """Converts Splunk's boolean spellings: ``1/0``, ``true/false``, ``t/f``, ``yes/no``."""

    target_type = bool

    _TRUE = frozenset({"1", "true", "t", "yes", "y", "on"})
    _FALSE = frozenset({"0", "false", "f", "no", "n", "off", ""})

    def __init__(self, default_value: Optional[bool] = False):
        super().__init__(default_value)

    def convert(self, value: Any) -> bool:
        if value is None:
            return self.default_value
        if isinstance(value, (int, float)):
            return value != 0
        lower = str(value).strip().lower()
        if lower in self._TRUE:
            return True
        if lower in self._FALSE:
            return False
        raise ConversionError(value, "bool")


class DateTimeConverter(ValueConverter[datetime]):
    """Converts ISO 8601 timestamps, including a trailing ``Z``."""

    target_type = datetime

    def convert(self, value: Any) -> datetime:
        if value is None:
            return self.default_value
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as exc:
            raise ConversionError(value, "datetime", str(exc)) from exc


class EnumConverter(ValueConverter[E]):
    """Converts a raw value to a member of ``enum_cls`` by value, then by name."""

    def __init__(self, enum_cls: Type[E], default_value: Optional[E] = None):
        super().__init__(default_value)
        self.enum_cls = enum_cls
        self.target_type = enum_cls

    def convert(self, value: Any) -> E:
        if value is None:
            return self.default_value
        try:
            return self.enum_cls(value)
        except ValueError:
            pass
        try:
            return self.enum_cls[str(value).upper()]
        except KeyError as exc:
            raise ConversionError(value, self.enum_cls.__name__) from exc


class ListConverter(ValueConverter[List[Any]]):
    """Converts a list (or a single scalar) item by item."""

    target_type = list

    def __init__(self, item_converter: Optional[ValueConverter] = None):
        super().__init__()
        self.item_converter = item_converter

    @property
    def default_value(self) -> List[Any]:
        return []

    def is_converted(self, value: Any) -> bool:
        if not isinstance(value, list):
            return False
        if self.item_converter is None:
            return True
        return all(self.item_converter.is_converted(item) for item in value)

    def convert(self, value: Any) -> List[Any]:
        if value is None:
            return []
        items = value if isinstance(value, list) else [value]
        if self.item_converter is None:
            return list(items)
        return [self.item_converter.convert(item) for item in items]


string = StringConverter()
integer = IntConverter()
floating = FloatConverter()
boolean = BoolConverter()
timestamp = DateTimeConverter()
