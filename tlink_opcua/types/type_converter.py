"""
Sensor reading to OPC UA value conversion.

This module decodes the heterogeneous ``value``/``switcher`` payload of
a sensor reading into one strongly typed scalar, selected by the
reading's sensor type id.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from asyncua import ua

from ..exceptions import MissingFieldError, ParseFailureError, UnsupportedTypeError
from .models import SensorReading


class ValueKind(Enum):
    """Closed set of scalar kinds a sensor node can hold."""
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    BOOLEAN = "boolean"


# Sensor type ids grouped by decoding rule
NUMERIC_TYPE_IDS = frozenset({1})
TEXT_TYPE_IDS = frozenset({4, 6, 8})
SWITCH_TYPE_IDS = frozenset({2, 5})

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1


@dataclass(frozen=True)
class TypedValue:
    """A decoded scalar plus the kind needed to declare the node data type."""
    kind: ValueKind
    value: Union[int, float, str, bool]

    @property
    def variant_type(self) -> ua.VariantType:
        return TypeConverter.to_opcua_type(self.kind)

    def to_variant(self) -> ua.Variant:
        """Wrap the value in a Variant with explicit type."""
        return ua.Variant(self.value, self.variant_type)


class TypeConverter:
    """
    Converts sensor readings to typed OPC UA values.

    Decoding rules by sensor type id:
    - 1: numeric text; decimalPlacse > 0 gives FLOAT, otherwise INTEGER
    - 4, 6, 8: opaque text
    - 2, 5: switch; switcher > 0 gives True
    """

    KIND_TO_OPCUA: dict[ValueKind, ua.VariantType] = {
        ValueKind.INTEGER: ua.VariantType.Int32,
        ValueKind.FLOAT: ua.VariantType.Float,
        ValueKind.TEXT: ua.VariantType.String,
        ValueKind.BOOLEAN: ua.VariantType.Boolean,
    }

    @classmethod
    def to_opcua_type(cls, kind: ValueKind) -> ua.VariantType:
        """Get OPC UA VariantType for a value kind."""
        return cls.KIND_TO_OPCUA[kind]

    @classmethod
    def coerce(cls, reading: SensorReading) -> TypedValue:
        """
        Decode a reading into a TypedValue.

        Args:
            reading: Validated sensor reading

        Returns:
            TypedValue for the reading

        Raises:
            MissingFieldError: If a field required by the type id is absent
            ParseFailureError: If numeric text cannot be parsed, or an integer
                               value does not fit in Int32
            UnsupportedTypeError: If the type id is not recognized
        """
        type_id = reading.type_id

        if type_id in NUMERIC_TYPE_IDS or type_id in TEXT_TYPE_IDS:
            if reading.raw_value is None:
                raise MissingFieldError("value", reading.payload)

            if type_id in TEXT_TYPE_IDS:
                return TypedValue(ValueKind.TEXT, str(reading.raw_value))

            if reading.decimal_places is None:
                raise MissingFieldError("decimalPlacse", reading.payload)

            places = cls._parse_int("decimalPlacse", reading.decimal_places)
            if places > 0:
                return TypedValue(ValueKind.FLOAT, cls._parse_float("value", reading.raw_value))
            value = cls._parse_int("value", reading.raw_value)
            if not INT32_MIN <= value <= INT32_MAX:
                raise ParseFailureError("value", reading.raw_value)
            return TypedValue(ValueKind.INTEGER, value)

        if type_id in SWITCH_TYPE_IDS:
            if reading.switcher is None:
                raise MissingFieldError("switcher", reading.payload)
            switcher = cls._parse_int("switcher", reading.switcher)
            return TypedValue(ValueKind.BOOLEAN, switcher > 0)

        raise UnsupportedTypeError(type_id)

    @classmethod
    def _parse_int(cls, name: str, value: Any) -> int:
        """Parse a signed integer from int or numeric text."""
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if value.is_integer():
                return int(value)
            raise ParseFailureError(name, value)
        try:
            return int(str(value).strip())
        except ValueError:
            raise ParseFailureError(name, value)

    @classmethod
    def _parse_float(cls, name: str, value: Any) -> float:
        """Parse a floating point value from number or numeric text."""
        if isinstance(value, bool):
            raise ParseFailureError(name, value)
        if isinstance(value, (int, float)):
            return float(value)
        try:
            return float(str(value).strip())
        except ValueError:
            raise ParseFailureError(name, value)
