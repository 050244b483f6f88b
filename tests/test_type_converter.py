"""Tests for sensor reading decoding."""

from __future__ import annotations

import pytest
from asyncua import ua

from tlink_opcua.exceptions import (
    MissingFieldError,
    ParseFailureError,
    UnsupportedTypeError,
    ValidationError,
)
from tlink_opcua.types import SensorReading, TypeConverter, ValueKind

from tests.conftest import sensor_payload


def coerce(**overrides):
    return TypeConverter.coerce(SensorReading.from_dict(sensor_payload(**overrides)))


def test_numeric_with_decimal_places_is_float():
    value = coerce(value="23.5", decimalPlacse="1")
    assert value.kind is ValueKind.FLOAT
    assert value.value == pytest.approx(23.5)
    assert value.variant_type == ua.VariantType.Float


@pytest.mark.parametrize("places", ["0", 0, "-1"])
def test_numeric_without_decimal_places_is_integer(places):
    value = coerce(value="-42", decimalPlacse=places)
    assert value.kind is ValueKind.INTEGER
    assert value.value == -42
    assert value.variant_type == ua.VariantType.Int32


@pytest.mark.parametrize("type_id", [4, 6, 8])
def test_text_types_keep_raw_value(type_id):
    value = coerce(sensorTypeId=type_id, value="N 31.2 E 121.4", decimalPlacse=None)
    assert value.kind is ValueKind.TEXT
    assert value.value == "N 31.2 E 121.4"


@pytest.mark.parametrize("type_id", [2, 5])
@pytest.mark.parametrize("switcher,expected", [(0, False), (1, True), (3, True), ("1", True)])
def test_switch_types_are_boolean(type_id, switcher, expected):
    value = coerce(sensorTypeId=type_id, switcher=switcher, value=None, decimalPlacse=None)
    assert value.kind is ValueKind.BOOLEAN
    assert value.value is expected
    assert value.to_variant().VariantType == ua.VariantType.Boolean


@pytest.mark.parametrize("type_id", [0, 3, 7, 9, 99])
def test_unknown_type_is_unsupported(type_id):
    with pytest.raises(UnsupportedTypeError) as exc_info:
        coerce(sensorTypeId=type_id)
    assert exc_info.value.type_id == type_id


def test_missing_value_names_field():
    with pytest.raises(MissingFieldError) as exc_info:
        coerce(value=None)
    assert exc_info.value.field == "value"


def test_missing_decimal_places_names_field():
    with pytest.raises(MissingFieldError) as exc_info:
        coerce(decimalPlacse=None)
    assert exc_info.value.field == "decimalPlacse"


def test_missing_switcher_names_field():
    with pytest.raises(MissingFieldError) as exc_info:
        coerce(sensorTypeId=2)
    assert exc_info.value.field == "switcher"


def test_text_type_does_not_need_decimal_places():
    assert coerce(sensorTypeId=4, decimalPlacse=None).kind is ValueKind.TEXT


def test_unparsable_number_is_parse_failure():
    with pytest.raises(ParseFailureError) as exc_info:
        coerce(value="n/a")
    assert exc_info.value.field == "value"
    assert isinstance(exc_info.value, ValidationError)


def test_fractional_text_for_integer_sensor_is_parse_failure():
    with pytest.raises(ParseFailureError):
        coerce(value="23.5", decimalPlacse="0")


@pytest.mark.parametrize("text", ["2147483648", "-2147483649", "99999999999"])
def test_integer_outside_int32_is_parse_failure(text):
    with pytest.raises(ParseFailureError) as exc_info:
        coerce(value=text, decimalPlacse="0")
    assert exc_info.value.field == "value"


@pytest.mark.parametrize("text", ["2147483647", "-2147483648"])
def test_int32_bounds_are_accepted(text):
    assert coerce(value=text, decimalPlacse="0").value == int(text)


@pytest.mark.parametrize(
    "missing", ["id", "sensorName", "isLine", "updateDate", "sensorTypeId"]
)
def test_reading_requires_common_fields(missing):
    payload = sensor_payload()
    del payload[missing]
    with pytest.raises(MissingFieldError) as exc_info:
        SensorReading.from_dict(payload)
    assert exc_info.value.field == missing


def test_null_is_treated_as_missing():
    with pytest.raises(MissingFieldError) as exc_info:
        SensorReading.from_dict(sensor_payload(sensorName=None))
    assert exc_info.value.field == "sensorName"


def test_reading_online_flag():
    assert SensorReading.from_dict(sensor_payload(isLine=1)).online is True
    assert SensorReading.from_dict(sensor_payload(isLine=0)).online is False
