"""
Bridge type definitions and converters.

This package provides:
- Registry entries for devices and sensors
- Typed views of the API payloads
- Sensor reading to OPC UA value conversion
"""

from .type_converter import TypeConverter, TypedValue, ValueKind
from .models import (
    Credential,
    Device,
    DeviceRecord,
    ListingPage,
    Sensor,
    SensorReading,
    SensorStatus,
    TokenResponse,
)

__all__ = [
    'TypeConverter',
    'TypedValue',
    'ValueKind',
    'Credential',
    'Device',
    'DeviceRecord',
    'ListingPage',
    'Sensor',
    'SensorReading',
    'SensorStatus',
    'TokenResponse',
]
