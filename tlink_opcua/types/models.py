"""
Data models for the TLINK OPC UA bridge.

This module defines the registry entries that track which devices and
sensors already have OPC UA nodes, and the typed views of the inbound
API payloads.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from asyncua import ua

from ..exceptions import MissingFieldError, ParseFailureError, ValidationError


# Sentinel for a sensor that has not applied any update yet
NEVER_UPDATED = "0000-00-00 00:00:00"

# Envelope flag returned by the listing endpoint on success
LISTING_SUCCESS_FLAG = "00"


def require(data: Dict[str, Any], name: str) -> Any:
    """Return data[name], treating an absent key and null the same way."""
    value = data.get(name)
    if value is None:
        raise MissingFieldError(name, data)
    return value


def require_int(data: Dict[str, Any], name: str) -> int:
    """Return data[name] as int. Numeric strings are accepted."""
    value = require(data, name)
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ParseFailureError(name, value)


class SensorStatus(Enum):
    """Online state surfaced as the variable's status code."""
    GOOD = "good"
    BAD = "bad"

    @classmethod
    def from_online(cls, online: bool) -> 'SensorStatus':
        return cls.GOOD if online else cls.BAD

    @property
    def status_code(self) -> ua.StatusCode:
        if self is SensorStatus.GOOD:
            return ua.StatusCode(ua.StatusCodes.Good)
        return ua.StatusCode(ua.StatusCodes.Bad)


@dataclass
class Credential:
    """
    Bearer credential and its absolute expiry.

    Usable iff the token is non-empty and the current time is before
    ``expires_at`` (seconds since the epoch).
    """
    token: str = ""
    expires_at: float = 0.0
    user_id: int = 0

    def is_usable(self, now: float) -> bool:
        return bool(self.token) and now < self.expires_at


@dataclass
class Sensor:
    """Registry entry for a sensor variable node."""
    sensor_id: int
    sensor_name: str
    last_update_at: str = NEVER_UPDATED
    status: SensorStatus = SensorStatus.GOOD
    node_created: bool = False


@dataclass
class Device:
    """Registry entry for a device object node."""
    device_id: int
    device_no: str
    display_name: str
    sensors: Dict[int, Sensor] = field(default_factory=dict)
    node_created: bool = False


@dataclass
class TokenResponse:
    """Fields required from the password-grant token endpoint."""
    user_id: int
    expires_in: int
    access_token: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TokenResponse':
        """
        Create from the decoded token response.

        Raises:
            MissingFieldError: If userId, expires_in or access_token is absent
            ParseFailureError: If userId or expires_in is not an integer
        """
        user_id = require_int(data, "userId")
        expires_in = require_int(data, "expires_in")
        access_token = str(require(data, "access_token"))
        return cls(user_id=user_id, expires_in=expires_in, access_token=access_token)


@dataclass
class SensorReading:
    """
    One sensor entry from a device record.

    Exists only for the duration of one update cycle. The type-specific
    fields stay raw here; TypeConverter checks and decodes them.
    """
    sensor_id: int
    sensor_name: str
    online: bool
    update_timestamp: str
    type_id: int
    raw_value: Optional[Any] = None
    decimal_places: Optional[Any] = None
    switcher: Optional[Any] = None
    payload: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> 'SensorReading':
        """
        Create from a sensorsList element.

        Common fields are checked in the order id, sensorName, isLine,
        updateDate, sensorTypeId.
        """
        if not isinstance(data, dict):
            raise ValidationError(f"Sensor entry is not an object: {data!r}")

        sensor_id = require_int(data, "id")
        sensor_name = str(require(data, "sensorName"))
        is_line = require_int(data, "isLine")
        update_timestamp = str(require(data, "updateDate"))
        type_id = require_int(data, "sensorTypeId")

        return cls(
            sensor_id=sensor_id,
            sensor_name=sensor_name,
            online=is_line > 0,
            update_timestamp=update_timestamp,
            type_id=type_id,
            raw_value=data.get("value"),
            decimal_places=data.get("decimalPlacse"),
            switcher=data.get("switcher"),
            payload=data,
        )


@dataclass
class DeviceRecord:
    """One element of the listing's dataList."""
    device_id: int
    device_name: str
    device_no: str
    sensors: Optional[Any] = None
    payload: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> 'DeviceRecord':
        """
        Create from a dataList element.

        sensorsList is kept raw; it is validated after the device node
        has been ensured.
        """
        if not isinstance(data, dict):
            raise ValidationError(f"Device entry is not an object: {data!r}")

        return cls(
            device_id=require_int(data, "id"),
            device_name=str(require(data, "deviceName")),
            device_no=str(require(data, "deviceNo")),
            sensors=data.get("sensorsList"),
            payload=data,
        )

    def sensor_entries(self) -> List[Any]:
        """
        Return the raw sensorsList.

        Raises:
            MissingFieldError: If sensorsList is absent or null
            ValidationError: If sensorsList is not an array
        """
        if self.sensors is None:
            raise MissingFieldError("sensorsList", self.payload)
        if not isinstance(self.sensors, list):
            raise ValidationError(f"sensorsList is not an array: {self.sensors!r}")
        return self.sensors


@dataclass
class ListingPage:
    """Envelope of one page of the device/sensor listing."""
    row_count: int
    records: List[Any]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ListingPage':
        """
        Create from the decoded listing response.

        Raises:
            MissingFieldError: If flag, rowCount or dataList is absent
            ValidationError: If flag is not the success code or dataList
                             is not an array
        """
        flag = str(require(data, "flag"))
        if flag != LISTING_SUCCESS_FLAG:
            raise ValidationError(f"Listing request rejected: {data.get('msg')}")

        row_count = require_int(data, "rowCount")
        records = require(data, "dataList")
        if not isinstance(records, list):
            raise ValidationError(f"dataList is not an array: {records!r}")

        return cls(row_count=row_count, records=records)
