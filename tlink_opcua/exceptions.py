"""Exceptions raised by the TLINK OPC UA bridge."""

from typing import Any, Optional


class BridgeError(Exception):
    """Base exception for the bridge."""

    pass


class ConfigError(BridgeError):
    """Configuration file is missing, unreadable or incomplete."""

    pass


class TransportError(BridgeError):
    """HTTP request produced no usable response body."""

    pass


class PayloadError(BridgeError):
    """Response body could not be decoded into a JSON object."""

    pass


class ValidationError(BridgeError):
    """Inbound record failed validation and must be dropped."""

    pass


class MissingFieldError(ValidationError):
    """A required field is absent or null."""

    def __init__(self, field: str, payload: Any = None):
        super().__init__(f"Missing required field '{field}'")
        self.field = field
        self.payload = payload


class ParseFailureError(ValidationError):
    """A required field is present but cannot be parsed."""

    def __init__(self, field: str, value: Any):
        super().__init__(f"Cannot parse field '{field}' from {value!r}")
        self.field = field
        self.value = value


class UnsupportedTypeError(ValidationError):
    """Sensor type discriminator is not recognized."""

    def __init__(self, type_id: Any):
        super().__init__(f"Unsupported sensor type id: {type_id}")
        self.type_id = type_id


class AuthError(BridgeError):
    """Access token could not be obtained."""

    TRANSPORT = "transport"
    MISSING_FIELD = "missing_field"

    def __init__(self, reason: str, field: Optional[str] = None, message: str = ""):
        if not message:
            if reason == self.MISSING_FIELD:
                message = f"Token response missing field '{field}'"
            else:
                message = "Token request failed"
        super().__init__(message)
        self.reason = reason
        self.field = field
