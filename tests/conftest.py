"""Pytest configuration and fixtures for the bridge tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from asyncua import ua

from tlink_opcua.api import CredentialManager, TlinkApiClient
from tlink_opcua.logging import BridgeLogger
from tlink_opcua.server import AddressSpaceBuilder, NamespaceIndices, SyncManager, ValueUpdater
from tlink_opcua.types import Credential


GOOD = ua.StatusCode(ua.StatusCodes.Good)
BAD = ua.StatusCode(ua.StatusCodes.BadInternalError)


class FakeNodeHost:
    """Records every host call; operations listed in ``fail`` are rejected."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.fail: set[str] = set()

    def _result(self, operation: str) -> ua.StatusCode:
        return BAD if operation in self.fail else GOOD

    async def create_object_node(self, node_id, parent_id, name, description):
        self.calls.append(("create_object_node", node_id, parent_id, name, description))
        return self._result("create_object_node")

    async def create_variable_node(self, node_id, parent_id, name, description, value):
        self.calls.append(("create_variable_node", node_id, parent_id, name, description, value))
        return self._result("create_variable_node")

    async def write_value(self, node_id, value):
        self.calls.append(("write_value", node_id, value))
        return self._result("write_value")

    async def write_status(self, node_id, status):
        self.calls.append(("write_status", node_id, status))
        return self._result("write_status")

    def calls_of(self, operation: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == operation]


def sensor_payload(**overrides: Any) -> dict[str, Any]:
    """Numeric sensor entry as returned inside sensorsList."""
    payload = {
        "id": 10,
        "sensorName": "Temperature",
        "sensorTypeId": 1,
        "value": "23.5",
        "decimalPlacse": "1",
        "isLine": 1,
        "updateDate": "2024-01-01 00:00:00",
    }
    payload.update(overrides)
    return payload


def device_payload(device_id: int = 100, sensors: Any = None, **overrides: Any) -> dict[str, Any]:
    """Device entry as returned inside dataList."""
    payload = {
        "id": device_id,
        "deviceName": f"Device {device_id}",
        "deviceNo": f"NO-{device_id}",
        "sensorsList": [] if sensors is None else sensors,
    }
    payload.update(overrides)
    return payload


def listing_payload(count: int, total: int, start_id: int = 1) -> dict[str, Any]:
    """Successful listing envelope with count device entries."""
    return {
        "flag": "00",
        "msg": "ok",
        "rowCount": total,
        "dataList": [device_payload(start_id + i) for i in range(count)],
    }


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    BridgeLogger.reset()


@pytest.fixture
def host() -> FakeNodeHost:
    return FakeNodeHost()


@pytest.fixture
def namespaces() -> NamespaceIndices:
    return NamespaceIndices(folder=2, device=3, sensor=4)


@pytest.fixture
def builder(host, namespaces) -> AddressSpaceBuilder:
    return AddressSpaceBuilder(host, namespaces, generic_device_names=["4G压力表"])


@pytest.fixture
def updater(host, namespaces) -> ValueUpdater:
    return ValueUpdater(host, namespaces)


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock(spec=TlinkApiClient)
    client.post_form = AsyncMock()
    client.post_json = AsyncMock()
    return client


@pytest.fixture
def mock_credentials() -> MagicMock:
    credentials = MagicMock(spec=CredentialManager)
    credentials.ensure_valid = AsyncMock(
        return_value=Credential(token="token-abc", expires_at=1e12, user_id=7)
    )
    return credentials


@pytest.fixture
def sync_manager(builder, updater, mock_credentials, mock_client) -> SyncManager:
    return SyncManager(
        builder=builder,
        updater=updater,
        credentials=mock_credentials,
        client=mock_client,
        client_id="client-1",
        page_size=100,
        cycle_time_ms=10000,
        initial_delay_ms=1000,
    )
