"""Tests for change-detected sensor updates."""

from __future__ import annotations

import pytest
from asyncua import ua

from tlink_opcua.types import Sensor, SensorReading, SensorStatus, TypeConverter

from tests.conftest import sensor_payload


T0 = "2024-01-01 00:00:00"
T1 = "2024-01-01 00:00:05"


def reading(**overrides):
    r = SensorReading.from_dict(sensor_payload(**overrides))
    return r, TypeConverter.coerce(r)


@pytest.fixture
def sensor() -> Sensor:
    return Sensor(sensor_id=10, sensor_name="Temperature", last_update_at=T0, node_created=True)


@pytest.mark.asyncio
async def test_same_timestamp_writes_nothing(updater, host, sensor):
    r, value = reading(updateDate=T0, value="99.9")

    assert await updater.apply(sensor, r, value) is False
    assert host.calls == []


@pytest.mark.asyncio
async def test_same_timestamp_still_tracks_status(updater, host, sensor):
    r, value = reading(updateDate=T0, isLine=0)

    await updater.apply(sensor, r, value)

    assert sensor.status is SensorStatus.BAD
    assert host.calls == []


@pytest.mark.asyncio
async def test_new_timestamp_writes_value_once(updater, host, sensor, namespaces):
    r, value = reading(updateDate=T1)

    assert await updater.apply(sensor, r, value) is True

    assert host.calls == [("write_value", ua.NodeId(10, namespaces.sensor), value)]
    assert sensor.last_update_at == T1
    assert sensor.status is SensorStatus.GOOD


@pytest.mark.asyncio
async def test_offline_writes_bad_status_after_value(updater, host, sensor):
    r, value = reading(updateDate=T1, isLine=0)

    await updater.apply(sensor, r, value)

    operations = [call[0] for call in host.calls]
    assert operations == ["write_value", "write_status"]
    status = host.calls[1][2]
    assert not status.is_good()


@pytest.mark.asyncio
async def test_status_written_even_if_value_write_fails(updater, host, sensor):
    host.fail.add("write_value")
    r, value = reading(updateDate=T1, isLine=0)

    await updater.apply(sensor, r, value)

    assert len(host.calls_of("write_status")) == 1


@pytest.mark.asyncio
async def test_timestamp_advances_even_if_write_fails(updater, host, sensor):
    host.fail.add("write_value")
    r, value = reading(updateDate=T1)

    await updater.apply(sensor, r, value)
    await updater.apply(sensor, r, value)

    assert sensor.last_update_at == T1
    assert len(host.calls_of("write_value")) == 1


@pytest.mark.asyncio
async def test_apply_created_online_writes_nothing(updater, host):
    sensor = Sensor(sensor_id=10, sensor_name="Temperature", node_created=True)
    r, _ = reading(updateDate=T0)

    await updater.apply_created(sensor, r)

    assert host.calls == []
    assert sensor.last_update_at == T0


@pytest.mark.asyncio
async def test_apply_created_offline_writes_status(updater, host):
    sensor = Sensor(sensor_id=10, sensor_name="Temperature", node_created=True)
    r, _ = reading(updateDate=T0, isLine=0)

    await updater.apply_created(sensor, r)

    assert [call[0] for call in host.calls] == ["write_status"]
    assert sensor.status is SensorStatus.BAD
