"""
Change-detected value updates for sensor variables.

A reading is only pushed when its update timestamp differs from the last
one applied. The timestamp is recorded when the write is attempted, so a
host-side failure is not retried for the same timestamp.
"""

from ..logging import log_warn
from ..types import Sensor, SensorReading, SensorStatus, TypedValue
from .address_space_builder import NamespaceIndices
from .node_host import NodeSpaceHost


class ValueUpdater:
    """Applies readings to existing sensor variables."""

    def __init__(self, host: NodeSpaceHost, namespaces: NamespaceIndices):
        self.host = host
        self.namespaces = namespaces

    async def apply(self, sensor: Sensor, reading: SensorReading, value: TypedValue) -> bool:
        """
        Update status and, on a new timestamp, write value and status.

        Returns:
            True if a write was attempted
        """
        sensor.status = SensorStatus.from_online(reading.online)

        if reading.update_timestamp == sensor.last_update_at:
            return False

        sensor.last_update_at = reading.update_timestamp
        node_id = self.namespaces.sensor_node_id(sensor.sensor_id)

        result = await self.host.write_value(node_id, value)
        if not result.is_good():
            log_warn(f"Failed to write value of sensor '{sensor.sensor_name}': {result.name}")

        # Status follows independently of the value write outcome
        if sensor.status is SensorStatus.BAD:
            await self._write_status(sensor)

        return True

    async def apply_created(self, sensor: Sensor, reading: SensorReading) -> None:
        """
        Record state for a variable that was just created from reading.

        The creation already carried the value, so only an offline
        status needs an explicit write.
        """
        sensor.status = SensorStatus.from_online(reading.online)
        sensor.last_update_at = reading.update_timestamp

        if sensor.status is SensorStatus.BAD:
            await self._write_status(sensor)

    async def _write_status(self, sensor: Sensor) -> None:
        node_id = self.namespaces.sensor_node_id(sensor.sensor_id)
        result = await self.host.write_status(node_id, sensor.status.status_code)
        if not result.is_good():
            log_warn(f"Failed to write status of sensor '{sensor.sensor_name}': {result.name}")
