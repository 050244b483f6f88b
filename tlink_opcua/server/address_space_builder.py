"""
Address space builder for the TLINK OPC UA bridge.

This module materializes devices and sensors seen in the API listing as
OPC UA objects and variables. The device registry it owns is the only
record of which nodes exist, and it is the only code that creates them.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from asyncua import ua

from ..logging import log_info, log_warn
from ..types import Device, DeviceRecord, Sensor, SensorReading, SensorStatus, TypedValue
from .node_host import NodeSpaceHost


# Identifier of the top-level folder inside the folder namespace
ROOT_FOLDER_ID = 1


@dataclass(frozen=True)
class NamespaceIndices:
    """Namespace indexes partitioning folder, device and sensor node ids."""
    folder: int
    device: int
    sensor: int

    def folder_node_id(self, folder_id: int = ROOT_FOLDER_ID) -> ua.NodeId:
        return ua.NodeId(folder_id, self.folder)

    def device_node_id(self, device_id: int) -> ua.NodeId:
        return ua.NodeId(device_id, self.device)

    def sensor_node_id(self, sensor_id: int) -> ua.NodeId:
        return ua.NodeId(sensor_id, self.sensor)


class AddressSpaceBuilder:
    """
    Ensures devices and sensors exist as nodes.

    Creates nodes for:
    - Devices, as objects under the top-level folder
    - Sensors, as read-only scalar variables under their device

    An entry is registered before its node is requested. If the host
    rejects the creation, the entry stays registered with
    ``node_created = False`` and creation is attempted again on every
    later cycle, without backoff.
    """

    def __init__(
        self,
        host: NodeSpaceHost,
        namespaces: NamespaceIndices,
        generic_device_names: Iterable[str] = (),
        folder_id: int = ROOT_FOLDER_ID
    ):
        """
        Initialize address space builder.

        Args:
            host: Node-space host used for node creation
            namespaces: Namespace indexes for folder, device and sensor ids
            generic_device_names: Template names that get the id appended
            folder_id: Identifier of the parent folder for devices
        """
        self.host = host
        self.namespaces = namespaces
        self.generic_device_names = frozenset(generic_device_names)
        self.folder_id = folder_id
        self.devices: dict[int, Device] = {}

    def display_name_for(self, device_id: int, device_name: str) -> str:
        """Disambiguate generic template names with the device id."""
        if device_name in self.generic_device_names:
            return f"{device_name}({device_id})"
        return device_name

    async def ensure_device(self, record: DeviceRecord) -> Optional[Device]:
        """
        Return the device for record, creating its node if needed.

        Returns:
            The registered Device, or None if its node does not exist
            yet because the host rejected the creation
        """
        device = self.devices.get(record.device_id)
        if device is None:
            device = Device(
                device_id=record.device_id,
                device_no=record.device_no,
                display_name=self.display_name_for(record.device_id, record.device_name),
            )
            self.devices[record.device_id] = device

        if device.node_created:
            return device

        status = await self.host.create_object_node(
            self.namespaces.device_node_id(device.device_id),
            self.namespaces.folder_node_id(self.folder_id),
            device.display_name,
            device.device_no,
        )
        if not status.is_good():
            log_warn(f"Failed to create device node '{device.display_name}': {status.name}")
            return None

        device.node_created = True
        log_info(f"Created device node '{device.display_name}' (id: {device.device_id})")
        return device

    async def ensure_sensor(
        self,
        device: Device,
        reading: SensorReading,
        initial_value: TypedValue
    ) -> Tuple[Optional[Sensor], bool]:
        """
        Return the sensor for reading, creating its variable if needed.

        Args:
            device: Parent device, whose node must already exist
            reading: Validated reading for this sensor
            initial_value: Decoded value, which also fixes the data type

        Returns:
            Tuple of (sensor or None if its node does not exist, whether
            the node was created by this call)
        """
        sensor = device.sensors.get(reading.sensor_id)
        if sensor is None:
            sensor = Sensor(
                sensor_id=reading.sensor_id,
                sensor_name=reading.sensor_name,
                status=SensorStatus.GOOD,
            )
            device.sensors[reading.sensor_id] = sensor

        if sensor.node_created:
            return sensor, False

        status = await self.host.create_variable_node(
            self.namespaces.sensor_node_id(sensor.sensor_id),
            self.namespaces.device_node_id(device.device_id),
            sensor.sensor_name,
            sensor.sensor_name,
            initial_value,
        )
        if not status.is_good():
            log_warn(f"Failed to create sensor node '{sensor.sensor_name}': {status.name}")
            return None, False

        sensor.node_created = True
        return sensor, True

    @property
    def sensor_count(self) -> int:
        return sum(len(device.sensors) for device in self.devices.values())
