"""
Synchronization manager for the TLINK OPC UA bridge.

This module schedules sync cycles and runs the per-record pipeline:
device record -> device node -> sensor reading -> typed value ->
sensor variable.
"""

import asyncio
from typing import Any, Optional

from ..api import CredentialManager, TlinkApiClient
from ..exceptions import AuthError, UnsupportedTypeError, ValidationError
from ..logging import log_debug, log_error, log_info, log_warn
from ..types import Device, DeviceRecord, SensorReading, TypeConverter
from .address_space_builder import AddressSpaceBuilder
from .pagination import PaginationDriver
from .value_updater import ValueUpdater


# One cycle running plus one waiting on the lock
MAX_QUEUED_CYCLES = 2


class SyncManager:
    """
    Manages synchronization from the TLINK API to OPC UA.

    Handles:
    - Scheduling: one cycle after a short delay, then one per period
    - Cycle gating on a usable access token
    - Device and sensor processing for every listed record

    Cycles are fired at a fixed rate whether or not the previous one has
    finished; a single lock spanning the whole cycle serializes them.
    Ticks that arrive while a cycle is already waiting are dropped.
    """

    def __init__(
        self,
        builder: AddressSpaceBuilder,
        updater: ValueUpdater,
        credentials: CredentialManager,
        client: TlinkApiClient,
        client_id: str,
        page_size: int = 100,
        cycle_time_ms: int = 10000,
        initial_delay_ms: int = 1000
    ):
        """
        Initialize sync manager.

        Args:
            builder: Owner of the device/sensor registry
            updater: Change-detected writer for existing sensors
            credentials: Bearer credential manager
            client: API client for the listing endpoint
            client_id: Application id sent with listing requests
            page_size: Records requested per listing page
            cycle_time_ms: Period between cycle starts in milliseconds
            initial_delay_ms: Delay before the first cycle in milliseconds
        """
        self.builder = builder
        self.updater = updater
        self.credentials = credentials
        self.page_size = page_size
        self.cycle_time_ms = cycle_time_ms
        self.initial_delay_ms = initial_delay_ms
        self.driver = PaginationDriver(client, credentials, client_id, self.process_device)

        self._running = False
        self._cycle_lock = asyncio.Lock()
        self._cycle_tasks: set[asyncio.Task] = set()
        self._cycle_count = 0

    @property
    def cycle_time_seconds(self) -> float:
        """Get cycle time in seconds."""
        return self.cycle_time_ms / 1000.0

    async def start(self) -> None:
        """Allow cycles to run."""
        self._running = True
        log_info(f"Starting synchronization with {self.cycle_time_ms}ms cycle time")

    async def stop(self) -> None:
        """
        Stop scheduling and wait for the in-flight cycle.

        Cycles still waiting for the lock return without doing work.
        """
        self._running = False
        if self._cycle_tasks:
            await asyncio.gather(*self._cycle_tasks, return_exceptions=True)
        log_info("Synchronization stopped")

    async def run_schedule(self) -> None:
        """
        Fire cycles until stopped or cancelled.

        The first cycle starts after initial_delay_ms and the periodic
        ones at every multiple of cycle_time_ms from the call.
        """
        loop = asyncio.get_running_loop()
        started_at = loop.time()
        initial = loop.call_later(self.initial_delay_ms / 1000.0, self._spawn_cycle)
        ticks = 0

        try:
            while self._running:
                ticks += 1
                delay = started_at + ticks * self.cycle_time_seconds - loop.time()
                if delay > 0:
                    await asyncio.sleep(delay)
                if self._running:
                    self._spawn_cycle()
        except asyncio.CancelledError:
            pass
        finally:
            initial.cancel()

    def _spawn_cycle(self) -> None:
        if not self._running:
            return
        if len(self._cycle_tasks) >= MAX_QUEUED_CYCLES:
            log_debug("Sync cycle already queued, tick skipped")
            return
        task = asyncio.create_task(self._run_cycle_safely())
        self._cycle_tasks.add(task)
        task.add_done_callback(self._cycle_tasks.discard)

    async def _run_cycle_safely(self) -> None:
        try:
            await self.run_cycle()
        except Exception as e:
            log_error(f"Error in sync cycle: {e!r}")

    async def run_cycle(self) -> bool:
        """
        Run one sync cycle under the cycle lock.

        Returns:
            False if the cycle was skipped (stopped, or no usable token)
        """
        async with self._cycle_lock:
            if not self._running:
                return False

            self._cycle_count += 1
            log_debug(f"Sync cycle {self._cycle_count} started")

            try:
                await self.credentials.ensure_valid()
            except AuthError as e:
                log_debug(f"Sync cycle {self._cycle_count} skipped: {e}")
                return False

            await self.driver.sync_all(self.page_size)
            log_debug(f"Sync cycle {self._cycle_count} finished: "
                      f"{len(self.builder.devices)} devices, "
                      f"{self.builder.sensor_count} sensors")
            return True

    async def process_device(self, raw: Any) -> None:
        """Ensure the device node and process each of its sensors."""
        try:
            record = DeviceRecord.from_dict(raw)
        except ValidationError as e:
            log_warn(f"Invalid device record: {e}")
            log_debug(str(raw))
            return

        device = await self.builder.ensure_device(record)
        if device is None:
            return

        try:
            entries = record.sensor_entries()
        except ValidationError as e:
            log_warn(f"Invalid sensor list for device {record.device_id}: {e}")
            log_debug(str(raw))
            return

        for entry in entries:
            await self.process_sensor(device, entry)

    async def process_sensor(self, device: Device, raw: Any) -> Optional[bool]:
        """
        Decode one sensor entry and create or update its variable.

        Returns:
            None if the entry was dropped, True if a variable was created
            or written, False if nothing changed
        """
        try:
            reading = SensorReading.from_dict(raw)
            value = TypeConverter.coerce(reading)
        except UnsupportedTypeError as e:
            log_warn(str(e))
            return None
        except ValidationError as e:
            log_warn(f"Invalid sensor record on device {device.device_id}: {e}")
            log_debug(str(raw))
            return None

        sensor, created = await self.builder.ensure_sensor(device, reading, value)
        if sensor is None:
            return None

        if created:
            await self.updater.apply_created(sensor, reading)
            return True

        return await self.updater.apply(sensor, reading, value)
