"""
OPC UA Server Manager.

This module provides the bridge server lifecycle, using asyncua's native
context manager pattern.
"""

import asyncio
from datetime import datetime
from typing import Optional

import aiohttp
from asyncua import Server, ua

from ..api import CredentialManager, TlinkApiClient
from ..config import BridgeConfig
from ..logging import log_error, log_info
from .address_space_builder import ROOT_FOLDER_ID, AddressSpaceBuilder, NamespaceIndices
from .node_host import AsyncuaNodeHost
from .sync_manager import SyncManager
from .value_updater import ValueUpdater


FOLDER_NAMESPACE = "folder"
DEVICE_NAMESPACE = "device"
SENSOR_NAMESPACE = "sensor"


class BridgeServerManager:
    """
    Manages OPC UA server lifecycle.

    Uses asyncua's native patterns for:
    - Server initialization and configuration
    - Namespace registration and the top-level folder
    - Periodic synchronization from the TLINK API
    """

    def __init__(self, config: BridgeConfig):
        """
        Initialize server manager.

        Args:
            config: Loaded bridge configuration
        """
        self.config = config

        # Server components (initialized during setup)
        self.server: Optional[Server] = None
        self.host: Optional[AsyncuaNodeHost] = None
        self.namespaces: Optional[NamespaceIndices] = None
        self.sync_manager: Optional[SyncManager] = None

        self._stop_event = asyncio.Event()
        self._schedule_task: Optional[asyncio.Task] = None

    async def run(self) -> None:
        """
        Run the OPC UA server until stop() is called.

        Raises:
            Exception: Any server setup or runtime failure, after logging
        """
        try:
            await self._setup_server()

            async with aiohttp.ClientSession() as session:
                async with self.server:
                    log_info("OPC UA server started")

                    if await self._create_root_folder():
                        self._create_sync_manager(session)
                        await self.sync_manager.start()
                        self._schedule_task = asyncio.create_task(
                            self.sync_manager.run_schedule()
                        )

                    await self._stop_event.wait()
                    await self._stop_sync()

        except asyncio.CancelledError:
            log_info("Server shutdown requested")
        except Exception as e:
            log_error(f"Server error: {e}")
            raise
        finally:
            await self._cleanup()

    def stop(self) -> None:
        """Request server shutdown. Safe to call from a signal handler."""
        self._stop_event.set()

    async def _setup_server(self) -> None:
        """Create, configure and initialize the asyncua server."""
        self.server = Server()
        await self.server.init()

        self.server.set_endpoint(self.config.endpoint_url)
        self.server.set_server_name(self.config.server_name)
        self.server.set_security_policy([ua.SecurityPolicyType.NoSecurity])
        log_info(f"Endpoint: {self.config.endpoint_url}")

        await self.server.set_build_info(
            product_uri="urn:tlink:opcua:bridge",
            manufacturer_name="TLINK",
            product_name="TLINK OPC UA Bridge",
            software_version="1.0.0",
            build_number="1.0.0.0",
            build_date=datetime.now()
        )

        # Registration order fixes the indexes: folder, device, sensor
        self.namespaces = NamespaceIndices(
            folder=await self.server.register_namespace(FOLDER_NAMESPACE),
            device=await self.server.register_namespace(DEVICE_NAMESPACE),
            sensor=await self.server.register_namespace(SENSOR_NAMESPACE),
        )
        log_info(f"Registered namespaces {self.namespaces}")

        self.host = AsyncuaNodeHost(self.server)

    async def _create_root_folder(self) -> bool:
        """Create the folder that holds every device object."""
        status = await self.host.create_folder_node(
            self.namespaces.folder_node_id(ROOT_FOLDER_ID),
            ua.NodeId(ua.ObjectIds.ObjectsFolder, 0),
            self.config.folder_name,
            self.config.folder_name,
        )
        if not status.is_good():
            log_error(f"Failed to create folder '{self.config.folder_name}': {status.name}; "
                      "synchronization disabled")
            return False
        return True

    def _create_sync_manager(self, session: aiohttp.ClientSession) -> None:
        client = TlinkApiClient(
            session,
            self.config.base_url,
            timeout_s=self.config.request_timeout_s
        )
        credentials = CredentialManager(
            client,
            username=self.config.username,
            password=self.config.password,
            client_id=self.config.client_id,
            secret=self.config.secret,
        )
        builder = AddressSpaceBuilder(
            self.host,
            self.namespaces,
            generic_device_names=self.config.generic_device_names,
        )
        self.sync_manager = SyncManager(
            builder=builder,
            updater=ValueUpdater(self.host, self.namespaces),
            credentials=credentials,
            client=client,
            client_id=self.config.client_id,
            page_size=self.config.page_size,
            cycle_time_ms=self.config.sync_interval_ms,
            initial_delay_ms=self.config.initial_delay_ms,
        )

    async def _stop_sync(self) -> None:
        """Stop scheduling and let the in-flight cycle finish."""
        if self.sync_manager:
            await self.sync_manager.stop()

        if self._schedule_task and not self._schedule_task.done():
            self._schedule_task.cancel()
            try:
                await self._schedule_task
            except asyncio.CancelledError:
                pass

    async def _cleanup(self) -> None:
        """Cleanup resources."""
        if self._schedule_task and not self._schedule_task.done():
            self._schedule_task.cancel()
            try:
                await self._schedule_task
            except asyncio.CancelledError:
                pass

        self._schedule_task = None
        log_info("Server cleanup completed")
