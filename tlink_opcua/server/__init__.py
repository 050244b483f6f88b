"""
Bridge server core components.

This package provides:
- Server lifecycle management
- Node-space host adapter over asyncua
- Address space building for devices and sensors
- Change-detected value updates
- Listing pagination and sync scheduling
"""

from .server_manager import BridgeServerManager
from .node_host import NodeSpaceHost, AsyncuaNodeHost
from .address_space_builder import AddressSpaceBuilder, NamespaceIndices
from .value_updater import ValueUpdater
from .pagination import PaginationDriver
from .sync_manager import SyncManager

__all__ = [
    'BridgeServerManager',
    'NodeSpaceHost',
    'AsyncuaNodeHost',
    'AddressSpaceBuilder',
    'NamespaceIndices',
    'ValueUpdater',
    'PaginationDriver',
    'SyncManager',
]
