"""
Node-space host adapter.

The synchronization engine only needs four operations from the OPC UA
server: create an object, create a typed variable, write a value and
write a status code. This module defines that contract and implements
it on top of an asyncua Server.
"""

from typing import Protocol

from asyncua import Server, ua

from ..logging import log_debug
from ..types import TypedValue


class NodeSpaceHost(Protocol):
    """Operations the engine requires from the address space host."""

    async def create_object_node(
        self, node_id: ua.NodeId, parent_id: ua.NodeId, name: str, description: str
    ) -> ua.StatusCode:
        ...

    async def create_variable_node(
        self,
        node_id: ua.NodeId,
        parent_id: ua.NodeId,
        name: str,
        description: str,
        value: TypedValue
    ) -> ua.StatusCode:
        ...

    async def write_value(self, node_id: ua.NodeId, value: TypedValue) -> ua.StatusCode:
        ...

    async def write_status(self, node_id: ua.NodeId, status: ua.StatusCode) -> ua.StatusCode:
        ...


def _good() -> ua.StatusCode:
    return ua.StatusCode(ua.StatusCodes.Good)


class AsyncuaNodeHost:
    """
    NodeSpaceHost backed by an asyncua Server.

    Host-side rejections are returned as status codes, never raised.
    """

    def __init__(self, server: Server):
        self.server = server

    async def create_folder_node(
        self, node_id: ua.NodeId, parent_id: ua.NodeId, name: str, description: str
    ) -> ua.StatusCode:
        """Create a FolderType object. Used once for the top-level folder."""
        try:
            parent = self.server.get_node(parent_id)
            node = await parent.add_folder(node_id, ua.QualifiedName(name, node_id.NamespaceIndex))
            await self._set_names(node, name, description)
            status = _good()
        except ua.UaStatusCodeError as e:
            status = ua.StatusCode(e.code)
        log_debug(f"{status.name}|create folder[{name}]")
        return status

    async def create_object_node(
        self, node_id: ua.NodeId, parent_id: ua.NodeId, name: str, description: str
    ) -> ua.StatusCode:
        """Create a BaseObjectType object under parent_id."""
        try:
            parent = self.server.get_node(parent_id)
            node = await parent.add_object(node_id, ua.QualifiedName(name, node_id.NamespaceIndex))
            await self._set_names(node, name, description)
            status = _good()
        except ua.UaStatusCodeError as e:
            status = ua.StatusCode(e.code)
        log_debug(f"{status.name}|create object[{name}]")
        return status

    async def create_variable_node(
        self,
        node_id: ua.NodeId,
        parent_id: ua.NodeId,
        name: str,
        description: str,
        value: TypedValue
    ) -> ua.StatusCode:
        """
        Create a scalar variable typed after value.

        asyncua creates variables with CurrentRead access only, so the
        node stays read-only for clients.
        """
        try:
            parent = self.server.get_node(parent_id)
            node = await parent.add_variable(
                node_id,
                ua.QualifiedName(name, node_id.NamespaceIndex),
                value.to_variant(),
                datatype=value.variant_type
            )
            await self._set_names(node, name, description)
            status = _good()
        except ua.UaStatusCodeError as e:
            status = ua.StatusCode(e.code)
        log_debug(f"{status.name}|create variable[{name}]")
        return status

    async def write_value(self, node_id: ua.NodeId, value: TypedValue) -> ua.StatusCode:
        """Write a new value; the value's status becomes Good."""
        try:
            await self.server.get_node(node_id).write_value(ua.DataValue(value.to_variant()))
            status = _good()
        except ua.UaStatusCodeError as e:
            status = ua.StatusCode(e.code)
        log_debug(f"{status.name}|write value[{node_id.to_string()}]")
        return status

    async def write_status(self, node_id: ua.NodeId, status: ua.StatusCode) -> ua.StatusCode:
        """Rewrite the current value with the given status code."""
        try:
            node = self.server.get_node(node_id)
            current = await node.read_data_value(raise_on_bad_status=False)
            await node.write_value(ua.DataValue(current.Value, StatusCode_=status))
            result = _good()
        except ua.UaStatusCodeError as e:
            result = ua.StatusCode(e.code)
        log_debug(f"{result.name}|write status[{node_id.to_string()}]")
        return result

    async def _set_names(self, node, name: str, description: str) -> None:
        """Set display name and description."""
        await node.write_attribute(
            ua.AttributeIds.DisplayName,
            ua.DataValue(ua.Variant(ua.LocalizedText(name)))
        )
        if description:
            await node.write_attribute(
                ua.AttributeIds.Description,
                ua.DataValue(ua.Variant(ua.LocalizedText(description)))
            )
