"""Resource lifecycle handlers, keyed by resource type name."""

from fabric_provider.resources.base import ResourceHandler, ResourceResult
from fabric_provider.resources.l2_connection import L2ConnectionResource
from fabric_provider.resources.l2_connection_accepter import L2ConnectionAccepterResource

RESOURCE_TYPES: dict[str, type[ResourceHandler]] = {
    L2ConnectionResource.type_name: L2ConnectionResource,
    L2ConnectionAccepterResource.type_name: L2ConnectionAccepterResource,
}


def get_resource_handler(type_name: str) -> type[ResourceHandler] | None:
    """Return the handler class for a resource type, or None if unknown."""
    return RESOURCE_TYPES.get(type_name)


__all__ = [
    "RESOURCE_TYPES",
    "ResourceHandler",
    "ResourceResult",
    "L2ConnectionResource",
    "L2ConnectionAccepterResource",
    "get_resource_handler",
]
