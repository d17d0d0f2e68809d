"""API clients for external services."""

from fabric_provider.clients.fabric import (
    FabricAction,
    FabricAdditionalInfo,
    FabricClient,
    FabricL2Connection,
    L2ConnectionUpdateRequest,
)

__all__ = [
    "FabricAction",
    "FabricAdditionalInfo",
    "FabricClient",
    "FabricL2Connection",
    "L2ConnectionUpdateRequest",
]
