"""Common pieces of the resource lifecycle handlers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Generic, Optional, TypeVar

from pydantic import BaseModel

from fabric_provider.clients.fabric import FabricClient, FabricL2Connection
from fabric_provider.config import AppConfig, get_config
from fabric_provider.models import Diagnostic
from fabric_provider.polling import status_of

StateT = TypeVar("StateT", bound=BaseModel)


@dataclass
class ResourceResult(Generic[StateT]):
    """Outcome of a lifecycle operation.

    ``state`` is None when the resource no longer exists and should be
    dropped from the host's state store.
    """

    state: Optional[StateT]
    diagnostics: list[Diagnostic] = field(default_factory=list)


class ResourceHandler(Generic[StateT]):
    """
    Lifecycle entry points for one resource type.

    Subclasses implement create/read/delete, and update when
    ``supports_update`` is set.
    """

    type_name: ClassVar[str]
    state_model: ClassVar[type[BaseModel]]
    supports_update: ClassVar[bool] = False

    def __init__(self, client: FabricClient, config: AppConfig | None = None):
        self.client = client
        self.config = config or get_config()

    def decode(self, data: dict[str, Any]) -> StateT:
        """Decode host-supplied attributes into the typed state model."""
        return self.state_model.model_validate(data)

    async def create(self, config: StateT) -> ResourceResult[StateT]:
        raise NotImplementedError

    async def read(self, state: StateT) -> ResourceResult[StateT]:
        raise NotImplementedError

    async def update(self, prior: StateT, config: StateT) -> ResourceResult[StateT]:
        raise NotImplementedError(f"{self.type_name} does not support in-place updates")

    async def delete(self, state: StateT) -> ResourceResult[StateT]:
        raise NotImplementedError

    async def import_state(self, resource_id: str) -> ResourceResult[StateT]:
        raise NotImplementedError

    async def _refresh_connection(
        self, uuid: str, attr: str = "status"
    ) -> tuple[FabricL2Connection, str]:
        conn = await self.client.get_l2_connection(uuid)
        return conn, status_of(conn, attr)
