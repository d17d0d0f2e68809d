"""Shared pytest fixtures and an in-memory Fabric API fake."""

from __future__ import annotations

from typing import Any

import pytest

from fabric_provider.clients.fabric import (
    L2_CONNECTIONS_PATH,
    FabricL2Connection,
    L2ConnectionUpdateRequest,
)
from fabric_provider.config import (
    AppConfig,
    L2ConnectionAccepterTimeouts,
    L2ConnectionTimeouts,
    PollCadence,
    PollingConfig,
    TimeoutsConfig,
)
from fabric_provider.exceptions import ApplicationError, RestError
from fabric_provider.models import AdditionalInfo, L2ConnectionState, SecondaryConnectionState


class FakeFabricClient:
    """In-memory stand-in for FabricClient.

    ``statuses`` scripts the status returned by successive reads of a
    connection; once a script runs out the last status sticks.
    """

    def __init__(self):
        self.connections: dict[str, FabricL2Connection] = {}
        self.statuses: dict[str, list[str]] = {}
        self.provider_statuses: dict[str, list[str]] = {}
        self.get_errors: dict[str, Exception] = {}
        self.delete_errors: dict[str, Exception] = {}
        self.delete_statuses: dict[str, list[str]] = {}
        self.created: list[tuple[FabricL2Connection, FabricL2Connection | None]] = []
        self.updates: list[tuple[str, dict[str, Any]]] = []
        self.deleted: list[str] = []
        self.confirmed: list[tuple[str, str, str]] = []
        self.get_calls: list[str] = []
        self._next_id = 0

    def _new_id(self) -> str:
        self._next_id += 1
        return f"conn-{self._next_id:04d}"

    def add(self, conn: FabricL2Connection) -> FabricL2Connection:
        self.connections[conn.uuid] = conn
        return conn

    async def create_l2_connection(self, conn: FabricL2Connection) -> str:
        self.created.append((conn, None))
        uuid = self._new_id()
        self.add(conn.model_copy(update={"uuid": uuid, "status": "PROVISIONING"}))
        return uuid

    async def create_l2_redundant_connection(
        self, primary: FabricL2Connection, secondary: FabricL2Connection
    ) -> tuple[str, str]:
        self.created.append((primary, secondary))
        primary_id, secondary_id = self._new_id(), self._new_id()
        # The API fills unset secondary attributes from the primary
        inherited = {
            k: getattr(primary, k)
            for k in FabricL2Connection.model_fields
            if k not in {"name", "uuid"} and getattr(secondary, k) in (None, [])
        }
        self.add(primary.model_copy(update={
            "uuid": primary_id,
            "status": "PROVISIONING",
            "redundant_uuid": secondary_id,
            "redundancy_type": "primary",
        }))
        self.add(secondary.model_copy(update={
            **inherited,
            "uuid": secondary_id,
            "status": "PROVISIONING",
            "redundant_uuid": primary_id,
            "redundancy_type": "secondary",
        }))
        return primary_id, secondary_id

    async def get_l2_connection(self, uuid: str) -> FabricL2Connection:
        self.get_calls.append(uuid)
        if uuid in self.get_errors:
            raise self.get_errors[uuid]
        conn = self.connections[uuid]
        update = {}
        for attr, scripts in (("status", self.statuses), ("provider_status", self.provider_statuses)):
            script = scripts.get(uuid)
            if script:
                update[attr] = script.pop(0) if len(script) > 1 else script[0]
        if update:
            conn = conn.model_copy(update=update)
            self.connections[uuid] = conn
        return conn.model_copy()

    async def delete_l2_connection(self, uuid: str) -> None:
        if uuid in self.delete_errors:
            raise self.delete_errors[uuid]
        self.deleted.append(uuid)
        if uuid in self.connections:
            self.statuses[uuid] = list(
                self.delete_statuses.get(uuid, ["DEPROVISIONING", "DEPROVISIONED"])
            )

    def new_l2_connection_update_request(self, uuid: str) -> L2ConnectionUpdateRequest:
        return L2ConnectionUpdateRequest(self, uuid)

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        # Only reached through L2ConnectionUpdateRequest.execute
        assert method == "PATCH"
        uuid = endpoint[len(L2_CONNECTIONS_PATH) + 1:]
        changes = kwargs["json"]
        self.updates.append((uuid, changes))
        fields = {"name": "name", "speed": "speed", "speedUnit": "speed_unit"}
        self.connections[uuid] = self.connections[uuid].model_copy(
            update={fields[k]: v for k, v in changes.items()}
        )
        return None

    async def confirm_l2_connection(self, uuid: str, access_key: str, secret_key: str) -> None:
        self.confirmed.append((uuid, access_key, secret_key))


def already_deleted_error() -> RestError:
    return RestError(
        400,
        "DELETE /ecx/v3/l2/connections/x failed",
        [ApplicationError(code="IC-LAYER2-4021", message="Connection already deleted")],
    )


@pytest.fixture
def fake_client() -> FakeFabricClient:
    return FakeFabricClient()


@pytest.fixture
def app_config() -> AppConfig:
    """Config with no polling delays and short timeouts."""
    return AppConfig(
        timeouts=TimeoutsConfig(
            l2_connection=L2ConnectionTimeouts(create=0.5, delete=0.5),
            l2_connection_accepter=L2ConnectionAccepterTimeouts(create=0.5),
        ),
        polling=PollingConfig(
            l2_connection=PollCadence(delay=0, interval=0.01),
            l2_connection_accepter=PollCadence(delay=0, interval=0.01),
        ),
    )


@pytest.fixture
def port_config() -> L2ConnectionState:
    return L2ConnectionState(
        name="tf-port-conn",
        profile_uuid="profile-1",
        speed=50,
        speed_unit="MB",
        notifications=["noc@example.com"],
        purchase_order_number="PO-1234",
        port_uuid="port-1",
        vlan_stag=100,
        vlan_ctag=200,
        named_tag="Private",
        additional_info=[
            AdditionalInfo(name="global", value="false"),
            AdditionalInfo(name="asn", value="65000"),
        ],
        seller_region="us-west-1",
        seller_metro_code="SV",
        authorization_key="123456789012",
    )


@pytest.fixture
def redundant_config(port_config: L2ConnectionState) -> L2ConnectionState:
    return port_config.model_copy(update={
        "secondary_connection": [
            SecondaryConnectionState(name="tf-port-conn-sec", port_uuid="port-2", vlan_stag=101)
        ]
    })


@pytest.fixture
def aws_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Isolate AWS credential lookups from the machine running the tests."""
    for var in (
        "AWS_ACCESS_KEY_ID",
        "AWS_SECRET_ACCESS_KEY",
        "AWS_SESSION_TOKEN",
        "AWS_SECURITY_TOKEN",
        "AWS_PROFILE",
        "AWS_CREDENTIAL_EXPIRATION",
    ):
        monkeypatch.delenv(var, raising=False)
    creds_file = tmp_path / "credentials"
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(creds_file))
    return creds_file
