"""
Equinix Fabric (ECX) API Client

Creates, reads, updates, deletes and confirms layer 2 connections.
API docs: https://developer.equinix.com/catalog/ecxfabricv3
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from fabric_provider.config import FabricAPIConfig, get_config
from fabric_provider.exceptions import ApplicationError, ProviderError, RestError, TransportError

logger = logging.getLogger(__name__)

L2_CONNECTIONS_PATH = "/ecx/v3/l2/connections"
TOKEN_PATH = "/oauth2/v1/token"


class FabricAdditionalInfo(BaseModel):
    """Name/value pair as sent and returned by the API"""
    name: str | None = None
    value: str | None = None


class FabricActionRequiredData(BaseModel):
    key: str | None = None
    value: str | None = None


class FabricAction(BaseModel):
    """Pending action on a connection (e.g. CONFIRM_CONNECTION)"""
    model_config = ConfigDict(populate_by_name=True)

    action_type: str | None = Field(default=None, alias="actionType")
    operation_id: str | None = Field(default=None, alias="operationId")
    message: str | None = None
    required_data: list[FabricActionRequiredData] = Field(default=[], alias="requiredData")


class FabricL2Connection(BaseModel):
    """Layer 2 connection data from the Fabric API"""
    model_config = ConfigDict(populate_by_name=True)

    uuid: str | None = None
    name: str | None = None
    profile_uuid: str | None = Field(default=None, alias="sellerServiceUUID")
    speed: int | None = None
    speed_unit: str | None = Field(default=None, alias="speedUnit")
    status: str | None = None
    provider_status: str | None = Field(default=None, alias="providerStatus")
    notifications: list[str] = []
    purchase_order_number: str | None = Field(default=None, alias="purchaseOrderNumber")
    port_uuid: str | None = Field(default=None, alias="portUUID")
    device_uuid: str | None = Field(default=None, alias="virtualDeviceUUID")
    device_interface_id: int | None = Field(default=None, alias="virtualDeviceInterfaceId")
    vlan_stag: int | None = Field(default=None, alias="vlanSTag")
    vlan_ctag: int | None = Field(default=None, alias="vlanCTag")
    named_tag: str | None = Field(default=None, alias="namedTag")
    additional_info: list[FabricAdditionalInfo] = Field(default=[], alias="additionalInfo")
    zside_port_uuid: str | None = Field(default=None, alias="zSidePortUUID")
    zside_vlan_stag: int | None = Field(default=None, alias="zSideVlanSTag")
    zside_vlan_ctag: int | None = Field(default=None, alias="zSideVlanCTag")
    seller_region: str | None = Field(default=None, alias="sellerRegion")
    seller_metro_code: str | None = Field(default=None, alias="sellerMetroCode")
    authorization_key: str | None = Field(default=None, alias="authorizationKey")
    redundant_uuid: str | None = Field(default=None, alias="redundantUUID")
    redundancy_type: str | None = Field(default=None, alias="redundancyType")
    actions: list[FabricAction] = Field(default=[], alias="actionDetails")


# Create request JSON key -> FabricL2Connection attribute
PRIMARY_REQUEST_FIELDS = {
    "primaryName": "name",
    "profileUUID": "profile_uuid",
    "speed": "speed",
    "speedUnit": "speed_unit",
    "notifications": "notifications",
    "purchaseOrderNumber": "purchase_order_number",
    "primaryPortUUID": "port_uuid",
    "virtualDeviceUUID": "device_uuid",
    "primaryVirtualDeviceInterfaceId": "device_interface_id",
    "primaryVlanSTag": "vlan_stag",
    "primaryVlanCTag": "vlan_ctag",
    "namedTag": "named_tag",
    "primaryZSidePortUUID": "zside_port_uuid",
    "primaryZSideVlanSTag": "zside_vlan_stag",
    "primaryZSideVlanCTag": "zside_vlan_ctag",
    "sellerRegion": "seller_region",
    "sellerMetroCode": "seller_metro_code",
    "authorizationKey": "authorization_key",
}

SECONDARY_REQUEST_FIELDS = {
    "secondaryName": "name",
    "secondaryProfileUUID": "profile_uuid",
    "secondarySpeed": "speed",
    "secondarySpeedUnit": "speed_unit",
    "secondaryPortUUID": "port_uuid",
    "secondaryVirtualDeviceUUID": "device_uuid",
    "secondaryVirtualDeviceInterfaceId": "device_interface_id",
    "secondaryVlanSTag": "vlan_stag",
    "secondaryVlanCTag": "vlan_ctag",
    "secondaryZSidePortUUID": "zside_port_uuid",
    "secondaryZSideVlanSTag": "zside_vlan_stag",
    "secondaryZSideVlanCTag": "zside_vlan_ctag",
    "secondarySellerRegion": "seller_region",
    "secondarySellerMetroCode": "seller_metro_code",
    "secondaryAuthorizationKey": "authorization_key",
}


def build_create_request(
    primary: FabricL2Connection, secondary: FabricL2Connection | None = None
) -> dict[str, Any]:
    """Build the create request body; unset attributes are left out."""
    body: dict[str, Any] = {}
    for key, attr in PRIMARY_REQUEST_FIELDS.items():
        value = getattr(primary, attr)
        if value is not None and value != []:
            body[key] = value
    if primary.additional_info:
        body["additionalInfo"] = [i.model_dump() for i in primary.additional_info]
    if secondary is not None:
        for key, attr in SECONDARY_REQUEST_FIELDS.items():
            value = getattr(secondary, attr)
            if value is not None:
                body[key] = value
    return body


def parse_rest_error(response: httpx.Response) -> RestError:
    """Turn an error response into a RestError with its application errors."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        entries = payload.get("errors", [payload])
    elif isinstance(payload, list):
        entries = payload
    else:
        entries = []

    app_errors = [
        ApplicationError(
            code=str(e.get("errorCode") or e.get("code") or ""),
            property=e.get("property"),
            message=e.get("errorMessage") or e.get("message"),
        )
        for e in entries
        if isinstance(e, dict)
    ]
    message = f"{response.request.method} {response.request.url.path} failed"
    return RestError(response.status_code, message, app_errors)


async def _log_request(request: httpx.Request) -> None:
    logger.debug("Fabric API request: %s %s", request.method, request.url)


async def _log_response(response: httpx.Response) -> None:
    logger.debug(
        "Fabric API response: %s %s -> %d",
        response.request.method,
        response.request.url,
        response.status_code,
    )


class L2ConnectionUpdateRequest:
    """
    Builder for a connection update.

    Usage:
        await client.new_l2_connection_update_request(uuid).with_name("n").execute()
    """

    def __init__(self, client: "FabricClient", uuid: str):
        self._client = client
        self.uuid = uuid
        self.changes: dict[str, Any] = {}

    def with_name(self, name: str) -> "L2ConnectionUpdateRequest":
        self.changes["name"] = name
        return self

    def with_speed(self, speed: int) -> "L2ConnectionUpdateRequest":
        self.changes["speed"] = speed
        return self

    def with_speed_unit(self, speed_unit: str) -> "L2ConnectionUpdateRequest":
        self.changes["speedUnit"] = speed_unit
        return self

    async def execute(self) -> None:
        if not self.changes:
            return
        await self._client._request(
            "PATCH",
            f"{L2_CONNECTIONS_PATH}/{self.uuid}",
            params={"action": "update"},
            json=self.changes,
        )


class FabricClient:
    """
    Async client for the Equinix Fabric API v3

    Authenticates with a static bearer token when one is configured,
    otherwise with OAuth2 client credentials.

    Usage:
        async with FabricClient() as client:
            conn = await client.get_l2_connection(uuid)
    """

    def __init__(
        self,
        config: FabricAPIConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or get_config().fabric
        self.base_url = self.config.base_url.rstrip('/')
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "FabricClient":
        self.config.validate_credentials()
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=self.config.effective_request_timeout(),
            transport=self._transport,
            event_hooks={"request": [_log_request], "response": [_log_response]},
        )
        try:
            token = self.config.token or await self._fetch_token()
        except ProviderError:
            await self.__aexit__(None, None, None)
            raise
        self._client.headers["Authorization"] = f"Bearer {token}"
        return self

    async def __aexit__(self, *args) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _fetch_token(self) -> str:
        """Exchange client credentials for an access token"""
        data = await self._request(
            "POST",
            TOKEN_PATH,
            json={
                "grant_type": "client_credentials",
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
            },
        )
        return data["access_token"]

    async def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        """Make a request to the Fabric API and return the decoded body"""
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context manager.")

        try:
            response = await self._client.request(method, endpoint, **kwargs)
        except httpx.TransportError as e:
            raise TransportError(f"{method} {endpoint} failed: {e}", cause=e) from e

        if response.is_error:
            raise parse_rest_error(response)
        if not response.content:
            return None
        return response.json()

    # ─────────────────────────────────────────────────────────────
    # Layer 2 connection endpoints
    # ─────────────────────────────────────────────────────────────

    async def get_l2_connection(self, uuid: str) -> FabricL2Connection:
        """Get a single connection by UUID"""
        data = await self._request("GET", f"{L2_CONNECTIONS_PATH}/{uuid}")
        return FabricL2Connection.model_validate(data)

    async def create_l2_connection(self, conn: FabricL2Connection) -> str:
        """Create a single connection, returns its UUID"""
        data = await self._request("POST", L2_CONNECTIONS_PATH, json=build_create_request(conn))
        return data["primaryConnectionId"]

    async def create_l2_redundant_connection(
        self, primary: FabricL2Connection, secondary: FabricL2Connection
    ) -> tuple[str, str]:
        """Create a primary/secondary pair in one call, returns both UUIDs"""
        data = await self._request(
            "POST", L2_CONNECTIONS_PATH, json=build_create_request(primary, secondary)
        )
        return data["primaryConnectionId"], data.get("secondaryConnectionId", "")

    async def delete_l2_connection(self, uuid: str) -> None:
        """Delete a connection by UUID"""
        await self._request("DELETE", f"{L2_CONNECTIONS_PATH}/{uuid}")

    def new_l2_connection_update_request(self, uuid: str) -> L2ConnectionUpdateRequest:
        return L2ConnectionUpdateRequest(self, uuid)

    async def confirm_l2_connection(
        self, uuid: str, access_key: str, secret_key: str
    ) -> None:
        """
        Approve a connection on the provider side.

        Args:
            uuid: Connection to approve
            access_key: Provider access key (e.g. AWS access key ID)
            secret_key: Provider secret key
        """
        await self._request(
            "PATCH",
            f"{L2_CONNECTIONS_PATH}/{uuid}",
            params={"action": "Approve"},
            json={"accessKey": access_key, "secretKey": secret_key},
        )
