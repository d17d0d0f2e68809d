"""Layer 2 connection resource models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ConnectionStatus(str, Enum):
    NOT_AVAILABLE = "NOT_AVAILABLE"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    PROVISIONING = "PROVISIONING"
    PROVISIONED = "PROVISIONED"
    PENDING_AUTO_APPROVAL = "PENDING_AUTO_APPROVAL"
    PENDING_BGP_PEERING = "PENDING_BGP_PEERING"
    PENDING_PROVIDER_VLAN = "PENDING_PROVIDER_VLAN"
    PENDING_DELETE = "PENDING_DELETE"
    DEPROVISIONING = "DEPROVISIONING"
    DEPROVISIONED = "DEPROVISIONED"
    DELETED = "DELETED"


# A connection seen in one of these states is gone (or going) remotely.
DELETION_STATUSES = frozenset({
    ConnectionStatus.PENDING_DELETE.value,
    ConnectionStatus.DEPROVISIONING.value,
    ConnectionStatus.DEPROVISIONED.value,
    ConnectionStatus.DELETED.value,
})


class RedundancyType(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class L2ConnectionField(str, Enum):
    """Attribute names of the equinix_ecx_l2_connection resource."""

    UUID = "uuid"
    NAME = "name"
    PROFILE_UUID = "profile_uuid"
    SPEED = "speed"
    SPEED_UNIT = "speed_unit"
    STATUS = "status"
    PROVIDER_STATUS = "provider_status"
    NOTIFICATIONS = "notifications"
    PURCHASE_ORDER_NUMBER = "purchase_order_number"
    PORT_UUID = "port_uuid"
    DEVICE_UUID = "device_uuid"
    DEVICE_INTERFACE_ID = "device_interface_id"
    VLAN_STAG = "vlan_stag"
    VLAN_CTAG = "vlan_ctag"
    NAMED_TAG = "named_tag"
    ADDITIONAL_INFO = "additional_info"
    ZSIDE_PORT_UUID = "zside_port_uuid"
    ZSIDE_VLAN_STAG = "zside_vlan_stag"
    ZSIDE_VLAN_CTAG = "zside_vlan_ctag"
    SELLER_REGION = "seller_region"
    SELLER_METRO_CODE = "seller_metro_code"
    AUTHORIZATION_KEY = "authorization_key"
    REDUNDANT_UUID = "redundant_uuid"
    REDUNDANCY_TYPE = "redundancy_type"
    SECONDARY_CONNECTION = "secondary_connection"


# Only these can change without replacing the connection.
UPDATABLE_FIELDS = (
    L2ConnectionField.NAME,
    L2ConnectionField.SPEED,
    L2ConnectionField.SPEED_UNIT,
)


class AdditionalInfo(BaseModel):
    """Free-form name/value pair attached to a connection."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class SecondaryConnectionState(BaseModel):
    """Redundant (secondary) half of an HA connection pair."""

    uuid: Optional[str] = None
    name: Optional[str] = None
    profile_uuid: Optional[str] = None
    speed: Optional[int] = None
    speed_unit: Optional[str] = None
    status: Optional[str] = None
    provider_status: Optional[str] = None

    # A-side endpoint
    port_uuid: Optional[str] = None
    device_uuid: Optional[str] = None
    device_interface_id: Optional[int] = None
    vlan_stag: Optional[int] = None
    vlan_ctag: Optional[int] = None

    # Z-side, populated by the API
    zside_port_uuid: Optional[str] = None
    zside_vlan_stag: Optional[int] = None
    zside_vlan_ctag: Optional[int] = None

    seller_region: Optional[str] = None
    seller_metro_code: Optional[str] = None
    authorization_key: Optional[str] = None
    redundant_uuid: Optional[str] = None
    redundancy_type: Optional[str] = None


class L2ConnectionState(BaseModel):
    """Attributes of an equinix_ecx_l2_connection resource.

    Used both for the user configuration handed to create/update and for the
    state returned by every lifecycle operation.
    """

    uuid: Optional[str] = None
    name: Optional[str] = None
    profile_uuid: Optional[str] = None
    speed: Optional[int] = None
    speed_unit: Optional[str] = None
    status: Optional[str] = None
    provider_status: Optional[str] = None
    notifications: list[str] = []
    purchase_order_number: Optional[str] = None

    # A-side endpoint: a port or a virtual device, never both
    port_uuid: Optional[str] = None
    device_uuid: Optional[str] = None
    device_interface_id: Optional[int] = None
    vlan_stag: Optional[int] = None
    vlan_ctag: Optional[int] = None
    named_tag: Optional[str] = None
    additional_info: list[AdditionalInfo] = []

    # Z-side
    zside_port_uuid: Optional[str] = None
    zside_vlan_stag: Optional[int] = None
    zside_vlan_ctag: Optional[int] = None

    # Seller
    seller_region: Optional[str] = None
    seller_metro_code: Optional[str] = None
    authorization_key: Optional[str] = None

    # Redundancy
    redundant_uuid: Optional[str] = None
    redundancy_type: Optional[str] = None
    secondary_connection: list[SecondaryConnectionState] = []

    @property
    def secondary(self) -> Optional[SecondaryConnectionState]:
        return self.secondary_connection[0] if self.secondary_connection else None
