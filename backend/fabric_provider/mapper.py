"""
Field mapping between resource state and Fabric API connection objects.

expand_* functions turn resource attributes into API objects, flatten_*
functions turn API objects back into resource attributes. All of them are
pure: inputs are never modified.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from fabric_provider.clients.fabric import (
    FabricAdditionalInfo,
    FabricL2Connection,
    L2ConnectionUpdateRequest,
)
from fabric_provider.models import (
    UPDATABLE_FIELDS,
    AdditionalInfo,
    L2ConnectionField as F,
    L2ConnectionState,
    SecondaryConnectionState,
)

logger = logging.getLogger(__name__)

# Attributes copied one-to-one between resource and API object.
PRIMARY_EXPAND_FIELDS = (
    F.NAME,
    F.PROFILE_UUID,
    F.SPEED,
    F.SPEED_UNIT,
    F.NOTIFICATIONS,
    F.PURCHASE_ORDER_NUMBER,
    F.PORT_UUID,
    F.DEVICE_UUID,
    F.DEVICE_INTERFACE_ID,
    F.VLAN_STAG,
    F.VLAN_CTAG,
    F.NAMED_TAG,
    F.ZSIDE_PORT_UUID,
    F.ZSIDE_VLAN_STAG,
    F.ZSIDE_VLAN_CTAG,
    F.SELLER_REGION,
    F.SELLER_METRO_CODE,
    F.AUTHORIZATION_KEY,
)

SECONDARY_EXPAND_FIELDS = (
    F.PROFILE_UUID,
    F.SPEED,
    F.SPEED_UNIT,
    F.PORT_UUID,
    F.DEVICE_UUID,
    F.DEVICE_INTERFACE_ID,
    F.VLAN_STAG,
    F.VLAN_CTAG,
    F.SELLER_REGION,
    F.SELLER_METRO_CODE,
    F.AUTHORIZATION_KEY,
)

# device_interface_id is not returned for the primary; it keeps the configured value
PRIMARY_FLATTEN_FIELDS = (
    F.UUID,
    F.NAME,
    F.PROFILE_UUID,
    F.SPEED,
    F.SPEED_UNIT,
    F.STATUS,
    F.PROVIDER_STATUS,
    F.NOTIFICATIONS,
    F.PURCHASE_ORDER_NUMBER,
    F.PORT_UUID,
    F.DEVICE_UUID,
    F.VLAN_STAG,
    F.VLAN_CTAG,
    F.NAMED_TAG,
    F.ZSIDE_PORT_UUID,
    F.ZSIDE_VLAN_STAG,
    F.ZSIDE_VLAN_CTAG,
    F.SELLER_REGION,
    F.SELLER_METRO_CODE,
    F.AUTHORIZATION_KEY,
    F.REDUNDANT_UUID,
    F.REDUNDANCY_TYPE,
)

SECONDARY_FLATTEN_FIELDS = (
    F.UUID,
    F.NAME,
    F.PROFILE_UUID,
    F.SPEED,
    F.SPEED_UNIT,
    F.STATUS,
    F.PROVIDER_STATUS,
    F.PORT_UUID,
    F.DEVICE_UUID,
    F.DEVICE_INTERFACE_ID,
    F.VLAN_STAG,
    F.VLAN_CTAG,
    F.ZSIDE_PORT_UUID,
    F.ZSIDE_VLAN_STAG,
    F.ZSIDE_VLAN_CTAG,
    F.SELLER_REGION,
    F.SELLER_METRO_CODE,
    F.AUTHORIZATION_KEY,
    F.REDUNDANT_UUID,
    F.REDUNDANCY_TYPE,
)

ConnectionAttrs = Union[L2ConnectionState, SecondaryConnectionState]


def is_empty(value: Any) -> bool:
    """True for None and zero values ("", 0, empty collections)."""
    return value is None or value == "" or value == 0 or value == []


# ─────────────────────────────────────────────────────────────────
# Expand: resource -> API
# ─────────────────────────────────────────────────────────────────


def expand_l2_connections(
    state: L2ConnectionState,
) -> tuple[FabricL2Connection, Optional[FabricL2Connection]]:
    """Build the primary (and, when configured, secondary) create objects."""
    values: dict[str, Any] = {}
    for field in PRIMARY_EXPAND_FIELDS:
        value = getattr(state, field.value)
        if not is_empty(value):
            values[field.value] = value
    if state.additional_info:
        values[F.ADDITIONAL_INFO.value] = expand_additional_info(state.additional_info)

    primary = FabricL2Connection(**values)
    secondary = None
    if state.secondary_connection:
        secondary = expand_secondary_connection(state.secondary_connection)
    return primary, secondary


def expand_secondary_connection(
    blocks: list[SecondaryConnectionState],
) -> Optional[FabricL2Connection]:
    """
    Build the secondary create object from the nested block.

    Empty attributes are left unset so the API applies its defaults
    (usually inherited from the primary). Name is always carried over.
    """
    if not blocks:
        logger.warning("Expanding empty secondary connection collection")
        return None

    block = blocks[0]
    values: dict[str, Any] = {F.NAME.value: block.name}
    for field in SECONDARY_EXPAND_FIELDS:
        value = getattr(block, field.value)
        if not is_empty(value):
            values[field.value] = value
    return FabricL2Connection(**values)


def expand_additional_info(infos: list[AdditionalInfo]) -> list[FabricAdditionalInfo]:
    return [FabricAdditionalInfo(name=i.name, value=i.value) for i in infos]


# ─────────────────────────────────────────────────────────────────
# Flatten: API -> resource
# ─────────────────────────────────────────────────────────────────


def flatten_l2_connection(
    primary: FabricL2Connection,
    secondary: Optional[FabricL2Connection],
    previous: L2ConnectionState,
) -> L2ConnectionState:
    """
    Merge API objects into the previous resource state.

    Computed and optional attributes take the API value. The secondary block
    is only replaced when a secondary connection was fetched.
    """
    update: dict[str, Any] = {
        field.value: getattr(primary, field.value) for field in PRIMARY_FLATTEN_FIELDS
    }
    update[F.NOTIFICATIONS.value] = list(primary.notifications)
    update[F.ADDITIONAL_INFO.value] = flatten_additional_info(primary.additional_info)

    if secondary is not None:
        prev_secondary = None
        if previous.secondary_connection:
            prev_secondary = expand_secondary_connection(previous.secondary_connection)
        update[F.SECONDARY_CONNECTION.value] = [
            flatten_secondary_connection(prev_secondary, secondary)
        ]

    return previous.model_copy(update=update)


def flatten_secondary_connection(
    previous: Optional[FabricL2Connection], conn: FabricL2Connection
) -> SecondaryConnectionState:
    values = {field.value: getattr(conn, field.value) for field in SECONDARY_FLATTEN_FIELDS}
    # The API does not echo the interface ID; keep a known one to avoid a diff
    if previous is not None and not is_empty(previous.device_interface_id):
        values[F.DEVICE_INTERFACE_ID.value] = previous.device_interface_id
    return SecondaryConnectionState(**values)


def flatten_additional_info(infos: list[FabricAdditionalInfo]) -> list[AdditionalInfo]:
    return [AdditionalInfo(name=i.name or "", value=i.value or "") for i in infos]


# ─────────────────────────────────────────────────────────────────
# Update requests
# ─────────────────────────────────────────────────────────────────


def connection_changes(
    prior: Optional[ConnectionAttrs], planned: Optional[ConnectionAttrs]
) -> dict[F, Any]:
    """
    Return the updatable attributes whose planned value differs from prior.

    An unset (None) planned value keeps the prior value and is never a change.
    """
    if planned is None:
        return {}
    changes: dict[F, Any] = {}
    for field in UPDATABLE_FIELDS:
        new = getattr(planned, field.value)
        if new is None:
            continue
        old = getattr(prior, field.value) if prior is not None else None
        if new != old:
            changes[field] = new
    return changes


def fill_update_request(
    request: L2ConnectionUpdateRequest, changes: dict[F, Any]
) -> L2ConnectionUpdateRequest:
    """Copy supported changes onto an update request; anything else is dropped."""
    for field, value in changes.items():
        if field == F.NAME:
            request.with_name(value)
        elif field == F.SPEED:
            request.with_speed(value)
        elif field == F.SPEED_UNIT:
            request.with_speed_unit(value)
    return request
