"""Configuration rules checked before any API call is made."""

from __future__ import annotations

import re
from typing import Optional

from fabric_provider.exceptions import ResourceValidationError
from fabric_provider.models import (
    AccepterField,
    L2ConnectionAccepterState,
    L2ConnectionField as F,
    L2ConnectionState,
    SecondaryConnectionState,
)

L2_CONNECTION_TYPE = "equinix_ecx_l2_connection"
L2_CONNECTION_ACCEPTER_TYPE = "equinix_ecx_l2_connection_accepter"

SPEED_UNITS = ("MB", "GB")
NAMED_TAGS = ("Private", "Public", "Microsoft", "Manual")
VLAN_MIN, VLAN_MAX = 2, 4092
NAME_MAX_LENGTH = 24
PURCHASE_ORDER_MAX_LENGTH = 30

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
METRO_CODE_PATTERN = re.compile(r"^[A-Z]{2}$")


class _Errors:
    """Collects rule violations under an attribute path prefix."""

    def __init__(self, prefix: str = ""):
        self.prefix = prefix
        self.items: list[str] = []

    def add(self, field: str, message: str) -> None:
        name = getattr(field, "value", field)
        self.items.append(f"{self.prefix}{name}: {message}")

    def child(self, prefix: str) -> "_Errors":
        sub = _Errors(self.prefix + prefix)
        sub.items = self.items
        return sub


def _is_set(value) -> bool:
    return value is not None and value != "" and value != []


def _check_length(errors: _Errors, field: str, value: Optional[str], max_len: int) -> None:
    if value is not None and not 1 <= len(value) <= max_len:
        errors.add(field, f"expected length between 1 and {max_len}, got {len(value)}")


def _check_not_empty(errors: _Errors, field: str, value: Optional[str]) -> None:
    if value is not None and value == "":
        errors.add(field, "must not be empty")


def _check_vlan(errors: _Errors, field: str, value: Optional[int]) -> None:
    if value is not None and not VLAN_MIN <= value <= VLAN_MAX:
        errors.add(field, f"expected to be in the range ({VLAN_MIN} - {VLAN_MAX}), got {value}")


def _check_metro_code(errors: _Errors, field: str, value: Optional[str]) -> None:
    if value is not None and not METRO_CODE_PATTERN.match(value):
        errors.add(field, f"{value!r} is not a valid metro code")


def _check_endpoint(errors: _Errors, conn: L2ConnectionState | SecondaryConnectionState) -> None:
    """Port and device are mutually exclusive; VLAN tags belong to ports."""
    has_port = _is_set(conn.port_uuid)
    has_device = _is_set(conn.device_uuid)

    if has_port and has_device:
        errors.add(F.PORT_UUID, f"conflicts with {F.DEVICE_UUID.value}")
    elif not has_port and not has_device:
        errors.add(F.PORT_UUID, f"one of {F.PORT_UUID.value}, {F.DEVICE_UUID.value} must be specified")

    _check_not_empty(errors, F.PORT_UUID, conn.port_uuid)
    _check_not_empty(errors, F.DEVICE_UUID, conn.device_uuid)

    if has_port and _is_set(conn.device_interface_id):
        errors.add(F.DEVICE_INTERFACE_ID, f"conflicts with {F.PORT_UUID.value}")

    _check_vlan(errors, F.VLAN_STAG, conn.vlan_stag)
    _check_vlan(errors, F.VLAN_CTAG, conn.vlan_ctag)
    if _is_set(conn.vlan_stag) and not has_port:
        errors.add(F.VLAN_STAG, f"requires {F.PORT_UUID.value}")
    if has_device:
        for field, value in ((F.VLAN_STAG, conn.vlan_stag), (F.VLAN_CTAG, conn.vlan_ctag)):
            if _is_set(value):
                errors.add(field, f"conflicts with {F.DEVICE_UUID.value}")


def _check_secondary(errors: _Errors, conn: SecondaryConnectionState) -> None:
    if conn.name is None:
        errors.add(F.NAME, "is required")
    _check_length(errors, F.NAME, conn.name, NAME_MAX_LENGTH)
    _check_not_empty(errors, F.PROFILE_UUID, conn.profile_uuid)

    if conn.speed is not None and conn.speed < 1:
        errors.add(F.SPEED, f"expected to be at least (1), got {conn.speed}")
    if _is_set(conn.speed_unit):
        if conn.speed_unit not in SPEED_UNITS:
            errors.add(F.SPEED_UNIT, f"expected to be one of {list(SPEED_UNITS)}, got {conn.speed_unit}")
        if not _is_set(conn.speed):
            errors.add(F.SPEED_UNIT, f"requires {F.SPEED.value}")

    _check_endpoint(errors, conn)
    _check_not_empty(errors, F.SELLER_REGION, conn.seller_region)
    _check_metro_code(errors, F.SELLER_METRO_CODE, conn.seller_metro_code)
    _check_not_empty(errors, F.AUTHORIZATION_KEY, conn.authorization_key)


def validate_l2_connection_config(config: L2ConnectionState) -> None:
    """
    Check an equinix_ecx_l2_connection configuration.

    Raises:
        ResourceValidationError: listing every rule the configuration breaks
    """
    errors = _Errors()

    if config.name is None:
        errors.add(F.NAME, "is required")
    _check_length(errors, F.NAME, config.name, NAME_MAX_LENGTH)

    _check_not_empty(errors, F.PROFILE_UUID, config.profile_uuid)
    if not _is_set(config.profile_uuid) and not _is_set(config.zside_port_uuid):
        errors.add(
            F.PROFILE_UUID,
            f"one of {F.PROFILE_UUID.value}, {F.ZSIDE_PORT_UUID.value} must be specified",
        )

    if config.speed is None:
        errors.add(F.SPEED, "is required")
    elif config.speed < 1:
        errors.add(F.SPEED, f"expected to be at least (1), got {config.speed}")
    if config.speed_unit not in SPEED_UNITS:
        errors.add(F.SPEED_UNIT, f"expected to be one of {list(SPEED_UNITS)}, got {config.speed_unit}")

    if not config.notifications:
        errors.add(F.NOTIFICATIONS, "at least one email address is required")
    for address in config.notifications:
        if not EMAIL_PATTERN.match(address):
            errors.add(F.NOTIFICATIONS, f"{address!r} is not a valid email address")

    _check_length(errors, F.PURCHASE_ORDER_NUMBER, config.purchase_order_number, PURCHASE_ORDER_MAX_LENGTH)
    _check_endpoint(errors, config)

    if config.named_tag is not None and config.named_tag not in NAMED_TAGS:
        errors.add(F.NAMED_TAG, f"expected to be one of {list(NAMED_TAGS)}, got {config.named_tag}")
    for info in config.additional_info:
        if not info.name or not info.value:
            errors.add(F.ADDITIONAL_INFO, "name and value must not be empty")

    _check_not_empty(errors, F.ZSIDE_PORT_UUID, config.zside_port_uuid)
    _check_vlan(errors, F.ZSIDE_VLAN_STAG, config.zside_vlan_stag)
    _check_vlan(errors, F.ZSIDE_VLAN_CTAG, config.zside_vlan_ctag)
    _check_not_empty(errors, F.SELLER_REGION, config.seller_region)
    _check_metro_code(errors, F.SELLER_METRO_CODE, config.seller_metro_code)
    _check_not_empty(errors, F.AUTHORIZATION_KEY, config.authorization_key)

    if len(config.secondary_connection) > 1:
        errors.add(F.SECONDARY_CONNECTION, "at most one secondary connection is allowed")
    for i, secondary in enumerate(config.secondary_connection):
        _check_secondary(errors.child(f"{F.SECONDARY_CONNECTION.value}.{i}."), secondary)

    if errors.items:
        raise ResourceValidationError(L2_CONNECTION_TYPE, errors.items)


def validate_l2_connection_accepter_config(config: L2ConnectionAccepterState) -> None:
    """Check an equinix_ecx_l2_connection_accepter configuration."""
    errors = _Errors()
    if not config.connection_id:
        errors.add(AccepterField.CONNECTION_ID, "is required")
    _check_not_empty(errors, AccepterField.ACCESS_KEY, config.access_key)
    _check_not_empty(errors, AccepterField.SECRET_KEY, config.secret_key)
    _check_not_empty(errors, AccepterField.AWS_PROFILE, config.aws_profile)

    if errors.items:
        raise ResourceValidationError(L2_CONNECTION_ACCEPTER_TYPE, errors.items)
