# Pydantic models
from .connection import (
    DELETION_STATUSES,
    UPDATABLE_FIELDS,
    AdditionalInfo,
    ConnectionStatus,
    L2ConnectionField,
    L2ConnectionState,
    RedundancyType,
    SecondaryConnectionState,
)
from .accepter import AccepterField, L2ConnectionAccepterState
from .diagnostics import Diagnostic, Severity

__all__ = [
    "DELETION_STATUSES",
    "UPDATABLE_FIELDS",
    "AdditionalInfo",
    "ConnectionStatus",
    "L2ConnectionField",
    "L2ConnectionState",
    "RedundancyType",
    "SecondaryConnectionState",
    "AccepterField",
    "L2ConnectionAccepterState",
    "Diagnostic",
    "Severity",
]
