"""Layer 2 connection accepter resource models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class AccepterField(str, Enum):
    """Attribute names of the equinix_ecx_l2_connection_accepter resource."""

    CONNECTION_ID = "connection_id"
    ACCESS_KEY = "access_key"
    SECRET_KEY = "secret_key"
    AWS_PROFILE = "aws_profile"
    AWS_CONNECTION_ID = "aws_connection_id"


class L2ConnectionAccepterState(BaseModel):
    """Provider-side acceptance of a pending layer 2 connection."""

    connection_id: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    aws_profile: Optional[str] = None

    # Hosted Direct Connect connection on the AWS side
    aws_connection_id: Optional[str] = None
