"""
equinix_ecx_l2_connection_accepter lifecycle.

Accepts a pending layer 2 connection on the provider (AWS) side and waits
until the provider reports it provisioned. Deleting the accepter never
deletes the connection itself.
"""

from __future__ import annotations

import logging
from typing import Optional

from fabric_provider.clients.fabric import FabricL2Connection
from fabric_provider.credentials import resolve_aws_credentials
from fabric_provider.exceptions import OperationError, ProviderError, StateWaitError
from fabric_provider.models import (
    DELETION_STATUSES,
    ConnectionStatus,
    Diagnostic,
    L2ConnectionAccepterState,
)
from fabric_provider.polling import wait_for_state
from fabric_provider.resources.base import ResourceHandler, ResourceResult
from fabric_provider.validation import (
    L2_CONNECTION_ACCEPTER_TYPE,
    validate_l2_connection_accepter_config,
)

logger = logging.getLogger(__name__)

CONFIRM_OPERATION_ID = "CONFIRM_CONNECTION"
AWS_CONNECTION_ID_KEY = "awsConnectionId"

ACCEPT_PENDING = (
    ConnectionStatus.PROVISIONING.value,
    ConnectionStatus.PENDING_APPROVAL.value,
)
ACCEPT_TARGET = (ConnectionStatus.PROVISIONED.value,)


def aws_connection_id(conn: FabricL2Connection) -> Optional[str]:
    """Find the AWS hosted connection ID in the CONFIRM_CONNECTION action."""
    found = None
    for action in conn.actions:
        if action.operation_id != CONFIRM_OPERATION_ID:
            continue
        for data in action.required_data:
            if data.key == AWS_CONNECTION_ID_KEY:
                found = data.value
    return found


class L2ConnectionAccepterResource(ResourceHandler[L2ConnectionAccepterState]):
    """Lifecycle handler for equinix_ecx_l2_connection_accepter."""

    type_name = L2_CONNECTION_ACCEPTER_TYPE
    state_model = L2ConnectionAccepterState

    async def create(
        self, config: L2ConnectionAccepterState
    ) -> ResourceResult[L2ConnectionAccepterState]:
        validate_l2_connection_accepter_config(config)
        creds = resolve_aws_credentials(config.access_key, config.secret_key, config.aws_profile)

        conn_id = config.connection_id
        await self.client.confirm_l2_connection(conn_id, creds.access_key_id, creds.secret_access_key)
        logger.info("Confirmed L2 connection %s using %s credentials", conn_id, creds.source)

        state = config.model_copy()
        cadence = self.config.polling.l2_connection_accepter
        try:
            await wait_for_state(
                lambda: self._refresh_connection(conn_id, "provider_status"),
                pending=ACCEPT_PENDING,
                target=ACCEPT_TARGET,
                timeout=self.config.timeouts.l2_connection_accepter.create,
                delay=cadence.delay,
                interval=cadence.interval,
                not_found_checks=self.config.polling.not_found_checks,
            )
            return await self.read(state)
        except StateWaitError as e:
            raise OperationError(
                f"error waiting for connection {conn_id!r} to be provisioned on provider side: {e}",
                state=state,
            ) from e
        except ProviderError as e:
            raise OperationError(
                f"connection {conn_id!r} was confirmed but could not be refreshed: {e}",
                state=state,
            ) from e

    async def read(
        self, state: L2ConnectionAccepterState
    ) -> ResourceResult[L2ConnectionAccepterState]:
        if not state.connection_id:
            return ResourceResult(None)

        conn = await self.client.get_l2_connection(state.connection_id)
        if conn.status in DELETION_STATUSES:
            logger.info("L2 connection %s is %s, removing accepter from state", state.connection_id, conn.status)
            return ResourceResult(None)

        creds = resolve_aws_credentials(state.access_key, state.secret_key, state.aws_profile)
        return ResourceResult(
            state.model_copy(
                update={
                    "connection_id": conn.uuid,
                    "access_key": creds.access_key_id,
                    "secret_key": creds.secret_access_key,
                    "aws_connection_id": aws_connection_id(conn),
                }
            )
        )

    async def delete(
        self, state: L2ConnectionAccepterState
    ) -> ResourceResult[L2ConnectionAccepterState]:
        logger.warning(
            "Will not delete L2 connection %s; the accepter is only removed from state "
            "and the connection may remain",
            state.connection_id,
        )
        return ResourceResult(
            None,
            [
                Diagnostic.warning(
                    f"L2 connection {state.connection_id!r} was not deleted",
                    detail="The accepter was removed from state; the connection itself remains.",
                )
            ],
        )

    async def import_state(self, resource_id: str) -> ResourceResult[L2ConnectionAccepterState]:
        return await self.read(L2ConnectionAccepterState(connection_id=resource_id))
