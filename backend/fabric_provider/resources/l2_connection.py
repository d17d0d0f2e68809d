"""
equinix_ecx_l2_connection lifecycle.

Creates a layer 2 connection (optionally as a redundant primary/secondary
pair), waits for provisioning, keeps name and speed in sync, and removes
both halves on delete.
"""

from __future__ import annotations

import logging

from fabric_provider.exceptions import OperationError, ProviderError, RestError, StateWaitError
from fabric_provider.mapper import (
    connection_changes,
    expand_l2_connections,
    fill_update_request,
    flatten_l2_connection,
)
from fabric_provider.models import (
    DELETION_STATUSES,
    ConnectionStatus,
    Diagnostic,
    L2ConnectionField,
    L2ConnectionState,
)
from fabric_provider.polling import wait_for_state
from fabric_provider.resources.base import ResourceHandler, ResourceResult
from fabric_provider.validation import L2_CONNECTION_TYPE, validate_l2_connection_config

logger = logging.getLogger(__name__)

# Fabric application error: connection already deleted
ALREADY_DELETED_ERROR_CODE = "IC-LAYER2-4021"

CREATE_PENDING = (
    ConnectionStatus.PROVISIONING.value,
    ConnectionStatus.PENDING_AUTO_APPROVAL.value,
)
CREATE_TARGET = (
    ConnectionStatus.PROVISIONED.value,
    ConnectionStatus.PENDING_APPROVAL.value,
    ConnectionStatus.PENDING_BGP_PEERING.value,
    ConnectionStatus.PENDING_PROVIDER_VLAN.value,
)
DELETE_PENDING = (ConnectionStatus.DEPROVISIONING.value,)
DELETE_TARGET = (
    ConnectionStatus.PENDING_DELETE.value,
    ConnectionStatus.DEPROVISIONED.value,
)


class L2ConnectionResource(ResourceHandler[L2ConnectionState]):
    """Lifecycle handler for equinix_ecx_l2_connection."""

    type_name = L2_CONNECTION_TYPE
    state_model = L2ConnectionState
    supports_update = True

    async def create(self, config: L2ConnectionState) -> ResourceResult[L2ConnectionState]:
        validate_l2_connection_config(config)
        primary, secondary = expand_l2_connections(config)

        if secondary is not None:
            primary_id, secondary_id = await self.client.create_l2_redundant_connection(
                primary, secondary
            )
            logger.info(
                "Created redundant L2 connection pair: primary=%s secondary=%s",
                primary_id,
                secondary_id,
            )
            state = config.model_copy(
                update={"uuid": primary_id, "redundant_uuid": secondary_id or None}
            )
        else:
            primary_id = await self.client.create_l2_connection(primary)
            logger.info("Created L2 connection %s", primary_id)
            state = config.model_copy(update={"uuid": primary_id})

        # From here on the connection exists remotely; failures must keep its ID
        try:
            await self._wait(primary_id, CREATE_PENDING, CREATE_TARGET, self.config.timeouts.l2_connection.create)
            return await self.read(state)
        except StateWaitError as e:
            raise OperationError(
                f"error waiting for connection ({primary_id}) to be created: {e}", state=state
            ) from e
        except ProviderError as e:
            raise OperationError(
                f"connection ({primary_id}) was created but could not be refreshed: {e}", state=state
            ) from e

    async def read(self, state: L2ConnectionState) -> ResourceResult[L2ConnectionState]:
        if not state.uuid:
            return ResourceResult(None)

        primary = await self.client.get_l2_connection(state.uuid)
        if primary.status in DELETION_STATUSES:
            logger.info("L2 connection %s is %s, removing from state", state.uuid, primary.status)
            return ResourceResult(None)

        secondary = None
        if primary.redundant_uuid:
            secondary = await self.client.get_l2_connection(primary.redundant_uuid)

        return ResourceResult(flatten_l2_connection(primary, secondary, state))

    async def update(
        self, prior: L2ConnectionState, config: L2ConnectionState
    ) -> ResourceResult[L2ConnectionState]:
        validate_l2_connection_config(config)

        primary_changes = connection_changes(prior, config)
        if primary_changes:
            request = self.client.new_l2_connection_update_request(prior.uuid)
            await fill_update_request(request, primary_changes).execute()
            logger.info("Updated L2 connection %s: %s", prior.uuid, sorted(f.value for f in primary_changes))

        if prior.redundant_uuid:
            secondary_changes = connection_changes(prior.secondary, config.secondary)
            if secondary_changes:
                request = self.client.new_l2_connection_update_request(prior.redundant_uuid)
                await fill_update_request(request, secondary_changes).execute()
                logger.info(
                    "Updated secondary L2 connection %s: %s",
                    prior.redundant_uuid,
                    sorted(f.value for f in secondary_changes),
                )

        planned = config.model_copy(
            update={"uuid": prior.uuid, "redundant_uuid": prior.redundant_uuid}
        )
        return await self.read(planned)

    async def delete(self, state: L2ConnectionState) -> ResourceResult[L2ConnectionState]:
        if not state.uuid:
            return ResourceResult(None)

        try:
            await self.client.delete_l2_connection(state.uuid)
        except RestError as e:
            if e.has_application_error_code(ALREADY_DELETED_ERROR_CODE):
                logger.info("L2 connection %s was already deleted", state.uuid)
                return ResourceResult(None)
            raise

        diagnostics: list[Diagnostic] = []
        # No partial state on delete: a failed secondary removal is only reported
        if state.redundant_uuid:
            try:
                await self.client.delete_l2_connection(state.redundant_uuid)
            except ProviderError as e:
                logger.warning(
                    "Failed to remove secondary connection %s: %s", state.redundant_uuid, e
                )
                diagnostics.append(
                    Diagnostic.warning(
                        f"Failed to remove secondary connection with UUID {state.redundant_uuid!r}",
                        detail=str(e),
                        attribute_path=L2ConnectionField.REDUNDANT_UUID.value,
                    )
                )

        try:
            await self._wait(state.uuid, DELETE_PENDING, DELETE_TARGET, self.config.timeouts.l2_connection.delete)
        except StateWaitError as e:
            raise OperationError(
                f"error waiting for connection ({state.uuid}) to be removed: {e}", state=state
            ) from e

        logger.info("Deleted L2 connection %s", state.uuid)
        return ResourceResult(None, diagnostics)

    async def import_state(self, resource_id: str) -> ResourceResult[L2ConnectionState]:
        return await self.read(L2ConnectionState(uuid=resource_id))

    async def _wait(self, uuid: str, pending, target, timeout: float) -> None:
        cadence = self.config.polling.l2_connection
        await wait_for_state(
            lambda: self._refresh_connection(uuid),
            pending=pending,
            target=target,
            timeout=timeout,
            delay=cadence.delay,
            interval=cadence.interval,
            not_found_checks=self.config.polling.not_found_checks,
        )
