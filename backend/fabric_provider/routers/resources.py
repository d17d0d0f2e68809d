"""Resource lifecycle API routes.

Each resource type exposes create/read/update/delete/import. Responses carry
the resulting state (null once the resource is gone) and a diagnostic list.
"""

import logging
from collections.abc import Awaitable
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from ..clients.fabric import FabricClient
from ..config import AppConfig
from ..exceptions import (
    ConfigurationError,
    CredentialResolutionError,
    OperationError,
    ProviderError,
    ResourceValidationError,
    RestError,
    StateWaitError,
    TransportError,
)
from ..models import Diagnostic
from ..resources import ResourceHandler, ResourceResult, get_resource_handler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/resources", tags=["resources"])

# Exception type -> HTTP status, most specific first
ERROR_STATUS = (
    (ResourceValidationError, 422),
    (CredentialResolutionError, 400),
    (ConfigurationError, 500),
    (RestError, 502),
    (TransportError, 502),
    (StateWaitError, 504),
    (OperationError, 504),
)


class CreateRequest(BaseModel):
    config: dict[str, Any]


class ReadRequest(BaseModel):
    state: dict[str, Any]


class UpdateRequest(BaseModel):
    prior_state: dict[str, Any]
    config: dict[str, Any]


class DeleteRequest(BaseModel):
    state: dict[str, Any]


class ImportRequest(BaseModel):
    id: str


class OperationResponse(BaseModel):
    state: Optional[dict[str, Any]] = None
    diagnostics: list[Diagnostic] = []


def get_fabric_client(request: Request) -> FabricClient:
    client = getattr(request.app.state, "fabric_client", None)
    if client is None:
        raise HTTPException(status_code=503, detail="Fabric API client is not configured")
    return client


def get_app_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_handler(
    resource_type: str,
    client: FabricClient = Depends(get_fabric_client),
    config: AppConfig = Depends(get_app_config),
) -> ResourceHandler:
    handler_cls = get_resource_handler(resource_type)
    if handler_cls is None:
        raise HTTPException(status_code=404, detail=f"Resource type '{resource_type}' not found")
    return handler_cls(client, config)


def _dump(state: Any) -> Optional[dict[str, Any]]:
    return state.model_dump(mode="json") if state is not None else None


def _error_response(e: Exception, state: Any = None) -> JSONResponse:
    status = 500
    # An OperationError answers with the status of what caused it
    source = e.__cause__ if isinstance(e, OperationError) and e.__cause__ is not None else e
    for exc_type, code in ERROR_STATUS:
        if isinstance(source, exc_type):
            status = code
            break

    if isinstance(e, ResourceValidationError):
        diagnostics = [Diagnostic.error("Invalid configuration", detail=err) for err in e.errors]
    elif isinstance(e, ValidationError):
        status = 422
        diagnostics = [
            Diagnostic.error("Invalid attribute value", detail=f"{'.'.join(map(str, err['loc']))}: {err['msg']}")
            for err in e.errors()
        ]
    else:
        diagnostics = [Diagnostic.error(type(e).__name__, detail=str(e))]

    if isinstance(e, OperationError):
        state = e.state
    body = OperationResponse(state=_dump(state), diagnostics=diagnostics)
    return JSONResponse(status_code=status, content=body.model_dump(mode="json"))


async def _run(operation: Awaitable[ResourceResult], prior: Any = None) -> Any:
    try:
        result = await operation
    except (ProviderError, ValidationError) as e:
        logger.warning("Resource operation failed: %s", e)
        return _error_response(e, prior)
    return OperationResponse(state=_dump(result.state), diagnostics=result.diagnostics)


@router.post("/{resource_type}/create", response_model=OperationResponse)
async def create_resource(body: CreateRequest, handler: ResourceHandler = Depends(get_handler)):
    """Create a resource from its configuration."""
    try:
        config = handler.decode(body.config)
    except ValidationError as e:
        return _error_response(e)
    return await _run(handler.create(config))


@router.post("/{resource_type}/read", response_model=OperationResponse)
async def read_resource(body: ReadRequest, handler: ResourceHandler = Depends(get_handler)):
    """Refresh a resource's state from the API."""
    try:
        state = handler.decode(body.state)
    except ValidationError as e:
        return _error_response(e)
    return await _run(handler.read(state), state)


@router.post("/{resource_type}/update", response_model=OperationResponse)
async def update_resource(body: UpdateRequest, handler: ResourceHandler = Depends(get_handler)):
    """Apply in-place changes to a resource."""
    if not handler.supports_update:
        raise HTTPException(
            status_code=405, detail=f"Resource type '{handler.type_name}' cannot be updated in place"
        )
    try:
        prior = handler.decode(body.prior_state)
        config = handler.decode(body.config)
    except ValidationError as e:
        return _error_response(e)
    return await _run(handler.update(prior, config), prior)


@router.post("/{resource_type}/delete", response_model=OperationResponse)
async def delete_resource(body: DeleteRequest, handler: ResourceHandler = Depends(get_handler)):
    """Delete a resource."""
    try:
        state = handler.decode(body.state)
    except ValidationError as e:
        return _error_response(e)
    return await _run(handler.delete(state), state)


@router.post("/{resource_type}/import", response_model=OperationResponse)
async def import_resource(body: ImportRequest, handler: ResourceHandler = Depends(get_handler)):
    """Import an existing resource by its identifier."""
    return await _run(handler.import_state(body.id))
