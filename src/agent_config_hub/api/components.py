"""CRUD endpoints for individual Auto-Claude components."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..database import Component
from ..models.results import ComponentResponse
from ..services.component_service import ComponentService
from .deps import get_component_service

router = APIRouter(prefix="/auto-claude/components", tags=["components"])


def to_response(component: Component) -> ComponentResponse:
    return ComponentResponse(
        id=component.id,
        type=component.type,
        name=component.name,
        description=component.description,
        config=component.load_config(),
        enabled=component.enabled,
        tags=component.tags or "",
    )


@router.get("/{kind}", response_model=List[ComponentResponse])
async def list_components(
    kind: str, service: ComponentService = Depends(get_component_service)
):
    return [to_response(c) for c in await service.list(kind)]


@router.get("/{kind}/{name}", response_model=ComponentResponse)
async def get_component(
    kind: str, name: str, service: ComponentService = Depends(get_component_service)
):
    return to_response(await service.get(kind, name))


@router.post("/{kind}", response_model=ComponentResponse, status_code=201)
async def create_component(
    kind: str,
    payload: Dict[str, Any] = Body(...),
    name: Optional[str] = Query(None, description="Name for project configs"),
    service: ComponentService = Depends(get_component_service),
):
    """Create a component; 409 if one with the same name exists."""
    return to_response(await service.create(kind, payload, name=name))


@router.put("/{kind}/{name}", response_model=ComponentResponse)
async def update_component(
    kind: str,
    name: str,
    changes: Dict[str, Any] = Body(...),
    service: ComponentService = Depends(get_component_service),
):
    """Partially update a component; the name cannot change."""
    return to_response(await service.update(kind, name, changes))


@router.delete("/{kind}/{name}")
async def delete_component(
    kind: str, name: str, service: ComponentService = Depends(get_component_service)
):
    """Delete a component; model profiles in use by a project return 409."""
    await service.delete(kind, name)
    return {"deleted": True, "kind": kind, "name": name}
