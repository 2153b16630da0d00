"""Workspace endpoints: the signed-in user's current timeline."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from timeline_pro.dependencies import CurrentUserDep, WorkspaceServiceDep
from timeline_pro.errors import GenerationError, SheetImportError, StaleRequestError
from timeline_pro.models import (
    EventCreate,
    GenerateRequest,
    RenderItem,
    ResearchRequest,
    SheetImportRequest,
    Workspace,
    WorkspaceCreate,
    ZoomUpdate,
)

router = APIRouter()


@router.get("", response_model=Workspace)
async def get_workspace(user: CurrentUserDep, service: WorkspaceServiceDep):
    return service.get_workspace(user.uid)


@router.post("/new", response_model=Workspace)
async def create_new(body: WorkspaceCreate, user: CurrentUserDep, service: WorkspaceServiceDep):
    return service.create_new(user.uid, body)


@router.put("/zoom", response_model=Workspace)
async def set_zoom(body: ZoomUpdate, user: CurrentUserDep, service: WorkspaceServiceDep):
    return service.set_zoom(user.uid, body.zoom_level)


@router.get("/layout", response_model=list[RenderItem])
async def get_layout(
    user: CurrentUserDep,
    service: WorkspaceServiceDep,
    zoom_level: Optional[int] = Query(default=None, ge=1, le=10),
):
    return service.layout(user.uid, zoom_level=zoom_level)


@router.post("/events", response_model=Workspace, status_code=201)
async def add_event(body: EventCreate, user: CurrentUserDep, service: WorkspaceServiceDep):
    return service.add_event(user.uid, body)


@router.delete("/events/{event_id}", response_model=Workspace)
async def remove_event(event_id: str, user: CurrentUserDep, service: WorkspaceServiceDep):
    try:
        return service.remove_event(user.uid, event_id)
    except LookupError as exc:
        raise HTTPException(404, str(exc)) from exc


@router.post("/generate", response_model=Workspace)
async def expand_with_ai(body: GenerateRequest, user: CurrentUserDep, service: WorkspaceServiceDep):
    try:
        return await service.expand_with_ai(user.uid, body.count)
    except StaleRequestError as exc:
        raise HTTPException(409, str(exc)) from exc
    except GenerationError as exc:
        raise HTTPException(502, str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc


@router.post("/research", response_model=Workspace)
async def research(body: ResearchRequest, user: CurrentUserDep, service: WorkspaceServiceDep):
    try:
        return await service.research(user.uid, body.topic)
    except StaleRequestError as exc:
        raise HTTPException(409, str(exc)) from exc
    except GenerationError as exc:
        raise HTTPException(502, str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc


@router.post("/import", response_model=Workspace)
async def import_sheet(body: SheetImportRequest, user: CurrentUserDep, service: WorkspaceServiceDep):
    try:
        return await service.import_sheet(user.uid, body.url)
    except StaleRequestError as exc:
        raise HTTPException(409, str(exc)) from exc
    except SheetImportError as exc:
        raise HTTPException(502, str(exc)) from exc
