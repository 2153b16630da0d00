"""Library endpoints: saved timelines of the signed-in user."""

from fastapi import APIRouter, HTTPException

from timeline_pro.dependencies import CurrentUserDep, LibraryServiceDep, WorkspaceServiceDep
from timeline_pro.errors import StaleRequestError
from timeline_pro.models import LibraryEntry, TimelineDocument, Workspace

router = APIRouter()


@router.get("", response_model=list[LibraryEntry])
async def list_timelines(user: CurrentUserDep, service: LibraryServiceDep):
    return await service.list_timelines(user.uid)


@router.post("", response_model=TimelineDocument, status_code=201)
async def save_workspace(user: CurrentUserDep, workspace: WorkspaceServiceDep):
    try:
        return await workspace.save_to_library(user.uid)
    except ValueError as exc:
        raise HTTPException(400, str(exc)) from exc


@router.get("/{doc_id}", response_model=TimelineDocument)
async def get_timeline(doc_id: str, user: CurrentUserDep, service: LibraryServiceDep):
    document = await service.get_timeline(user.uid, doc_id)
    if not document:
        raise HTTPException(404, "Timeline not found")
    return document


@router.post("/{doc_id}/load", response_model=Workspace)
async def load_timeline(doc_id: str, user: CurrentUserDep, workspace: WorkspaceServiceDep):
    try:
        return await workspace.load_from_library(user.uid, doc_id)
    except StaleRequestError as exc:
        raise HTTPException(409, str(exc)) from exc
    except LookupError as exc:
        raise HTTPException(404, str(exc)) from exc


@router.delete("/{doc_id}")
async def delete_timeline(doc_id: str, user: CurrentUserDep, service: LibraryServiceDep):
    deleted = await service.delete_timeline(user.uid, doc_id)
    if not deleted:
        raise HTTPException(404, "Timeline not found")
    return {"status": "deleted", "timeline_id": doc_id}
