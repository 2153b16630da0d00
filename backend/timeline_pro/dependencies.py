"""
Dependency injection for FastAPI routes.

Provides typed service dependencies that enable IDE navigation (Ctrl+Click).
"""

from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request

from timeline_pro.models import UserIdentity
from timeline_pro.services.identity import IdentityService
from timeline_pro.services.library import LibraryService
from timeline_pro.services.workspace import WorkspaceService


def get_identity_service(request: Request) -> IdentityService:
    return request.app.state.identity_service


def get_library_service(request: Request) -> LibraryService:
    return request.app.state.library_service


def get_workspace_service(request: Request) -> WorkspaceService:
    return request.app.state.workspace_service


IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]
LibraryServiceDep = Annotated[LibraryService, Depends(get_library_service)]
WorkspaceServiceDep = Annotated[WorkspaceService, Depends(get_workspace_service)]


def bearer_token(authorization: Optional[str]) -> str:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return ""
    return token.strip()


async def get_current_user(
    identity: IdentityServiceDep,
    authorization: Annotated[Optional[str], Header()] = None,
) -> UserIdentity:
    user = await identity.resolve(bearer_token(authorization))
    if user is None:
        raise HTTPException(401, "Sign in required", headers={"WWW-Authenticate": "Bearer"})
    return user


CurrentUserDep = Annotated[UserIdentity, Depends(get_current_user)]
