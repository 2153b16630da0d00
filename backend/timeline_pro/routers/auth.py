"""Sign-in endpoints."""

from fastapi import APIRouter, HTTPException

from timeline_pro.dependencies import CurrentUserDep, IdentityServiceDep
from timeline_pro.errors import AuthError
from timeline_pro.models import CustomTokenSignIn, UserIdentity

router = APIRouter()


@router.post("/anonymous", response_model=UserIdentity, status_code=201)
async def sign_in_anonymously(service: IdentityServiceDep):
    return await service.sign_in_anonymously()


@router.post("/token", response_model=UserIdentity)
async def sign_in_with_custom_token(body: CustomTokenSignIn, service: IdentityServiceDep):
    try:
        return await service.sign_in_with_custom_token(body.token)
    except AuthError as exc:
        raise HTTPException(401, str(exc)) from exc


@router.get("/me", response_model=UserIdentity)
async def current_user(user: CurrentUserDep):
    return user
