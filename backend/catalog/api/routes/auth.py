from fastapi import APIRouter

from catalog.models.dto.auth import LoginRequest, TokenResponse
from catalog.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest):
    return TokenResponse(token=auth_service.login(body.username, body.password))
