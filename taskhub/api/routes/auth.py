"""Authentication routes: login, logout and the caller's profile."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from taskhub.api.dependencies import (
    CurrentPrincipal,
    DbSession,
    client_info,
    get_token_service,
    unwrap,
)
from taskhub.auth.tokens import TokenService
from taskhub.schemas import ErrorResponse, LoginRequest, TokenResponse, UserResponse
from taskhub.services.auth import AuthService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: DbSession,
    tokens: Annotated[TokenService, Depends(get_token_service)],
):
    """Login with email and password.

    Returns a bearer token to send as ``Authorization: Bearer <token>``.
    """
    ip_address, user_agent = client_info(request)
    result = await AuthService(db, tokens).login(body.email, body.password, ip_address, user_agent)
    login_result = unwrap(result, response)
    return TokenResponse(
        access_token=login_result.access_token,
        user=UserResponse.model_validate(login_result.user),
    )


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    principal: CurrentPrincipal,
    db: DbSession,
    tokens: Annotated[TokenService, Depends(get_token_service)],
):
    ip_address, user_agent = client_info(request)
    unwrap(await AuthService(db, tokens).logout(principal, ip_address, user_agent), response)
    return {"message": "Logged out"}


@router.get("/me", response_model=UserResponse)
async def get_current_user(
    principal: CurrentPrincipal,
    db: DbSession,
    tokens: Annotated[TokenService, Depends(get_token_service)],
):
    """Get the currently authenticated user."""
    return await AuthService(db, tokens).me(principal)
