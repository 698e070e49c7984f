"""Authentication endpoints for admins and buyers."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.api.deps import CurrentUser, get_current_user, get_session, raise_service_error
from bulky.app.core.exceptions import ServiceError
from bulky.app.core.limiter import limiter
from bulky.app.core.logging import get_logger
from bulky.app.core.responses import success_response
from bulky.app.core.security import USER_TYPE_ADMIN, USER_TYPE_BUYER
from bulky.app.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    UpdateProfileRequest,
)
from bulky.app.services.auth import AuthService

router = APIRouter()
logger = get_logger(__name__)


def _client_ip(request: Request):
    return request.client.host if request.client else None


async def _login(request: Request, data: LoginRequest, session: AsyncSession, user_type: str) -> dict:
    service = AuthService(session)
    try:
        result = await service.login(
            email=data.email,
            password=data.password,
            user_type=user_type,
            device_info=data.device_info,
            ip_address=_client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
    except ServiceError as e:
        raise_service_error(e)
    return success_response("login berhasil", result)


@router.post("/admin/login")
@limiter.limit("5/minute")
async def admin_login(
    request: Request,
    data: LoginRequest,
    session: AsyncSession = Depends(get_session),
):
    """Admin login. Rate limited to 5 attempts per minute per IP address."""
    return await _login(request, data, session, USER_TYPE_ADMIN)


@router.post("/buyer/login")
@limiter.limit("5/minute")
async def buyer_login(
    request: Request,
    data: LoginRequest,
    session: AsyncSession = Depends(get_session),
):
    """Buyer login. Rate limited to 5 attempts per minute per IP address."""
    return await _login(request, data, session, USER_TYPE_BUYER)


@router.post("/buyer/register", status_code=201)
async def buyer_register(
    data: RegisterRequest,
    session: AsyncSession = Depends(get_session),
):
    service = AuthService(session)
    try:
        buyer = await service.register_buyer(
            nama=data.nama,
            username=data.username,
            email=data.email,
            password=data.password,
            telepon=data.telepon,
        )
    except ServiceError as e:
        raise_service_error(e)
    return success_response("registrasi berhasil", buyer)


@router.post("/refresh")
async def refresh_token(
    data: RefreshRequest,
    session: AsyncSession = Depends(get_session),
):
    service = AuthService(session)
    try:
        result = await service.refresh(data.refresh_token)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("token berhasil diperbarui", result)


@router.post("/logout")
async def logout(
    data: RefreshRequest,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await AuthService(session).logout(data.refresh_token, user.id, user.user_type)
    logger.info("Logout", user_type=user.user_type, user_id=str(user.id))
    return success_response("logout berhasil")


@router.get("/me")
async def me(
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    try:
        data = await AuthService(session).me(user.id, user.user_type)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("data user", data)


@router.put("/profile")
async def update_profile(
    data: UpdateProfileRequest,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    try:
        result = await AuthService(session).update_profile(
            user.id, user.user_type, nama=data.nama, telepon=data.telepon
        )
    except ServiceError as e:
        raise_service_error(e)
    return success_response("profil berhasil diperbarui", result)


@router.put("/change-password")
async def change_password(
    data: ChangePasswordRequest,
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Change the caller's password. All refresh tokens of the user are revoked."""
    try:
        await AuthService(session).change_password(
            user.id, user.user_type, data.current_password, data.new_password
        )
    except ServiceError as e:
        raise_service_error(e)
    return success_response("password berhasil diubah")
