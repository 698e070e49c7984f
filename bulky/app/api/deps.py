import uuid
from typing import AsyncGenerator, List, Optional

from fastapi import Depends, Header, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.constants import DEFAULT_PER_PAGE, MAX_PER_PAGE, ROLE_SUPER_ADMIN
from bulky.app.core.database import async_session
from bulky.app.core.exceptions import ServiceError
from bulky.app.core.logging import bind_principal
from bulky.app.core.security import USER_TYPE_ADMIN, USER_TYPE_BUYER, decode_token
from bulky.app.models.auth import Admin, Buyer
from bulky.app.services.cache import CacheService


# One database session per request
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


# Redis-backed cache service per request
async def get_cache() -> AsyncGenerator[CacheService, None]:
    redis = await CacheService.get_redis()
    yield CacheService(redis)


class CurrentUser(BaseModel):
    """Principal decoded from the bearer access token."""
    id: uuid.UUID
    user_type: str
    email: str
    role_kode: str = ""
    permissions: List[str] = []

    @property
    def is_super_admin(self) -> bool:
        return self.role_kode == ROLE_SUPER_ADMIN


class Pagination(BaseModel):
    page: int
    per_page: int


def get_pagination(
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE),
) -> Pagination:
    return Pagination(page=page, per_page=per_page)


def raise_service_error(e: ServiceError):
    """Convert service exceptions to HTTP exceptions."""
    raise HTTPException(status_code=e.status_code, detail=e.message)


async def get_current_user(authorization: Optional[str] = Header(None)) -> CurrentUser:
    """
    FastAPI dependency decoding ``Authorization: Bearer <access token>``.

    Raises:
        HTTPException 401: missing, malformed, expired token or a refresh token
    """
    if not authorization:
        raise HTTPException(status_code=401, detail="token tidak ditemukan")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(status_code=401, detail="format token tidak valid")

    claims = decode_token(parts[1])
    if not claims or claims.get("type") not in (USER_TYPE_ADMIN, USER_TYPE_BUYER):
        # Refresh tokens carry type=REFRESH and are rejected here
        raise HTTPException(status_code=401, detail="token tidak valid atau sudah expired")

    try:
        user_id = uuid.UUID(claims["sub"])
    except (KeyError, ValueError):
        raise HTTPException(status_code=401, detail="token tidak valid atau sudah expired")

    user = CurrentUser(
        id=user_id,
        user_type=claims["type"],
        email=claims.get("email", ""),
        role_kode=claims.get("role_kode") or "",
        permissions=claims.get("permissions") or [],
    )
    bind_principal(user.user_type, str(user.id))
    return user


async def require_admin(
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> CurrentUser:
    """Dependency: the caller must be a live, active admin."""
    if user.user_type != USER_TYPE_ADMIN:
        raise HTTPException(status_code=403, detail="akses ditolak")
    result = await session.execute(
        select(Admin.is_active).where(Admin.id == user.id, Admin.alive())
    )
    row = result.first()
    if row is None:
        raise HTTPException(status_code=401, detail="user tidak ditemukan")
    if not row.is_active:
        raise HTTPException(status_code=403, detail="akun Anda tidak aktif")
    return user


async def require_buyer(
    user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> CurrentUser:
    """Dependency: the caller must be a live, active buyer."""
    if user.user_type != USER_TYPE_BUYER:
        raise HTTPException(status_code=403, detail="akses ditolak")
    result = await session.execute(
        select(Buyer.is_active).where(Buyer.id == user.id, Buyer.alive())
    )
    row = result.first()
    if row is None:
        raise HTTPException(status_code=401, detail="user tidak ditemukan")
    if not row.is_active:
        raise HTTPException(status_code=403, detail="akun Anda tidak aktif")
    return user


def require_permission(permission: str):
    """
    Dependency factory for permission-gated admin endpoints.

        @router.get("/produk", dependencies=[Depends(require_permission("produk:read"))])

    SUPER_ADMIN passes every check; other roles need the kode in their token.
    """
    async def checker(admin: CurrentUser = Depends(require_admin)) -> CurrentUser:
        if admin.is_super_admin or permission in admin.permissions:
            return admin
        raise HTTPException(status_code=403, detail="akses ditolak")

    return checker
