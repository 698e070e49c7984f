# bulky/app/services/auth.py
"""
Authentication service for both principal types (admin and buyer).

Access tokens are short-lived JWTs. Refresh tokens are JWTs as well, but only
their SHA-256 digest is stored so they can be revoked on logout or password change.
"""
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.constants import ROLE_SUPER_ADMIN
from bulky.app.core.exceptions import AuthError, ConflictError, ForbiddenError, NotFoundError, ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.core.metrics import login_attempts_total
from bulky.app.core.security import (
    TOKEN_TYPE_REFRESH,
    USER_TYPE_ADMIN,
    USER_TYPE_BUYER,
    access_token_ttl_seconds,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    hash_token,
    verify_password,
)
from bulky.app.core.validation import validate_password_strength
from bulky.app.models.auth import Admin, Buyer, RefreshToken
from bulky.app.services.activity_log import (
    ACTION_CHANGE_PASSWORD,
    ACTION_LOGIN,
    ACTION_LOGIN_FAILED,
    ACTION_LOGOUT,
    ACTION_UPDATE_PROFILE,
    log_activity,
)

logger = get_logger(__name__)

MODUL_AUTH = "auth"


class AuthServiceError(ServiceError):
    """Base exception for auth service errors."""


def admin_to_dict(admin: Admin) -> Dict[str, Any]:
    role = admin.role
    return {
        "id": admin.id,
        "nama": admin.nama,
        "email": admin.email,
        "is_active": admin.is_active,
        "last_login_at": admin.last_login_at,
        "role": {
            "id": role.id,
            "kode": role.kode,
            "nama": role.nama,
        } if role else None,
        "permissions": admin_permissions(admin),
        "created_at": admin.created_at,
        "updated_at": admin.updated_at,
    }


def buyer_to_dict(buyer: Buyer) -> Dict[str, Any]:
    return {
        "id": buyer.id,
        "nama": buyer.nama,
        "username": buyer.username,
        "email": buyer.email,
        "telepon": buyer.telepon,
        "is_active": buyer.is_active,
        "is_verified": buyer.is_verified,
        "last_login_at": buyer.last_login_at,
        "created_at": buyer.created_at,
        "updated_at": buyer.updated_at,
    }


def admin_permissions(admin: Admin) -> list[str]:
    if not admin.role:
        return []
    return sorted(p.kode for p in admin.role.permissions)


def ensure_password_strength(password: str) -> None:
    ok, errors = validate_password_strength(password)
    if not ok:
        raise AuthServiceError("; ".join(errors))


class AuthService:
    """Login, token refresh, logout and self-service profile operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _find_admin_by_email(self, email: str) -> Optional[Admin]:
        result = await self.session.execute(
            select(Admin).where(func.lower(Admin.email) == email.lower(), Admin.alive())
        )
        return result.scalar_one_or_none()

    async def _find_buyer_by_email(self, email: str) -> Optional[Buyer]:
        result = await self.session.execute(
            select(Buyer).where(func.lower(Buyer.email) == email.lower(), Buyer.alive())
        )
        return result.scalar_one_or_none()

    async def _get_principal(self, user_id: uuid.UUID, user_type: str):
        model = Admin if user_type == USER_TYPE_ADMIN else Buyer
        result = await self.session.execute(
            select(model).where(model.id == user_id, model.alive())
        )
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError("user tidak ditemukan")
        return user

    def _access_token_for(self, user, user_type: str) -> str:
        if user_type == USER_TYPE_ADMIN:
            return create_access_token(
                user.id, USER_TYPE_ADMIN, user.email,
                role_kode=user.role.kode if user.role else "",
                permissions=admin_permissions(user),
            )
        return create_access_token(user.id, USER_TYPE_BUYER, user.email)

    async def login(
        self,
        email: str,
        password: str,
        user_type: str,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Authenticate an admin or buyer by e-mail and password.

        Failed attempts are recorded in the activity log with the same generic
        message for unknown e-mail and wrong password.

        Returns:
            Dict with access_token, refresh_token, token_type, expires_in and user
        """
        if user_type == USER_TYPE_ADMIN:
            user = await self._find_admin_by_email(email)
        else:
            user = await self._find_buyer_by_email(email)

        if not user or not verify_password(password, user.password):
            await log_activity(
                self.session, user_type, ACTION_LOGIN_FAILED, MODUL_AUTH,
                deskripsi=f"login gagal untuk {email}",
                user_id=user.id if user else None,
                ip_address=ip_address, user_agent=user_agent,
            )
            await self.session.commit()
            login_attempts_total.labels(user_type=user_type, outcome="failed").inc()
            logger.warning("Login failed", user_type=user_type, email=email, ip=ip_address)
            raise AuthError("email atau password salah")

        if not user.is_active:
            login_attempts_total.labels(user_type=user_type, outcome="inactive").inc()
            raise ForbiddenError("akun Anda tidak aktif")

        access_token = self._access_token_for(user, user_type)
        refresh_token, expires = create_refresh_token(user.id, user_type)
        self.session.add(RefreshToken(
            user_type=user_type,
            user_id=user.id,
            token=hash_token(refresh_token),
            device_info=device_info,
            ip_address=ip_address,
            expired_at=expires,
        ))
        user.last_login_at = datetime.utcnow()
        await log_activity(
            self.session, user_type, ACTION_LOGIN, MODUL_AUTH,
            deskripsi="login berhasil", user_id=user.id,
            ip_address=ip_address, user_agent=user_agent,
        )
        await self.session.commit()
        login_attempts_total.labels(user_type=user_type, outcome="success").inc()
        logger.info("Login succeeded", user_type=user_type, user_id=str(user.id))

        return {
            "access_token": access_token,
            "refresh_token": refresh_token,
            "token_type": "Bearer",
            "expires_in": access_token_ttl_seconds(),
            "user": admin_to_dict(user) if user_type == USER_TYPE_ADMIN else buyer_to_dict(user),
        }

    async def register_buyer(
        self,
        nama: str,
        username: str,
        email: str,
        password: str,
        telepon: Optional[str] = None,
    ) -> Dict[str, Any]:
        taken = await self.session.execute(
            select(Buyer.id).where(func.lower(Buyer.username) == username.lower(), Buyer.alive())
        )
        if taken.first():
            raise ConflictError("username sudah digunakan")
        if await self._find_buyer_by_email(email):
            raise ConflictError("email sudah terdaftar")
        ensure_password_strength(password)

        buyer = Buyer(
            nama=nama,
            username=username,
            email=email.lower(),
            password=hash_password(password),
            telepon=telepon,
        )
        self.session.add(buyer)
        await self.session.commit()
        await self.session.refresh(buyer)
        logger.info("Buyer registered", buyer_id=str(buyer.id))
        return buyer_to_dict(buyer)

    async def refresh(self, refresh_token: str) -> Dict[str, Any]:
        """Issue a new access token. The refresh token itself is returned unchanged."""
        claims = decode_token(refresh_token)
        if not claims or claims.get("type") != TOKEN_TYPE_REFRESH:
            raise AuthError("refresh token tidak valid")

        result = await self.session.execute(
            select(RefreshToken).where(RefreshToken.token == hash_token(refresh_token))
        )
        stored = result.scalar_one_or_none()
        if not stored or stored.is_revoked or stored.expired_at < datetime.utcnow():
            raise AuthError("refresh token tidak valid atau sudah expired")

        try:
            user = await self._get_principal(stored.user_id, stored.user_type)
        except NotFoundError:
            raise AuthError("user tidak ditemukan")
        if not user.is_active:
            raise ForbiddenError("akun Anda tidak aktif")

        return {
            "access_token": self._access_token_for(user, stored.user_type),
            "refresh_token": refresh_token,
            "token_type": "Bearer",
            "expires_in": access_token_ttl_seconds(),
        }

    async def logout(self, refresh_token: str, user_id: uuid.UUID, user_type: str) -> None:
        await self.session.execute(
            update(RefreshToken)
            .where(
                RefreshToken.token == hash_token(refresh_token),
                RefreshToken.user_id == user_id,
            )
            .values(is_revoked=True)
        )
        await log_activity(self.session, user_type, ACTION_LOGOUT, MODUL_AUTH, user_id=user_id)
        await self.session.commit()

    async def me(self, user_id: uuid.UUID, user_type: str) -> Dict[str, Any]:
        user = await self._get_principal(user_id, user_type)
        if user_type == USER_TYPE_ADMIN:
            data = admin_to_dict(user)
            data["is_super_admin"] = bool(user.role and user.role.kode == ROLE_SUPER_ADMIN)
            return data
        return buyer_to_dict(user)

    async def update_profile(
        self,
        user_id: uuid.UUID,
        user_type: str,
        nama: str,
        telepon: Optional[str] = None,
    ) -> Dict[str, Any]:
        user = await self._get_principal(user_id, user_type)
        user.nama = nama
        if user_type == USER_TYPE_BUYER and telepon is not None:
            user.telepon = telepon
        await log_activity(self.session, user_type, ACTION_UPDATE_PROFILE, MODUL_AUTH, user_id=user_id)
        await self.session.commit()
        return await self.me(user_id, user_type)

    async def change_password(
        self,
        user_id: uuid.UUID,
        user_type: str,
        current_password: str,
        new_password: str,
    ) -> None:
        """Change the password and revoke every refresh token of the user."""
        user = await self._get_principal(user_id, user_type)
        if not verify_password(current_password, user.password):
            raise AuthServiceError("password lama salah")
        ensure_password_strength(new_password)

        user.password = hash_password(new_password)
        await self.session.execute(
            update(RefreshToken)
            .where(RefreshToken.user_type == user_type, RefreshToken.user_id == user_id)
            .values(is_revoked=True)
        )
        await log_activity(self.session, user_type, ACTION_CHANGE_PASSWORD, MODUL_AUTH, user_id=user_id)
        await self.session.commit()
        logger.info("Password changed", user_type=user_type, user_id=str(user_id))
