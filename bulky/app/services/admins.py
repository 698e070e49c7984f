# bulky/app/services/admins.py
"""
Admin account management for the panel.
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.exceptions import ConflictError, NotFoundError, ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.core.responses import offset_for
from bulky.app.core.security import USER_TYPE_ADMIN, hash_password
from bulky.app.models.auth import Admin, Role
from bulky.app.services.activity_log import ACTION_RESET_PASSWORD, log_activity
from bulky.app.services.auth import admin_to_dict, ensure_password_strength

logger = get_logger(__name__)


class AdminServiceError(ServiceError):
    """Base exception for admin management errors."""


class AdminNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("admin tidak ditemukan")


class AdminService:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get(self, admin_id: uuid.UUID) -> Admin:
        result = await self.session.execute(
            select(Admin).where(Admin.id == admin_id, Admin.alive())
        )
        admin = result.scalar_one_or_none()
        if not admin:
            raise AdminNotFoundError()
        return admin

    async def _ensure_email_free(self, email: str, exclude_id: Optional[uuid.UUID] = None) -> None:
        query = select(Admin.id).where(func.lower(Admin.email) == email.lower(), Admin.alive())
        if exclude_id:
            query = query.where(Admin.id != exclude_id)
        if (await self.session.execute(query)).first():
            raise ConflictError("email sudah terdaftar")

    async def _ensure_role(self, role_id: uuid.UUID) -> Role:
        role = await self.session.get(Role, role_id)
        if not role:
            raise NotFoundError("role tidak ditemukan")
        return role

    async def list_admins(
        self,
        page: int,
        per_page: int,
        search: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = select(Admin).where(Admin.alive())
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(Admin.nama.ilike(pattern), Admin.email.ilike(pattern)))
        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()
        result = await self.session.execute(
            query.order_by(Admin.created_at.desc()).offset(offset_for(page, per_page)).limit(per_page)
        )
        return [admin_to_dict(a) for a in result.scalars().all()], total

    async def get_admin(self, admin_id: uuid.UUID) -> Dict[str, Any]:
        return admin_to_dict(await self._get(admin_id))

    async def create_admin(self, nama: str, email: str, password: str, role_id: uuid.UUID) -> Dict[str, Any]:
        await self._ensure_email_free(email)
        role = await self._ensure_role(role_id)
        ensure_password_strength(password)

        admin = Admin(nama=nama, email=email.lower(), password=hash_password(password), role=role)
        self.session.add(admin)
        await self.session.commit()
        logger.info("Admin created", admin_id=str(admin.id))
        return admin_to_dict(admin)

    async def update_admin(
        self,
        admin_id: uuid.UUID,
        nama: Optional[str] = None,
        email: Optional[str] = None,
        role_id: Optional[uuid.UUID] = None,
        is_active: Optional[bool] = None,
    ) -> Dict[str, Any]:
        admin = await self._get(admin_id)
        if email is not None and email.lower() != admin.email:
            await self._ensure_email_free(email, exclude_id=admin_id)
            admin.email = email.lower()
        if role_id is not None and role_id != admin.role_id:
            admin.role = await self._ensure_role(role_id)
        if nama is not None:
            admin.nama = nama
        if is_active is not None:
            admin.is_active = is_active
        await self.session.commit()
        return admin_to_dict(admin)

    async def delete_admin(self, admin_id: uuid.UUID, current_admin_id: uuid.UUID) -> None:
        if admin_id == current_admin_id:
            raise AdminServiceError("tidak dapat menghapus akun sendiri")
        admin = await self._get(admin_id)
        admin.deleted_at = datetime.utcnow()
        await self.session.commit()
        logger.info("Admin deleted", admin_id=str(admin_id))

    async def toggle_status(self, admin_id: uuid.UUID) -> Dict[str, Any]:
        admin = await self._get(admin_id)
        admin.is_active = not admin.is_active
        await self.session.commit()
        return {"id": admin.id, "is_active": admin.is_active}

    async def reset_password(self, admin_id: uuid.UUID, new_password: str, actor_id: uuid.UUID) -> None:
        admin = await self._get(admin_id)
        ensure_password_strength(new_password)
        admin.password = hash_password(new_password)
        await log_activity(
            self.session, USER_TYPE_ADMIN, ACTION_RESET_PASSWORD, "admin",
            deskripsi=f"reset password admin {admin.email}", user_id=actor_id,
        )
        await self.session.commit()

    async def list_roles(self) -> List[Dict[str, Any]]:
        result = await self.session.execute(select(Role).where(Role.is_active.is_(True)).order_by(Role.nama))
        return [
            {
                "id": r.id,
                "kode": r.kode,
                "nama": r.nama,
                "permissions": sorted(p.kode for p in r.permissions),
            }
            for r in result.scalars().all()
        ]
