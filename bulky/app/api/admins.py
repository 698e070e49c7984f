"""Panel: admin accounts and roles."""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.api.deps import (
    CurrentUser,
    Pagination,
    get_pagination,
    get_session,
    raise_service_error,
    require_permission,
)
from bulky.app.core.exceptions import ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.core.responses import paginated_response, success_response
from bulky.app.schemas import AdminCreate, AdminUpdate, ResetPasswordRequest
from bulky.app.services.admins import AdminService

router = APIRouter()
logger = get_logger(__name__)


@router.get("", dependencies=[Depends(require_permission("admin:read"))])
async def list_admins(
    search: Optional[str] = Query(None),
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_session),
):
    items, total = await AdminService(session).list_admins(
        pagination.page, pagination.per_page, search=search
    )
    return paginated_response("data admin", items, pagination.page, pagination.per_page, total)


@router.get("/roles", dependencies=[Depends(require_permission("admin:read"))])
async def list_roles(session: AsyncSession = Depends(get_session)):
    return success_response("data role", await AdminService(session).list_roles())


@router.get("/{admin_id}", dependencies=[Depends(require_permission("admin:read"))])
async def get_admin(admin_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        data = await AdminService(session).get_admin(admin_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("detail admin", data)


@router.post("", status_code=201, dependencies=[Depends(require_permission("admin:create"))])
async def create_admin(data: AdminCreate, session: AsyncSession = Depends(get_session)):
    try:
        admin = await AdminService(session).create_admin(
            nama=data.nama, email=data.email, password=data.password, role_id=data.role_id
        )
    except ServiceError as e:
        raise_service_error(e)
    return success_response("admin berhasil dibuat", admin)


@router.put("/{admin_id}", dependencies=[Depends(require_permission("admin:update"))])
async def update_admin(
    admin_id: uuid.UUID,
    data: AdminUpdate,
    session: AsyncSession = Depends(get_session),
):
    try:
        admin = await AdminService(session).update_admin(admin_id, **data.model_dump(exclude_unset=True))
    except ServiceError as e:
        raise_service_error(e)
    return success_response("admin berhasil diperbarui", admin)


@router.delete("/{admin_id}")
async def delete_admin(
    admin_id: uuid.UUID,
    current: CurrentUser = Depends(require_permission("admin:delete")),
    session: AsyncSession = Depends(get_session),
):
    try:
        await AdminService(session).delete_admin(admin_id, current_admin_id=current.id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("admin berhasil dihapus")


@router.patch("/{admin_id}/toggle-status", dependencies=[Depends(require_permission("admin:update"))])
async def toggle_admin_status(admin_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        data = await AdminService(session).toggle_status(admin_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("status admin berhasil diubah", data)


@router.put("/{admin_id}/reset-password")
async def reset_admin_password(
    admin_id: uuid.UUID,
    data: ResetPasswordRequest,
    current: CurrentUser = Depends(require_permission("admin:update")),
    session: AsyncSession = Depends(get_session),
):
    try:
        await AdminService(session).reset_password(admin_id, data.new_password, actor_id=current.id)
    except ServiceError as e:
        raise_service_error(e)
    logger.info("Admin password reset", admin_id=str(admin_id), by=str(current.id))
    return success_response("password admin berhasil direset")
