"""Panel: review moderation."""
import uuid
from datetime import date
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
from bulky.app.core.responses import PaginationMeta, success_response
from bulky.app.schemas import UlasanApprove, UlasanBulkApprove
from bulky.app.services.ulasan import UlasanService

router = APIRouter()


@router.get("", dependencies=[Depends(require_permission("ulasan:read"))])
async def list_ulasan(
    is_approved: Optional[bool] = Query(None),
    rating: Optional[int] = Query(None, ge=1, le=5),
    cari: Optional[str] = Query(None),
    tanggal_dari: Optional[date] = Query(None),
    tanggal_sampai: Optional[date] = Query(None),
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_session),
):
    """Review list with a pending/approved summary next to the page."""
    items, total, summary = await UlasanService(session).list_admin(
        pagination.page,
        pagination.per_page,
        is_approved=is_approved,
        rating=rating,
        cari=cari,
        tanggal_dari=tanggal_dari,
        tanggal_sampai=tanggal_sampai,
    )
    return success_response(
        "data ulasan",
        {"items": items, "summary": summary},
        PaginationMeta.build(pagination.page, pagination.per_page, total),
    )


@router.patch("/bulk-approve")
async def bulk_approve_ulasan(
    data: UlasanBulkApprove,
    admin: CurrentUser = Depends(require_permission("ulasan:update")),
    session: AsyncSession = Depends(get_session),
):
    try:
        updated = await UlasanService(session).bulk_approve(data.ids, data.is_approved, admin.id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"{updated} ulasan berhasil diperbarui", {"updated": updated})


@router.get("/{ulasan_id}", dependencies=[Depends(require_permission("ulasan:read"))])
async def get_ulasan(ulasan_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        data = await UlasanService(session).get(ulasan_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("detail ulasan", data)


@router.patch("/{ulasan_id}/approve")
async def approve_ulasan(
    ulasan_id: uuid.UUID,
    data: UlasanApprove,
    admin: CurrentUser = Depends(require_permission("ulasan:update")),
    session: AsyncSession = Depends(get_session),
):
    try:
        result = await UlasanService(session).approve(ulasan_id, data.is_approved, admin.id)
    except ServiceError as e:
        raise_service_error(e)
    message = "ulasan berhasil disetujui" if data.is_approved else "persetujuan ulasan dibatalkan"
    return success_response(message, result)


@router.delete("/{ulasan_id}", dependencies=[Depends(require_permission("ulasan:delete"))])
async def delete_ulasan(ulasan_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        await UlasanService(session).delete(ulasan_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("ulasan berhasil dihapus")
