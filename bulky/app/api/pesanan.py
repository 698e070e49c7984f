"""Panel: order processing."""
import uuid
from datetime import date
from typing import Literal, Optional

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
from bulky.app.core.responses import paginated_response, success_response
from bulky.app.schemas import PesananStatusUpdate
from bulky.app.services.pesanan import PesananService

router = APIRouter()

_read = [Depends(require_permission("pesanan:read"))]


@router.get("", dependencies=_read)
async def list_pesanan(
    cari: Optional[str] = Query(None),
    order_status: Optional[str] = Query(None),
    payment_status: Optional[str] = Query(None),
    delivery_type: Optional[str] = Query(None),
    tanggal_dari: Optional[date] = Query(None),
    tanggal_sampai: Optional[date] = Query(None),
    sort_by: Literal["created_at", "total", "kode"] = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_session),
):
    items, total = await PesananService(session).list_pesanan(
        pagination.page,
        pagination.per_page,
        cari=cari,
        order_status=order_status,
        payment_status=payment_status,
        delivery_type=delivery_type,
        tanggal_dari=tanggal_dari,
        tanggal_sampai=tanggal_sampai,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return paginated_response("data pesanan", items, pagination.page, pagination.per_page, total)


@router.get("/statistik", dependencies=_read)
async def pesanan_statistik(
    tanggal_dari: Optional[date] = Query(None),
    tanggal_sampai: Optional[date] = Query(None),
    session: AsyncSession = Depends(get_session),
):
    data = await PesananService(session).get_statistik(tanggal_dari, tanggal_sampai)
    return success_response("statistik pesanan", data)


@router.get("/{pesanan_id}", dependencies=_read)
async def get_pesanan(pesanan_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        data = await PesananService(session).get_pesanan(pesanan_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("detail pesanan", data)


@router.patch("/{pesanan_id}/status")
async def update_pesanan_status(
    pesanan_id: uuid.UUID,
    data: PesananStatusUpdate,
    admin: CurrentUser = Depends(require_permission("pesanan:update")),
    session: AsyncSession = Depends(get_session),
):
    try:
        result = await PesananService(session).update_status(
            pesanan_id,
            data.order_status,
            admin_id=admin.id,
            note=data.note,
            catatan_admin=data.catatan_admin,
        )
    except ServiceError as e:
        raise_service_error(e)
    return success_response("status pesanan berhasil diubah", result)


@router.delete("/{pesanan_id}", dependencies=[Depends(require_permission("pesanan:delete"))])
async def delete_pesanan(pesanan_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        await PesananService(session).delete_pesanan(pesanan_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("pesanan berhasil dihapus")
