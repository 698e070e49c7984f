"""Panel: coupons."""
import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.api.deps import (
    Pagination,
    get_pagination,
    get_session,
    raise_service_error,
    require_permission,
)
from bulky.app.core.exceptions import ServiceError
from bulky.app.core.responses import PaginationMeta, paginated_response, success_response
from bulky.app.schemas import GenerateKodeRequest, KuponCreate, KuponUpdate
from bulky.app.services.kupon import KuponService

router = APIRouter()

_read = [Depends(require_permission("kupon:read"))]
_update = [Depends(require_permission("kupon:update"))]


@router.get("", dependencies=_read)
async def list_kupon(
    search: Optional[str] = Query(None),
    jenis_diskon: Optional[Literal["persentase", "jumlah_tetap"]] = Query(None),
    is_active: Optional[bool] = Query(None),
    is_expired: Optional[bool] = Query(None),
    sort_by: Literal["tanggal_kedaluarsa", "updated_at"] = Query("updated_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_session),
):
    items, total = await KuponService(session).list_kupon(
        pagination.page,
        pagination.per_page,
        search=search,
        jenis_diskon=jenis_diskon,
        is_active=is_active,
        is_expired=is_expired,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return paginated_response("data kupon", items, pagination.page, pagination.per_page, total)


@router.get("/kategori-dropdown", dependencies=_read)
async def kupon_kategori_dropdown(session: AsyncSession = Depends(get_session)):
    return success_response("dropdown kategori", await KuponService(session).kategori_dropdown())


@router.post("/generate-kode", dependencies=[Depends(require_permission("kupon:create"))])
async def generate_kupon_kode(data: GenerateKodeRequest, session: AsyncSession = Depends(get_session)):
    try:
        kode = await KuponService(session).generate_kode(prefix=data.prefix, length=data.length)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("kode kupon berhasil dibuat", {"kode": kode})


@router.get("/{kupon_id}", dependencies=_read)
async def get_kupon(kupon_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        data = await KuponService(session).get_kupon(kupon_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("detail kupon", data)


@router.get("/{kupon_id}/usage", dependencies=_read)
async def get_kupon_usage(
    kupon_id: uuid.UUID,
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_session),
):
    try:
        result = await KuponService(session).get_usages(kupon_id, pagination.page, pagination.per_page)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(
        "riwayat pemakaian kupon",
        {"kupon": result["kupon"], "items": result["items"]},
        PaginationMeta.build(pagination.page, pagination.per_page, result["total"]),
    )


@router.post("", status_code=201, dependencies=[Depends(require_permission("kupon:create"))])
async def create_kupon(data: KuponCreate, session: AsyncSession = Depends(get_session)):
    try:
        kupon = await KuponService(session).create_kupon(data.model_dump())
    except ServiceError as e:
        raise_service_error(e)
    return success_response("kupon berhasil dibuat", kupon)


@router.put("/{kupon_id}", dependencies=_update)
async def update_kupon(kupon_id: uuid.UUID, data: KuponUpdate, session: AsyncSession = Depends(get_session)):
    try:
        kupon = await KuponService(session).update_kupon(kupon_id, data.model_dump(exclude_unset=True))
    except ServiceError as e:
        raise_service_error(e)
    return success_response("kupon berhasil diperbarui", kupon)


@router.delete("/{kupon_id}", dependencies=[Depends(require_permission("kupon:delete"))])
async def delete_kupon(kupon_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        await KuponService(session).delete_kupon(kupon_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("kupon berhasil dihapus")


@router.patch("/{kupon_id}/toggle-status", dependencies=_update)
async def toggle_kupon_status(kupon_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        data = await KuponService(session).toggle_status(kupon_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("status kupon berhasil diubah", data)
