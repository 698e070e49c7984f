"""Panel: products, stock and product images."""
import uuid
from decimal import Decimal
from typing import Literal, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.api.deps import (
    Pagination,
    get_pagination,
    get_session,
    raise_service_error,
    require_permission,
)
from bulky.app.core.exceptions import ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.core.responses import paginated_response, success_response
from bulky.app.schemas import ProdukCreate, ProdukUpdate, ReorderRequest, StockUpdate
from bulky.app.services.produk import ProdukService

router = APIRouter()
logger = get_logger(__name__)

_read = [Depends(require_permission("produk:read"))]
_update = [Depends(require_permission("produk:update"))]


@router.get("", dependencies=_read)
async def list_produk(
    search: Optional[str] = Query(None),
    kategori_id: Optional[uuid.UUID] = Query(None),
    tipe_produk_id: Optional[uuid.UUID] = Query(None),
    merek_id: Optional[uuid.UUID] = Query(None),
    kondisi_id: Optional[uuid.UUID] = Query(None),
    kondisi_paket_id: Optional[uuid.UUID] = Query(None),
    warehouse_id: Optional[uuid.UUID] = Query(None),
    harga_min: Optional[Decimal] = Query(None, ge=0),
    harga_max: Optional[Decimal] = Query(None, ge=0),
    is_active: Optional[bool] = Query(None),
    sort_by: Literal["created_at", "nama", "harga_sesudah_diskon"] = Query("created_at"),
    sort_order: Literal["asc", "desc"] = Query("desc"),
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_session),
):
    items, total = await ProdukService(session).list_produk(
        pagination.page,
        pagination.per_page,
        search=search,
        kategori_id=kategori_id,
        tipe_produk_id=tipe_produk_id,
        merek_id=merek_id,
        kondisi_id=kondisi_id,
        kondisi_paket_id=kondisi_paket_id,
        warehouse_id=warehouse_id,
        harga_min=harga_min,
        harga_max=harga_max,
        is_active=is_active,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return paginated_response("data produk", items, pagination.page, pagination.per_page, total)


@router.get("/slug/{slug}", dependencies=_read)
async def get_produk_by_slug(slug: str, session: AsyncSession = Depends(get_session)):
    try:
        data = await ProdukService(session).find_by_slug(slug)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("detail produk", data)


@router.get("/{produk_id}", dependencies=_read)
async def get_produk(produk_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        data = await ProdukService(session).get_produk(produk_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("detail produk", data)


@router.post("", status_code=201, dependencies=[Depends(require_permission("produk:create"))])
async def create_produk(data: ProdukCreate, session: AsyncSession = Depends(get_session)):
    try:
        produk = await ProdukService(session).create_produk(data.model_dump())
    except ServiceError as e:
        raise_service_error(e)
    return success_response("produk berhasil dibuat", produk)


@router.put("/{produk_id}", dependencies=_update)
async def update_produk(
    produk_id: uuid.UUID,
    data: ProdukUpdate,
    session: AsyncSession = Depends(get_session),
):
    try:
        produk = await ProdukService(session).update_produk(produk_id, data.model_dump(exclude_unset=True))
    except ServiceError as e:
        raise_service_error(e)
    return success_response("produk berhasil diperbarui", produk)


@router.delete("/{produk_id}", dependencies=[Depends(require_permission("produk:delete"))])
async def delete_produk(produk_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        await ProdukService(session).delete_produk(produk_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("produk berhasil dihapus")


@router.patch("/{produk_id}/toggle-status", dependencies=_update)
async def toggle_produk_status(produk_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        data = await ProdukService(session).toggle_status(produk_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("status produk berhasil diubah", data)


@router.patch("/{produk_id}/stock", dependencies=_update)
async def update_produk_stock(
    produk_id: uuid.UUID,
    data: StockUpdate,
    session: AsyncSession = Depends(get_session),
):
    try:
        result = await ProdukService(session).update_stock(produk_id, data.quantity)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("stok produk berhasil diperbarui", result)


# --- Images ---

@router.post("/{produk_id}/gambar", status_code=201, dependencies=_update)
async def upload_produk_gambar(
    produk_id: uuid.UUID,
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_session),
):
    """Upload one product image (jpg/jpeg/png/webp, max 2 MB), stored as WebP."""
    try:
        gambar = await ProdukService(session).add_gambar(produk_id, file)
    except ServiceError as e:
        raise_service_error(e)
    logger.info("Produk image uploaded", produk_id=str(produk_id), gambar_id=str(gambar["id"]))
    return success_response("gambar berhasil diunggah", gambar)


@router.delete("/{produk_id}/gambar/{gambar_id}", dependencies=_update)
async def delete_produk_gambar(
    produk_id: uuid.UUID,
    gambar_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
):
    try:
        items = await ProdukService(session).delete_gambar(produk_id, gambar_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("gambar berhasil dihapus", items)


@router.patch("/{produk_id}/gambar/{gambar_id}/reorder", dependencies=_update)
async def reorder_produk_gambar(
    produk_id: uuid.UUID,
    gambar_id: uuid.UUID,
    data: ReorderRequest,
    session: AsyncSession = Depends(get_session),
):
    try:
        result = await ProdukService(session).reorder_gambar(produk_id, gambar_id, data.direction)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("urutan gambar berhasil diubah", result)


@router.patch("/{produk_id}/gambar/{gambar_id}/primary", dependencies=_update)
async def set_primary_produk_gambar(
    produk_id: uuid.UUID,
    gambar_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
):
    try:
        items = await ProdukService(session).set_primary_gambar(produk_id, gambar_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("gambar utama berhasil diubah", items)
