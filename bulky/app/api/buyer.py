"""Buyer self-service: addresses, own orders and reviews."""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.api.deps import (
    CurrentUser,
    Pagination,
    get_pagination,
    get_session,
    raise_service_error,
    require_buyer,
)
from bulky.app.core.exceptions import ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.core.responses import paginated_response, success_response
from bulky.app.core.validation import sanitize_user_input
from bulky.app.schemas import AlamatCreate, AlamatUpdate
from bulky.app.services.alamat import AlamatService
from bulky.app.services.pesanan import PesananService
from bulky.app.services.ulasan import UlasanService

router = APIRouter()
logger = get_logger(__name__)


# --- Alamat ---

@router.get("/alamat")
async def list_alamat(
    buyer: CurrentUser = Depends(require_buyer),
    session: AsyncSession = Depends(get_session),
):
    return success_response("data alamat", await AlamatService(session, buyer.id).list())


@router.get("/alamat/{alamat_id}")
async def get_alamat(
    alamat_id: uuid.UUID,
    buyer: CurrentUser = Depends(require_buyer),
    session: AsyncSession = Depends(get_session),
):
    try:
        data = await AlamatService(session, buyer.id).detail(alamat_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("detail alamat", data)


@router.post("/alamat", status_code=201)
async def create_alamat(
    data: AlamatCreate,
    buyer: CurrentUser = Depends(require_buyer),
    session: AsyncSession = Depends(get_session),
):
    values = data.model_dump(exclude={"is_default"})
    try:
        alamat = await AlamatService(session, buyer.id).create(values, is_default=data.is_default)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("alamat berhasil ditambahkan", alamat)


@router.put("/alamat/{alamat_id}")
async def update_alamat(
    alamat_id: uuid.UUID,
    data: AlamatUpdate,
    buyer: CurrentUser = Depends(require_buyer),
    session: AsyncSession = Depends(get_session),
):
    try:
        alamat = await AlamatService(session, buyer.id).update(alamat_id, data.model_dump(exclude_unset=True))
    except ServiceError as e:
        raise_service_error(e)
    return success_response("alamat berhasil diperbarui", alamat)


@router.delete("/alamat/{alamat_id}")
async def delete_alamat(
    alamat_id: uuid.UUID,
    buyer: CurrentUser = Depends(require_buyer),
    session: AsyncSession = Depends(get_session),
):
    try:
        await AlamatService(session, buyer.id).delete(alamat_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("alamat berhasil dihapus")


@router.patch("/alamat/{alamat_id}/set-default")
async def set_default_alamat(
    alamat_id: uuid.UUID,
    buyer: CurrentUser = Depends(require_buyer),
    session: AsyncSession = Depends(get_session),
):
    try:
        alamat = await AlamatService(session, buyer.id).set_default(alamat_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("alamat default berhasil diubah", alamat)


# --- Pesanan ---

@router.get("/pesanan")
async def list_my_pesanan(
    order_status: Optional[str] = Query(None),
    pagination: Pagination = Depends(get_pagination),
    buyer: CurrentUser = Depends(require_buyer),
    session: AsyncSession = Depends(get_session),
):
    items, total = await PesananService(session).list_for_buyer(
        buyer.id, pagination.page, pagination.per_page, order_status=order_status
    )
    return paginated_response("data pesanan", items, pagination.page, pagination.per_page, total)


@router.get("/pesanan/{pesanan_id}")
async def get_my_pesanan(
    pesanan_id: uuid.UUID,
    buyer: CurrentUser = Depends(require_buyer),
    session: AsyncSession = Depends(get_session),
):
    try:
        data = await PesananService(session).get_for_buyer(buyer.id, pesanan_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("detail pesanan", data)


# --- Ulasan ---

@router.get("/ulasan")
async def list_my_ulasan(
    pagination: Pagination = Depends(get_pagination),
    buyer: CurrentUser = Depends(require_buyer),
    session: AsyncSession = Depends(get_session),
):
    items, total = await UlasanService(session).list_for_buyer(buyer.id, pagination.page, pagination.per_page)
    return paginated_response("data ulasan", items, pagination.page, pagination.per_page, total)


@router.get("/ulasan/pending")
async def pending_ulasan(
    buyer: CurrentUser = Depends(require_buyer),
    session: AsyncSession = Depends(get_session),
):
    """Purchased items still waiting for a review."""
    return success_response("item menunggu ulasan", await UlasanService(session).pending_reviews(buyer.id))


@router.post("/ulasan", status_code=201)
async def create_ulasan(
    pesanan_item_id: uuid.UUID = Form(...),
    rating: int = Form(...),
    komentar: Optional[str] = Form(None),
    gambar: Optional[UploadFile] = File(None),
    buyer: CurrentUser = Depends(require_buyer),
    session: AsyncSession = Depends(get_session),
):
    """Multipart form: pesanan_item_id, rating, optional komentar and gambar."""
    if komentar:
        komentar = sanitize_user_input(komentar, max_length=2000)
    try:
        ulasan = await UlasanService(session).create(
            buyer.id, pesanan_item_id, rating, komentar=komentar, gambar=gambar
        )
    except ServiceError as e:
        raise_service_error(e)
    return success_response("ulasan berhasil dikirim dan menunggu persetujuan", ulasan)
