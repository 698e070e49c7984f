"""
Panel: catalog master data.

One router serves every kind; ``kind`` is one of kategori-produk,
tipe-produk, merek-produk, kondisi-produk, kondisi-paket, sumber-produk or warehouse.
"""
import uuid
from typing import Optional

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
from bulky.app.core.logging import get_logger
from bulky.app.core.responses import paginated_response, success_response
from bulky.app.schemas import BulkReorderRequest, MasterCreate, MasterUpdate, ReorderRequest
from bulky.app.services.master import MasterDataService

router = APIRouter()
logger = get_logger(__name__)

_read = [Depends(require_permission("master:read"))]
_create = [Depends(require_permission("master:create"))]
_update = [Depends(require_permission("master:update"))]
_delete = [Depends(require_permission("master:delete"))]


@router.get("/{kind}", dependencies=_read)
async def list_master(
    kind: str,
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_session),
):
    try:
        service = MasterDataService.for_kind(session, kind)
        items, total = await service.list(
            pagination.page, pagination.per_page, search=search, is_active=is_active
        )
    except ServiceError as e:
        raise_service_error(e)
    return paginated_response(f"data {service.label}", items, pagination.page, pagination.per_page, total)


@router.get("/{kind}/dropdown", dependencies=_read)
async def master_dropdown(kind: str, session: AsyncSession = Depends(get_session)):
    try:
        service = MasterDataService.for_kind(session, kind)
        items = await service.dropdown()
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"dropdown {service.label}", items)


@router.get("/{kind}/slug/{slug}", dependencies=_read)
async def get_master_by_slug(kind: str, slug: str, session: AsyncSession = Depends(get_session)):
    try:
        service = MasterDataService.for_kind(session, kind)
        data = await service.find_by_slug(slug)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"detail {service.label}", data)


@router.put("/{kind}/reorder", dependencies=_update)
async def bulk_reorder_master(
    kind: str,
    data: BulkReorderRequest,
    session: AsyncSession = Depends(get_session),
):
    try:
        service = MasterDataService.for_kind(session, kind)
        updated = await service.bulk_reorder([item.model_dump() for item in data.items])
    except ServiceError as e:
        raise_service_error(e)
    return success_response("urutan berhasil diperbarui", {"updated": updated})


@router.get("/{kind}/{obj_id}", dependencies=_read)
async def get_master(kind: str, obj_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        service = MasterDataService.for_kind(session, kind)
        data = await service.detail(obj_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"detail {service.label}", data)


@router.post("/{kind}", status_code=201, dependencies=_create)
async def create_master(kind: str, data: MasterCreate, session: AsyncSession = Depends(get_session)):
    try:
        service = MasterDataService.for_kind(session, kind)
        obj = await service.create(data.model_dump())
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"{service.label} berhasil dibuat", obj)


@router.put("/{kind}/{obj_id}", dependencies=_update)
async def update_master(
    kind: str,
    obj_id: uuid.UUID,
    data: MasterUpdate,
    session: AsyncSession = Depends(get_session),
):
    try:
        service = MasterDataService.for_kind(session, kind)
        obj = await service.update(obj_id, data.model_dump(exclude_unset=True))
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"{service.label} berhasil diperbarui", obj)


@router.delete("/{kind}/{obj_id}", dependencies=_delete)
async def delete_master(kind: str, obj_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        service = MasterDataService.for_kind(session, kind)
        await service.delete(obj_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"{service.label} berhasil dihapus")


@router.patch("/{kind}/{obj_id}/toggle-status", dependencies=_update)
async def toggle_master_status(kind: str, obj_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        service = MasterDataService.for_kind(session, kind)
        data = await service.toggle_status(obj_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"status {service.label} berhasil diubah", data)


@router.patch("/{kind}/{obj_id}/reorder", dependencies=_update)
async def reorder_master(
    kind: str,
    obj_id: uuid.UUID,
    data: ReorderRequest,
    session: AsyncSession = Depends(get_session),
):
    try:
        service = MasterDataService.for_kind(session, kind)
        result = await service.reorder(obj_id, data.direction)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("urutan berhasil diubah", result)
