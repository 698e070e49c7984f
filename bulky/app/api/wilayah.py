"""Panel: region hierarchy CRUD. ``level`` is provinsi, kota, kecamatan or kelurahan."""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.api.deps import (
    Pagination,
    get_cache,
    get_pagination,
    get_session,
    raise_service_error,
    require_permission,
)
from bulky.app.core.exceptions import ServiceError
from bulky.app.core.responses import paginated_response, success_response
from bulky.app.schemas import WilayahCreate, WilayahUpdate
from bulky.app.services.cache import CacheService
from bulky.app.services.wilayah import WilayahService

router = APIRouter()


@router.get("/{level}", dependencies=[Depends(require_permission("wilayah:read"))])
async def list_wilayah(
    level: str,
    search: Optional[str] = Query(None),
    parent_id: Optional[uuid.UUID] = Query(None),
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_session),
):
    try:
        items, total = await WilayahService(session).list_admin(
            level, pagination.page, pagination.per_page, search=search, parent_id=parent_id
        )
    except ServiceError as e:
        raise_service_error(e)
    return paginated_response(f"data {level}", items, pagination.page, pagination.per_page, total)


@router.get("/{level}/{wilayah_id}", dependencies=[Depends(require_permission("wilayah:read"))])
async def get_wilayah(level: str, wilayah_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        data = await WilayahService(session).get(level, wilayah_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"detail {level}", data)


@router.post("/{level}", status_code=201, dependencies=[Depends(require_permission("wilayah:create"))])
async def create_wilayah(
    level: str,
    data: WilayahCreate,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache),
):
    try:
        obj = await WilayahService(session, cache).create(
            level, nama=data.nama, kode=data.kode, parent_id=data.parent_id
        )
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"{level} berhasil dibuat", obj)


@router.put("/{level}/{wilayah_id}", dependencies=[Depends(require_permission("wilayah:update"))])
async def update_wilayah(
    level: str,
    wilayah_id: uuid.UUID,
    data: WilayahUpdate,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache),
):
    try:
        obj = await WilayahService(session, cache).update(
            level, wilayah_id, nama=data.nama, kode=data.kode, parent_id=data.parent_id
        )
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"{level} berhasil diperbarui", obj)


@router.delete("/{level}/{wilayah_id}", dependencies=[Depends(require_permission("wilayah:delete"))])
async def delete_wilayah(
    level: str,
    wilayah_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache),
):
    try:
        await WilayahService(session, cache).delete(level, wilayah_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"{level} berhasil dihapus")
