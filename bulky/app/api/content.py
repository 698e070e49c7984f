"""
Panel: content section.

Blog and video share one set of endpoints built by ``_published_routes``;
taxonomies (kategori-blog, kategori-video, label-blog) share the generic
``/{kind}`` routes registered last so the fixed prefixes win.
"""
import uuid
from typing import Optional, Type

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.api.deps import (
    Pagination,
    get_pagination,
    get_session,
    raise_service_error,
    require_permission,
)
from bulky.app.core.exceptions import ServiceError
from bulky.app.core.responses import paginated_response, success_response
from bulky.app.schemas import (
    BannerCreate,
    BannerUpdate,
    BlogCreate,
    BlogUpdate,
    BulkReorderRequest,
    FaqReorderRequest,
    FaqUpdate,
    ReorderRequest,
    TaxonomyCreate,
    TaxonomyUpdate,
    VideoCreate,
    VideoUpdate,
)
from bulky.app.services.banner import BannerService
from bulky.app.services.blog import BlogService
from bulky.app.services.content_kategori import ContentKategoriService
from bulky.app.services.faq import FaqService
from bulky.app.services.published import PublishedContentService
from bulky.app.services.video import VideoService

router = APIRouter()

_read = [Depends(require_permission("konten:read"))]
_create = [Depends(require_permission("konten:create"))]
_update = [Depends(require_permission("konten:update"))]
_delete = [Depends(require_permission("konten:delete"))]


# --- Blog and video ---

def _published_routes(
    prefix: str,
    service_cls: Type[PublishedContentService],
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
) -> None:
    label = service_cls.label

    @router.get(prefix, dependencies=_read)
    async def list_items(
        search: Optional[str] = Query(None),
        kategori_id: Optional[uuid.UUID] = Query(None),
        is_active: Optional[bool] = Query(None),
        sort_by: str = Query("created_at"),
        sort_order: str = Query("desc"),
        pagination: Pagination = Depends(get_pagination),
        session: AsyncSession = Depends(get_session),
    ):
        items, total = await service_cls(session).list_admin(
            pagination.page,
            pagination.per_page,
            search=search,
            kategori_id=kategori_id,
            is_active=is_active,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return paginated_response(f"data {label}", items, pagination.page, pagination.per_page, total)

    @router.get(f"{prefix}/statistik", dependencies=_read)
    async def statistik(session: AsyncSession = Depends(get_session)):
        return success_response(f"statistik {label}", await service_cls(session).statistik())

    @router.get(f"{prefix}/{{obj_id}}", dependencies=_read)
    async def get_item(obj_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
        try:
            data = await service_cls(session).get(obj_id)
        except ServiceError as e:
            raise_service_error(e)
        return success_response(f"detail {label}", data)

    @router.post(prefix, status_code=201, dependencies=_create)
    async def create_item(data: create_schema, session: AsyncSession = Depends(get_session)):
        try:
            obj = await service_cls(session).create(data.model_dump())
        except ServiceError as e:
            raise_service_error(e)
        return success_response(f"{label} berhasil dibuat", obj)

    @router.put(f"{prefix}/{{obj_id}}", dependencies=_update)
    async def update_item(obj_id: uuid.UUID, data: update_schema, session: AsyncSession = Depends(get_session)):
        try:
            obj = await service_cls(session).update(obj_id, data.model_dump(exclude_unset=True))
        except ServiceError as e:
            raise_service_error(e)
        return success_response(f"{label} berhasil diperbarui", obj)

    @router.delete(f"{prefix}/{{obj_id}}", dependencies=_delete)
    async def delete_item(obj_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
        try:
            await service_cls(session).delete(obj_id)
        except ServiceError as e:
            raise_service_error(e)
        return success_response(f"{label} berhasil dihapus")

    @router.patch(f"{prefix}/{{obj_id}}/toggle-status", dependencies=_update)
    async def toggle_item(obj_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
        try:
            data = await service_cls(session).toggle_status(obj_id)
        except ServiceError as e:
            raise_service_error(e)
        return success_response(f"status {label} berhasil diubah", data)


_published_routes("/blog", BlogService, BlogCreate, BlogUpdate)
_published_routes("/video", VideoService, VideoCreate, VideoUpdate)


# --- Banner event/promo ---

@router.get("/banner", dependencies=_read)
async def list_banner(
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_session),
):
    items, total = await BannerService(session).list(
        pagination.page, pagination.per_page, search=search, is_active=is_active
    )
    return paginated_response("data banner", items, pagination.page, pagination.per_page, total)


@router.put("/banner/reorder", dependencies=_update)
async def bulk_reorder_banner(data: BulkReorderRequest, session: AsyncSession = Depends(get_session)):
    try:
        updated = await BannerService(session).bulk_reorder([item.model_dump() for item in data.items])
    except ServiceError as e:
        raise_service_error(e)
    return success_response("urutan banner berhasil diperbarui", {"updated": updated})


@router.get("/banner/{banner_id}", dependencies=_read)
async def get_banner(banner_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        data = await BannerService(session).get(banner_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("detail banner", data)


@router.post("/banner", status_code=201, dependencies=_create)
async def create_banner(data: BannerCreate, session: AsyncSession = Depends(get_session)):
    try:
        banner = await BannerService(session).create(data.model_dump())
    except ServiceError as e:
        raise_service_error(e)
    return success_response("banner berhasil dibuat", banner)


@router.put("/banner/{banner_id}", dependencies=_update)
async def update_banner(banner_id: uuid.UUID, data: BannerUpdate, session: AsyncSession = Depends(get_session)):
    try:
        banner = await BannerService(session).update(banner_id, data.model_dump(exclude_unset=True))
    except ServiceError as e:
        raise_service_error(e)
    return success_response("banner berhasil diperbarui", banner)


@router.delete("/banner/{banner_id}", dependencies=_delete)
async def delete_banner(banner_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        await BannerService(session).delete(banner_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("banner berhasil dihapus")


@router.patch("/banner/{banner_id}/toggle-status", dependencies=_update)
async def toggle_banner_status(banner_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        data = await BannerService(session).toggle_status(banner_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("status banner berhasil diubah", data)


@router.patch("/banner/{banner_id}/reorder", dependencies=_update)
async def reorder_banner(
    banner_id: uuid.UUID,
    data: ReorderRequest,
    session: AsyncSession = Depends(get_session),
):
    try:
        result = await BannerService(session).reorder(banner_id, data.direction)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("urutan banner berhasil diubah", result)


# --- FAQ ---

@router.get("/faq", dependencies=_read)
async def get_faq(session: AsyncSession = Depends(get_session)):
    return success_response("data FAQ", await FaqService(session).get())


@router.put("/faq", dependencies=_update)
async def update_faq(data: FaqUpdate, session: AsyncSession = Depends(get_session)):
    faq = await FaqService(session).update(
        judul=data.judul,
        judul_en=data.judul_en,
        items=[item.model_dump() for item in data.items],
        is_active=data.is_active,
    )
    return success_response("FAQ berhasil diperbarui", faq)


@router.patch("/faq/reorder", dependencies=_update)
async def reorder_faq_item(data: FaqReorderRequest, session: AsyncSession = Depends(get_session)):
    try:
        faq = await FaqService(session).reorder_item(data.index, data.direction)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("urutan FAQ berhasil diubah", faq)


# --- Taxonomies ---

@router.get("/{kind}", dependencies=_read)
async def list_taxonomy(
    kind: str,
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_session),
):
    try:
        service = ContentKategoriService.for_kind(session, kind)
        items, total = await service.list(
            pagination.page, pagination.per_page, search=search, is_active=is_active
        )
    except ServiceError as e:
        raise_service_error(e)
    return paginated_response(f"data {service.label}", items, pagination.page, pagination.per_page, total)


@router.get("/{kind}/dropdown", dependencies=_read)
async def taxonomy_dropdown(kind: str, session: AsyncSession = Depends(get_session)):
    try:
        service = ContentKategoriService.for_kind(session, kind)
        items = await service.dropdown()
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"dropdown {service.label}", items)


@router.get("/{kind}/{obj_id}", dependencies=_read)
async def get_taxonomy(kind: str, obj_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        service = ContentKategoriService.for_kind(session, kind)
        data = await service.detail(obj_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"detail {service.label}", data)


@router.post("/{kind}", status_code=201, dependencies=_create)
async def create_taxonomy(kind: str, data: TaxonomyCreate, session: AsyncSession = Depends(get_session)):
    try:
        service = ContentKategoriService.for_kind(session, kind)
        obj = await service.create(data.nama, slug=data.slug, is_active=data.is_active)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"{service.label} berhasil dibuat", obj)


@router.put("/{kind}/{obj_id}", dependencies=_update)
async def update_taxonomy(
    kind: str,
    obj_id: uuid.UUID,
    data: TaxonomyUpdate,
    session: AsyncSession = Depends(get_session),
):
    try:
        service = ContentKategoriService.for_kind(session, kind)
        obj = await service.update(obj_id, nama=data.nama, slug=data.slug, is_active=data.is_active)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"{service.label} berhasil diperbarui", obj)


@router.delete("/{kind}/{obj_id}", dependencies=_delete)
async def delete_taxonomy(kind: str, obj_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        service = ContentKategoriService.for_kind(session, kind)
        await service.delete(obj_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"{service.label} berhasil dihapus")


@router.patch("/{kind}/{obj_id}/toggle-status", dependencies=_update)
async def toggle_taxonomy_status(kind: str, obj_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        service = ContentKategoriService.for_kind(session, kind)
        data = await service.toggle_status(obj_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"status {service.label} berhasil diubah", data)


@router.patch("/{kind}/{obj_id}/reorder", dependencies=_update)
async def reorder_taxonomy(
    kind: str,
    obj_id: uuid.UUID,
    data: ReorderRequest,
    session: AsyncSession = Depends(get_session),
):
    try:
        service = ContentKategoriService.for_kind(session, kind)
        result = await service.reorder(obj_id, data.direction)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"urutan {service.label} berhasil diubah", result)
