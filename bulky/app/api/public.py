"""
Anonymous storefront endpoints.

Everything here shows live, active rows only; region lists are served
through the Redis cache.
"""
import uuid
from decimal import Decimal
from typing import Literal, Optional, Type

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.api.deps import Pagination, get_cache, get_pagination, get_session, raise_service_error
from bulky.app.core.exceptions import ServiceError
from bulky.app.core.responses import paginated_response, success_response
from bulky.app.services.banner import BannerService
from bulky.app.services.blog import BlogService
from bulky.app.services.cache import CacheService
from bulky.app.services.content_kategori import ContentKategoriService
from bulky.app.services.faq import FaqService
from bulky.app.services.master import MasterDataService
from bulky.app.services.produk import ProdukService
from bulky.app.services.published import PublishedContentService
from bulky.app.services.ulasan import UlasanService
from bulky.app.services.video import VideoService
from bulky.app.services.wilayah import WilayahService

router = APIRouter()


# --- Wilayah ---

@router.get("/wilayah/provinsi")
async def list_provinsi(
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache),
):
    return success_response("data provinsi", await WilayahService(session, cache).list_provinsi())


async def _children(level: str, parent_id: uuid.UUID, session: AsyncSession, cache: CacheService) -> dict:
    try:
        items = await WilayahService(session, cache).list_children(level, parent_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"data {level}", items)


@router.get("/wilayah/provinsi/{provinsi_id}/kota")
async def list_kota(
    provinsi_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache),
):
    return await _children("kota", provinsi_id, session, cache)


@router.get("/wilayah/kota/{kota_id}/kecamatan")
async def list_kecamatan(
    kota_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache),
):
    return await _children("kecamatan", kota_id, session, cache)


@router.get("/wilayah/kecamatan/{kecamatan_id}/kelurahan")
async def list_kelurahan(
    kecamatan_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    cache: CacheService = Depends(get_cache),
):
    return await _children("kelurahan", kecamatan_id, session, cache)


# --- Master catalog ---

@router.get("/master/{kind}")
async def public_master_list(kind: str, session: AsyncSession = Depends(get_session)):
    try:
        service = MasterDataService.for_kind(session, kind)
        items = await service.public_list()
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"data {service.label}", items)


@router.get("/master/{kind}/slug/{slug}")
async def public_master_by_slug(kind: str, slug: str, session: AsyncSession = Depends(get_session)):
    try:
        service = MasterDataService.for_kind(session, kind)
        data = await service.find_by_slug(slug, active_only=True)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"detail {service.label}", data)


@router.get("/master/{kind}/{obj_id}")
async def public_master_detail(kind: str, obj_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        service = MasterDataService.for_kind(session, kind)
        data = await service.detail(obj_id, active_only=True)
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"detail {service.label}", data)


# --- Produk ---

@router.get("/produk")
async def public_produk_list(
    search: Optional[str] = Query(None),
    kategori_id: Optional[uuid.UUID] = Query(None),
    tipe_produk_id: Optional[uuid.UUID] = Query(None),
    merek_id: Optional[uuid.UUID] = Query(None),
    kondisi_id: Optional[uuid.UUID] = Query(None),
    kondisi_paket_id: Optional[uuid.UUID] = Query(None),
    warehouse_id: Optional[uuid.UUID] = Query(None),
    harga_min: Optional[Decimal] = Query(None, ge=0),
    harga_max: Optional[Decimal] = Query(None, ge=0),
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
        is_active=True,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return paginated_response("data produk", items, pagination.page, pagination.per_page, total)


@router.get("/produk/{slug}")
async def public_produk_detail(slug: str, session: AsyncSession = Depends(get_session)):
    try:
        data = await ProdukService(session).find_by_slug(slug, active_only=True)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("detail produk", data)


@router.get("/produk/{produk_id}/ulasan")
async def public_produk_ulasan(
    produk_id: uuid.UUID,
    rating: Optional[int] = Query(None, ge=1, le=5),
    with_photo: Optional[bool] = Query(None),
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_session),
):
    items, total = await UlasanService(session).list_public(
        produk_id, pagination.page, pagination.per_page, rating=rating, with_photo=with_photo
    )
    return paginated_response("data ulasan", items, pagination.page, pagination.per_page, total)


@router.get("/produk/{produk_id}/ulasan/statistik")
async def public_produk_rating(produk_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    return success_response("statistik rating", await UlasanService(session).rating_stats(produk_id))


# --- Blog and video ---

def _published_routes(prefix: str, service_cls: Type[PublishedContentService]) -> None:
    label = service_cls.label

    @router.get(prefix)
    async def list_items(
        kategori_id: Optional[uuid.UUID] = Query(None),
        search: Optional[str] = Query(None),
        pagination: Pagination = Depends(get_pagination),
        session: AsyncSession = Depends(get_session),
    ):
        items, total = await service_cls(session).list_public(
            pagination.page, pagination.per_page, kategori_id=kategori_id, search=search
        )
        return paginated_response(f"data {label}", items, pagination.page, pagination.per_page, total)

    @router.get(f"{prefix}/populer")
    async def popular(
        limit: int = Query(5, ge=1, le=20),
        session: AsyncSession = Depends(get_session),
    ):
        return success_response(f"{label} populer", await service_cls(session).popular(limit))

    @router.get(f"{prefix}/{{slug}}")
    async def detail(slug: str, session: AsyncSession = Depends(get_session)):
        try:
            data = await service_cls(session).get_public_by_slug(slug)
        except ServiceError as e:
            raise_service_error(e)
        return success_response(f"detail {label}", data)

    @router.get(f"{prefix}/{{slug}}/related")
    async def related(
        slug: str,
        limit: int = Query(4, ge=1, le=20),
        session: AsyncSession = Depends(get_session),
    ):
        try:
            items = await service_cls(session).related(slug, limit)
        except ServiceError as e:
            raise_service_error(e)
        return success_response(f"{label} terkait", items)


_published_routes("/blog", BlogService)
_published_routes("/video", VideoService)


# --- Banner, FAQ and taxonomies ---

@router.get("/banner")
async def public_banner(session: AsyncSession = Depends(get_session)):
    return success_response("data banner", await BannerService(session).list_visible())


@router.get("/faq")
async def public_faq(session: AsyncSession = Depends(get_session)):
    try:
        data = await FaqService(session).get_public()
    except ServiceError as e:
        raise_service_error(e)
    return success_response("data FAQ", data)


@router.get("/konten/{kind}")
async def public_taxonomy(kind: str, session: AsyncSession = Depends(get_session)):
    try:
        service = ContentKategoriService.for_kind(session, kind)
        items = await service.public_list()
    except ServiceError as e:
        raise_service_error(e)
    return success_response(f"data {service.label}", items)
