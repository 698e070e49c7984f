# bulky/app/services/banner.py
"""
Event/promo banners shown on the storefront, ordered by urutan and
optionally limited to a display window.
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.exceptions import NotFoundError, ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.core.responses import offset_for
from bulky.app.models.catalog import KategoriProduk
from bulky.app.models.content import BannerEventPromo
from bulky.app.services.reorder import ReorderService

logger = get_logger(__name__)

FIELDS = ("nama", "gambar_url_id", "gambar_url_en", "is_active", "tanggal_mulai", "tanggal_selesai")


class BannerServiceError(ServiceError):
    """Base exception for banner service errors."""


def banner_to_dict(banner: BannerEventPromo, now: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        "id": banner.id,
        "nama": banner.nama,
        "gambar_url_id": banner.gambar_url_id,
        "gambar_url_en": banner.gambar_url_en,
        "tujuan": banner.tujuan or [],
        "urutan": banner.urutan,
        "is_active": banner.is_active,
        "tanggal_mulai": banner.tanggal_mulai,
        "tanggal_selesai": banner.tanggal_selesai,
        "is_currently_visible": banner.is_currently_visible(now),
        "created_at": banner.created_at,
        "updated_at": banner.updated_at,
    }


def validate_window(tanggal_mulai: Optional[datetime], tanggal_selesai: Optional[datetime]) -> None:
    if tanggal_mulai and tanggal_selesai and tanggal_selesai <= tanggal_mulai:
        raise BannerServiceError("tanggal selesai harus setelah tanggal mulai")


class BannerService:

    def __init__(self, session: AsyncSession):
        self.session = session
        self.reorderer = ReorderService(session)

    async def _get(self, banner_id: uuid.UUID) -> BannerEventPromo:
        result = await self.session.execute(
            select(BannerEventPromo).where(BannerEventPromo.id == banner_id, BannerEventPromo.alive())
        )
        banner = result.scalar_one_or_none()
        if not banner:
            raise NotFoundError("banner tidak ditemukan")
        return banner

    async def _resolve_tujuan(self, kategori_ids: List[uuid.UUID]) -> List[Dict[str, str]]:
        """Kategori targets stored as [{id, slug}] so the storefront can link without a lookup."""
        if not kategori_ids:
            return []
        result = await self.session.execute(
            select(KategoriProduk.id, KategoriProduk.slug)
            .where(KategoriProduk.id.in_(kategori_ids), KategoriProduk.alive())
        )
        found = {row.id: row.slug for row in result.all()}
        if len(found) != len(set(kategori_ids)):
            raise NotFoundError("kategori produk tidak ditemukan")
        return [{"id": str(k), "slug": found[k]} for k in kategori_ids]

    async def list(
        self,
        page: int,
        per_page: int,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = select(BannerEventPromo).where(BannerEventPromo.alive())
        if search:
            query = query.where(BannerEventPromo.nama.ilike(f"%{search}%"))
        if is_active is not None:
            query = query.where(BannerEventPromo.is_active.is_(is_active))
        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()
        result = await self.session.execute(
            query.order_by(BannerEventPromo.urutan).offset(offset_for(page, per_page)).limit(per_page)
        )
        return [banner_to_dict(b) for b in result.scalars().all()], total

    async def get(self, banner_id: uuid.UUID) -> Dict[str, Any]:
        return banner_to_dict(await self._get(banner_id))

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        validate_window(data.get("tanggal_mulai"), data.get("tanggal_selesai"))
        banner = BannerEventPromo(
            nama=data["nama"],
            gambar_url_id=data["gambar_url_id"],
            gambar_url_en=data.get("gambar_url_en"),
            tujuan=await self._resolve_tujuan(data.get("kategori_ids") or []),
            urutan=await self.reorderer.next_urutan(BannerEventPromo),
            is_active=data.get("is_active") is not False,
            tanggal_mulai=data.get("tanggal_mulai"),
            tanggal_selesai=data.get("tanggal_selesai"),
        )
        self.session.add(banner)
        await self.session.commit()
        logger.info("Banner created", banner_id=str(banner.id))
        return banner_to_dict(banner)

    async def update(self, banner_id: uuid.UUID, data: Dict[str, Any]) -> Dict[str, Any]:
        banner = await self._get(banner_id)
        validate_window(
            data.get("tanggal_mulai") or banner.tanggal_mulai,
            data.get("tanggal_selesai") or banner.tanggal_selesai,
        )
        for field in FIELDS:
            if field in data and data[field] is not None:
                setattr(banner, field, data[field])
        if data.get("kategori_ids") is not None:
            banner.tujuan = await self._resolve_tujuan(data["kategori_ids"])
        await self.session.commit()
        return banner_to_dict(banner)

    async def delete(self, banner_id: uuid.UUID) -> None:
        banner = await self._get(banner_id)
        banner.deleted_at = datetime.utcnow()
        await self.session.flush()
        await self.reorderer.compact_after_delete(BannerEventPromo, banner.urutan)
        await self.session.commit()
        logger.info("Banner deleted", banner_id=str(banner_id))

    async def toggle_status(self, banner_id: uuid.UUID) -> Dict[str, Any]:
        banner = await self._get(banner_id)
        banner.is_active = not banner.is_active
        await self.session.commit()
        return {"id": banner.id, "is_active": banner.is_active}

    async def reorder(self, banner_id: uuid.UUID, direction: str) -> Dict[str, Any]:
        return await self.reorderer.reorder(BannerEventPromo, banner_id, direction)

    async def bulk_reorder(self, items: List[Dict[str, Any]]) -> int:
        return await self.reorderer.bulk_reorder(BannerEventPromo, items)

    async def list_visible(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Active banners whose optional window contains ``now``."""
        now = now or datetime.utcnow()
        result = await self.session.execute(
            select(BannerEventPromo)
            .where(
                BannerEventPromo.alive(),
                BannerEventPromo.is_active.is_(True),
                or_(BannerEventPromo.tanggal_mulai.is_(None), BannerEventPromo.tanggal_mulai <= now),
                or_(BannerEventPromo.tanggal_selesai.is_(None), BannerEventPromo.tanggal_selesai >= now),
            )
            .order_by(BannerEventPromo.urutan)
        )
        return [banner_to_dict(b, now) for b in result.scalars().all()]
