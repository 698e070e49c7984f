# bulky/app/services/ulasan.py
"""
Product reviews (ulasan).

Buyers review individual line items of completed orders; reviews become
public only after an admin approves them.
"""
import uuid
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.constants import ALLOWED_REVIEW_IMAGE_EXTENSIONS, ORDER_COMPLETED
from bulky.app.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.core.metrics import ulasan_created_total
from bulky.app.core.responses import offset_for
from bulky.app.core.text import mask_name
from bulky.app.core.uploads import save_image_upload
from bulky.app.models.auth import Buyer
from bulky.app.models.pesanan import Pesanan, PesananItem
from bulky.app.models.produk import Produk
from bulky.app.models.ulasan import Ulasan

logger = get_logger(__name__)

MIN_RATING = 1
MAX_RATING = 5
MAX_KOMENTAR = 1000


class UlasanServiceError(ServiceError):
    """Base exception for review service errors."""


def ulasan_to_dict(u: Ulasan) -> Dict[str, Any]:
    return {
        "id": u.id,
        "pesanan": {"id": u.pesanan_id, "kode": u.pesanan.kode},
        "pesanan_item_id": u.pesanan_item_id,
        "buyer": {"id": u.buyer_id, "nama": u.buyer.nama, "email": u.buyer.email},
        "produk": {"id": u.produk_id, "nama": u.produk.nama, "slug": u.produk.slug},
        "rating": u.rating,
        "komentar": u.komentar,
        "gambar": u.gambar,
        "is_approved": u.is_approved,
        "approved_at": u.approved_at,
        "approved_by": u.approved_by,
        "created_at": u.created_at,
        "updated_at": u.updated_at,
    }


def public_ulasan_to_dict(u: Ulasan) -> Dict[str, Any]:
    return {
        "id": u.id,
        "nama_buyer": mask_name(u.buyer.nama),
        "rating": u.rating,
        "komentar": u.komentar,
        "gambar": u.gambar,
        "created_at": u.created_at,
    }


class UlasanService:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get(self, ulasan_id: uuid.UUID, fresh: bool = False) -> Ulasan:
        query = select(Ulasan).where(Ulasan.id == ulasan_id, Ulasan.alive())
        if fresh:
            query = query.execution_options(populate_existing=True)
        ulasan = (await self.session.execute(query)).scalar_one_or_none()
        if not ulasan:
            raise NotFoundError("ulasan tidak ditemukan")
        return ulasan

    # ----- Buyer -----

    async def create(
        self,
        buyer_id: uuid.UUID,
        pesanan_item_id: uuid.UUID,
        rating: int,
        komentar: Optional[str] = None,
        gambar: Optional[UploadFile] = None,
    ) -> Dict[str, Any]:
        """
        Review one purchased item.

        Checks run in a fixed order: already reviewed (409), item exists (404),
        order ownership (403), order completed (400).
        """
        if not (MIN_RATING <= rating <= MAX_RATING):
            raise UlasanServiceError("rating harus antara 1 sampai 5")
        if komentar and len(komentar) > MAX_KOMENTAR:
            raise UlasanServiceError("komentar maksimal 1000 karakter")

        # Deleted reviews count too: pesanan_item_id is unique, so a deleted
        # review keeps its item and the buyer cannot review it again
        existing = await self.session.execute(
            select(Ulasan.id).where(Ulasan.pesanan_item_id == pesanan_item_id)
        )
        if existing.first():
            raise ConflictError("item sudah pernah di-review")

        result = await self.session.execute(
            select(PesananItem, Pesanan)
            .join(Pesanan, Pesanan.id == PesananItem.pesanan_id)
            .where(PesananItem.id == pesanan_item_id, Pesanan.alive())
        )
        row = result.first()
        if row is None:
            raise NotFoundError("item pesanan tidak ditemukan")
        item, pesanan = row
        if pesanan.buyer_id != buyer_id:
            raise ForbiddenError("pesanan ini bukan milik Anda")
        if pesanan.order_status != ORDER_COMPLETED:
            raise UlasanServiceError("pesanan belum selesai")

        gambar_url = None
        if gambar is not None and gambar.filename:
            gambar_url = await save_image_upload(gambar, "ulasan", ALLOWED_REVIEW_IMAGE_EXTENSIONS)

        ulasan = Ulasan(
            pesanan_id=pesanan.id,
            pesanan_item_id=item.id,
            buyer_id=buyer_id,
            produk_id=item.produk_id,
            rating=rating,
            komentar=komentar,
            gambar=gambar_url,
        )
        self.session.add(ulasan)
        await self.session.commit()
        ulasan_created_total.labels(rating=str(rating)).inc()
        logger.info("Ulasan created", ulasan_id=str(ulasan.id), buyer_id=str(buyer_id), rating=rating)
        return ulasan_to_dict(await self._get(ulasan.id, fresh=True))

    async def pending_reviews(self, buyer_id: uuid.UUID) -> List[Dict[str, Any]]:
        """Items of the buyer's completed orders that have not been reviewed yet."""
        reviewed = select(Ulasan.pesanan_item_id)
        result = await self.session.execute(
            select(PesananItem, Pesanan.kode, Pesanan.completed_at)
            .join(Pesanan, Pesanan.id == PesananItem.pesanan_id)
            .where(
                Pesanan.buyer_id == buyer_id,
                Pesanan.order_status == ORDER_COMPLETED,
                Pesanan.alive(),
                PesananItem.id.not_in(reviewed),
            )
            .order_by(Pesanan.completed_at.desc())
        )
        return [
            {
                "pesanan_item_id": item.id,
                "pesanan_id": item.pesanan_id,
                "pesanan_kode": kode,
                "produk_id": item.produk_id,
                "nama_produk": item.nama_produk,
                "qty": item.qty,
                "completed_at": completed_at,
            }
            for item, kode, completed_at in result.all()
        ]

    async def list_for_buyer(
        self,
        buyer_id: uuid.UUID,
        page: int,
        per_page: int,
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = select(Ulasan).where(Ulasan.buyer_id == buyer_id, Ulasan.alive())
        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()
        result = await self.session.execute(
            query.order_by(Ulasan.created_at.desc()).offset(offset_for(page, per_page)).limit(per_page)
        )
        return [ulasan_to_dict(u) for u in result.scalars().all()], total

    # ----- Admin -----

    async def list_admin(
        self,
        page: int,
        per_page: int,
        is_approved: Optional[bool] = None,
        rating: Optional[int] = None,
        cari: Optional[str] = None,
        tanggal_dari: Optional[date] = None,
        tanggal_sampai: Optional[date] = None,
    ) -> Tuple[List[Dict[str, Any]], int, Dict[str, int]]:
        query = (
            select(Ulasan)
            .join(Buyer, Buyer.id == Ulasan.buyer_id)
            .join(Produk, Produk.id == Ulasan.produk_id)
            .where(Ulasan.alive())
        )
        if is_approved is not None:
            query = query.where(Ulasan.is_approved.is_(is_approved))
        if rating is not None:
            query = query.where(Ulasan.rating == rating)
        if cari:
            pattern = f"%{cari}%"
            query = query.where(or_(
                Buyer.nama.ilike(pattern),
                Produk.nama.ilike(pattern),
                Ulasan.komentar.ilike(pattern),
            ))
        if tanggal_dari:
            query = query.where(Ulasan.created_at >= datetime.combine(tanggal_dari, time.min))
        if tanggal_sampai:
            query = query.where(Ulasan.created_at <= datetime.combine(tanggal_sampai, time.max))

        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()
        result = await self.session.execute(
            query.order_by(Ulasan.created_at.desc()).offset(offset_for(page, per_page)).limit(per_page)
        )
        items = [ulasan_to_dict(u) for u in result.scalars().all()]
        return items, total, await self._summary()

    async def _summary(self) -> Dict[str, int]:
        result = await self.session.execute(
            select(Ulasan.is_approved, func.count(Ulasan.id)).where(Ulasan.alive()).group_by(Ulasan.is_approved)
        )
        counts = {bool(approved): count for approved, count in result.all()}
        return {"total_pending": counts.get(False, 0), "total_approved": counts.get(True, 0)}

    async def get(self, ulasan_id: uuid.UUID) -> Dict[str, Any]:
        return ulasan_to_dict(await self._get(ulasan_id))

    async def approve(self, ulasan_id: uuid.UUID, is_approved: bool, admin_id: uuid.UUID) -> Dict[str, Any]:
        ulasan = await self._get(ulasan_id)
        ulasan.is_approved = is_approved
        ulasan.approved_by = admin_id
        ulasan.approved_at = datetime.utcnow() if is_approved else None
        await self.session.commit()
        logger.info("Ulasan approval changed", ulasan_id=str(ulasan_id), is_approved=is_approved)
        return ulasan_to_dict(ulasan)

    async def bulk_approve(self, ids: List[uuid.UUID], is_approved: bool, admin_id: uuid.UUID) -> int:
        """Approve or unapprove many reviews; unknown ids are skipped."""
        result = await self.session.execute(
            select(Ulasan.id).where(Ulasan.id.in_(ids), Ulasan.alive())
        )
        valid_ids = [row[0] for row in result.all()]
        if not valid_ids:
            raise NotFoundError("tidak ada ulasan yang valid")
        await self.session.execute(
            update(Ulasan)
            .where(Ulasan.id.in_(valid_ids))
            .values(
                is_approved=is_approved,
                approved_by=admin_id,
                approved_at=datetime.utcnow() if is_approved else None,
            )
            .execution_options(synchronize_session="fetch")
        )
        await self.session.commit()
        return len(valid_ids)

    async def delete(self, ulasan_id: uuid.UUID) -> None:
        ulasan = await self._get(ulasan_id)
        ulasan.deleted_at = datetime.utcnow()
        await self.session.commit()
        logger.info("Ulasan deleted", ulasan_id=str(ulasan_id))

    # ----- Public -----

    async def list_public(
        self,
        produk_id: uuid.UUID,
        page: int,
        per_page: int,
        rating: Optional[int] = None,
        with_photo: Optional[bool] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = select(Ulasan).where(
            Ulasan.produk_id == produk_id,
            Ulasan.is_approved.is_(True),
            Ulasan.alive(),
        )
        if rating is not None:
            query = query.where(Ulasan.rating == rating)
        if with_photo:
            query = query.where(Ulasan.gambar.is_not(None))
        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()
        result = await self.session.execute(
            query.order_by(Ulasan.created_at.desc()).offset(offset_for(page, per_page)).limit(per_page)
        )
        return [public_ulasan_to_dict(u) for u in result.scalars().all()], total

    async def rating_stats(self, produk_id: uuid.UUID) -> Dict[str, Any]:
        result = await self.session.execute(
            select(Ulasan.rating, func.count(Ulasan.id))
            .where(Ulasan.produk_id == produk_id, Ulasan.is_approved.is_(True), Ulasan.alive())
            .group_by(Ulasan.rating)
        )
        distribusi = {r: 0 for r in range(MIN_RATING, MAX_RATING + 1)}
        for rating, count in result.all():
            distribusi[rating] = count
        total = sum(distribusi.values())
        rata_rata = round(sum(r * c for r, c in distribusi.items()) / total, 1) if total else 0
        return {"total_ulasan": total, "rata_rata": rata_rata, "distribusi": distribusi}
