# bulky/app/services/kupon.py
"""
Coupon (kupon) service.

Usage counters are derived from KuponUsage rows instead of a stored column,
so expired/limit flags are always computed at read time.
"""
import secrets
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.constants import (
    JENIS_DISKON_JUMLAH_TETAP,
    JENIS_DISKON_PERSENTASE,
    KUPON_KODE_CHARSET,
    PERCENT_BASE,
)
from bulky.app.core.exceptions import ConflictError, NotFoundError, ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.core.responses import offset_for
from bulky.app.models.auth import Buyer
from bulky.app.models.catalog import KategoriProduk
from bulky.app.models.kupon import Kupon, KuponUsage
from bulky.app.models.pesanan import Pesanan

logger = get_logger(__name__)

KODE_MIN_LENGTH = 3
KODE_MAX_LENGTH = 50
GENERATE_MIN_LENGTH = 4
GENERATE_MAX_LENGTH = 20


class KuponServiceError(ServiceError):
    """Base exception for kupon service errors."""


def kupon_to_dict(kupon: Kupon, usage_count: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    return {
        "id": kupon.id,
        "kode": kupon.kode,
        "nama": kupon.nama,
        "deskripsi": kupon.deskripsi,
        "jenis_diskon": kupon.jenis_diskon,
        "nilai_diskon": kupon.nilai_diskon,
        "minimal_pembelian": kupon.minimal_pembelian,
        "limit_pemakaian": kupon.limit_pemakaian,
        "tanggal_kedaluarsa": kupon.tanggal_kedaluarsa,
        "is_all_kategori": kupon.is_all_kategori,
        "is_active": kupon.is_active,
        "kategori": [{"id": k.id, "nama": k.nama} for k in kupon.kategori],
        "usage_count": usage_count,
        "is_expired": kupon.is_expired(now),
        "is_limit_reached": kupon.is_limit_reached(usage_count),
        "remaining_usage": kupon.remaining_usage(usage_count),
        "created_at": kupon.created_at,
        "updated_at": kupon.updated_at,
    }


def validate_kupon_values(
    kode: Optional[str] = None,
    jenis_diskon: Optional[str] = None,
    nilai_diskon: Optional[Decimal] = None,
    minimal_pembelian: Optional[Decimal] = None,
    limit_pemakaian: Optional[int] = None,
) -> None:
    if kode is not None and not (KODE_MIN_LENGTH <= len(kode) <= KODE_MAX_LENGTH):
        raise KuponServiceError("kode kupon harus 3-50 karakter")
    if jenis_diskon is not None and jenis_diskon not in (JENIS_DISKON_PERSENTASE, JENIS_DISKON_JUMLAH_TETAP):
        raise KuponServiceError("jenis diskon harus 'persentase' atau 'jumlah_tetap'")
    if nilai_diskon is not None:
        if nilai_diskon <= 0:
            raise KuponServiceError("nilai diskon harus lebih dari 0")
        if jenis_diskon == JENIS_DISKON_PERSENTASE and nilai_diskon > PERCENT_BASE:
            raise KuponServiceError("nilai diskon persentase maksimal 100")
    if minimal_pembelian is not None and minimal_pembelian < 0:
        raise KuponServiceError("minimal pembelian tidak boleh negatif")
    if limit_pemakaian is not None and limit_pemakaian <= 0:
        raise KuponServiceError("limit pemakaian harus lebih dari 0")


class KuponService:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get(self, kupon_id: uuid.UUID, fresh: bool = False) -> Kupon:
        query = select(Kupon).where(Kupon.id == kupon_id, Kupon.alive())
        if fresh:
            query = query.execution_options(populate_existing=True)
        kupon = (await self.session.execute(query)).scalar_one_or_none()
        if not kupon:
            raise NotFoundError("kupon tidak ditemukan")
        return kupon

    async def _usage_counts(self, kupon_ids: List[uuid.UUID]) -> Dict[uuid.UUID, int]:
        if not kupon_ids:
            return {}
        result = await self.session.execute(
            select(KuponUsage.kupon_id, func.count(KuponUsage.id))
            .where(KuponUsage.kupon_id.in_(kupon_ids))
            .group_by(KuponUsage.kupon_id)
        )
        return {row[0]: row[1] for row in result.all()}

    async def _to_dict(self, kupon: Kupon) -> Dict[str, Any]:
        counts = await self._usage_counts([kupon.id])
        return kupon_to_dict(kupon, counts.get(kupon.id, 0))

    async def _kode_exists(self, kode: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        query = select(Kupon.id).where(Kupon.kode == kode, Kupon.alive())
        if exclude_id:
            query = query.where(Kupon.id != exclude_id)
        return (await self.session.execute(query)).first() is not None

    async def _resolve_kategori(
        self,
        is_all_kategori: bool,
        kategori_ids: Optional[List[uuid.UUID]],
    ) -> List[KategoriProduk]:
        if is_all_kategori:
            if kategori_ids:
                raise KuponServiceError("tidak boleh memilih kategori jika berlaku untuk semua kategori")
            return []
        if not kategori_ids:
            raise KuponServiceError("minimal pilih satu kategori")
        result = await self.session.execute(
            select(KategoriProduk).where(KategoriProduk.id.in_(kategori_ids), KategoriProduk.alive())
        )
        kategori = list(result.scalars().all())
        if len(kategori) != len(set(kategori_ids)):
            raise NotFoundError("kategori produk tidak ditemukan")
        return kategori

    async def list_kupon(
        self,
        page: int,
        per_page: int,
        search: Optional[str] = None,
        jenis_diskon: Optional[str] = None,
        is_active: Optional[bool] = None,
        is_expired: Optional[bool] = None,
        sort_by: str = "updated_at",
        sort_order: str = "desc",
        today: Optional[date] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        today = today or date.today()
        query = select(Kupon).where(Kupon.alive())
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(Kupon.kode.ilike(pattern), Kupon.nama.ilike(pattern)))
        if jenis_diskon:
            query = query.where(Kupon.jenis_diskon == jenis_diskon)
        if is_active is not None:
            query = query.where(Kupon.is_active.is_(is_active))
        if is_expired is True:
            query = query.where(Kupon.tanggal_kedaluarsa < today)
        elif is_expired is False:
            query = query.where(Kupon.tanggal_kedaluarsa >= today)

        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()

        column = Kupon.tanggal_kedaluarsa if sort_by == "tanggal_kedaluarsa" else Kupon.updated_at
        order = column.asc() if sort_order == "asc" else column.desc()
        result = await self.session.execute(
            query.order_by(order).offset(offset_for(page, per_page)).limit(per_page)
        )
        kupons = result.scalars().all()
        counts = await self._usage_counts([k.id for k in kupons])
        return [kupon_to_dict(k, counts.get(k.id, 0)) for k in kupons], total

    async def get_kupon(self, kupon_id: uuid.UUID) -> Dict[str, Any]:
        return await self._to_dict(await self._get(kupon_id))

    async def create_kupon(self, data: Dict[str, Any], today: Optional[date] = None) -> Dict[str, Any]:
        kode = data["kode"].strip().upper()
        validate_kupon_values(
            kode, data["jenis_diskon"], Decimal(data["nilai_diskon"]),
            data.get("minimal_pembelian"), data.get("limit_pemakaian"),
        )
        if data["tanggal_kedaluarsa"] < (today or date.today()):
            raise KuponServiceError("tanggal kedaluarsa tidak boleh di masa lalu")
        is_all = bool(data.get("is_all_kategori"))
        kategori = await self._resolve_kategori(is_all, data.get("kategori_ids"))
        if await self._kode_exists(kode):
            raise ConflictError("kode kupon sudah digunakan")

        kupon = Kupon(
            kode=kode,
            nama=data["nama"],
            deskripsi=data.get("deskripsi"),
            jenis_diskon=data["jenis_diskon"],
            nilai_diskon=data["nilai_diskon"],
            minimal_pembelian=data.get("minimal_pembelian") or 0,
            limit_pemakaian=data.get("limit_pemakaian"),
            tanggal_kedaluarsa=data["tanggal_kedaluarsa"],
            is_all_kategori=is_all,
            is_active=data.get("is_active") is not False,
            kategori=kategori,
        )
        self.session.add(kupon)
        await self.session.commit()
        logger.info("Kupon created", kupon_id=str(kupon.id), kode=kode)
        return kupon_to_dict(kupon, 0)

    async def update_kupon(self, kupon_id: uuid.UUID, data: Dict[str, Any]) -> Dict[str, Any]:
        """Partial update. Sending is_all_kategori or kategori_ids replaces the category relation."""
        kupon = await self._get(kupon_id)

        kode = data["kode"].strip().upper() if data.get("kode") else None
        nilai = data.get("nilai_diskon")
        validate_kupon_values(
            kode,
            data.get("jenis_diskon") or kupon.jenis_diskon,
            Decimal(nilai if nilai is not None else kupon.nilai_diskon),
            data.get("minimal_pembelian"),
            data.get("limit_pemakaian"),
        )
        if kode and kode != kupon.kode:
            if await self._kode_exists(kode, exclude_id=kupon_id):
                raise ConflictError("kode kupon sudah digunakan")
            kupon.kode = kode

        if "is_all_kategori" in data or "kategori_ids" in data:
            is_all = data.get("is_all_kategori")
            if is_all is None:
                is_all = kupon.is_all_kategori
            kupon.kategori = await self._resolve_kategori(is_all, data.get("kategori_ids"))
            kupon.is_all_kategori = is_all

        for field in (
            "nama", "deskripsi", "jenis_diskon", "nilai_diskon", "minimal_pembelian",
            "limit_pemakaian", "tanggal_kedaluarsa", "is_active",
        ):
            if field in data and data[field] is not None:
                setattr(kupon, field, data[field])
        await self.session.commit()
        return await self._to_dict(kupon)

    async def delete_kupon(self, kupon_id: uuid.UUID) -> None:
        kupon = await self._get(kupon_id)
        kupon.deleted_at = datetime.utcnow()
        await self.session.commit()
        logger.info("Kupon deleted", kupon_id=str(kupon_id))

    async def toggle_status(self, kupon_id: uuid.UUID) -> Dict[str, Any]:
        kupon = await self._get(kupon_id)
        kupon.is_active = not kupon.is_active
        await self.session.commit()
        return {"id": kupon.id, "is_active": kupon.is_active}

    async def generate_kode(self, prefix: str = "", length: int = 8) -> str:
        """Random unused code: uppercased prefix followed by ``length`` characters from A-Z0-9."""
        if not (GENERATE_MIN_LENGTH <= length <= GENERATE_MAX_LENGTH):
            raise KuponServiceError("panjang kode harus 4-20 karakter")
        prefix = (prefix or "").strip().upper()
        while True:
            kode = prefix + "".join(secrets.choice(KUPON_KODE_CHARSET) for _ in range(length))
            if not await self._kode_exists(kode):
                return kode

    async def get_usages(self, kupon_id: uuid.UUID, page: int, per_page: int) -> Dict[str, Any]:
        kupon = await self._get(kupon_id)
        total = (await self.session.execute(
            select(func.count(KuponUsage.id)).where(KuponUsage.kupon_id == kupon_id)
        )).scalar_one()
        result = await self.session.execute(
            select(KuponUsage, Buyer.nama, Buyer.email, Pesanan.kode)
            .join(Buyer, Buyer.id == KuponUsage.buyer_id)
            .join(Pesanan, Pesanan.id == KuponUsage.pesanan_id)
            .where(KuponUsage.kupon_id == kupon_id)
            .order_by(KuponUsage.created_at.desc())
            .offset(offset_for(page, per_page))
            .limit(per_page)
        )
        items = [
            {
                "id": usage.id,
                "buyer": {"id": usage.buyer_id, "nama": nama, "email": email},
                "pesanan": {"id": usage.pesanan_id, "kode": pesanan_kode},
                "nilai_potongan": usage.nilai_potongan,
                "created_at": usage.created_at,
            }
            for usage, nama, email, pesanan_kode in result.all()
        ]
        return {
            "kupon": {"id": kupon.id, "kode": kupon.kode, "total_usage": total},
            "items": items,
            "total": total,
        }

    async def kategori_dropdown(self) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            select(KategoriProduk.id, KategoriProduk.nama)
            .where(KategoriProduk.alive(), KategoriProduk.is_active.is_(True))
            .order_by(KategoriProduk.nama)
        )
        return [{"id": row.id, "nama": row.nama} for row in result.all()]
