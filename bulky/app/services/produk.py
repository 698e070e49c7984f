# bulky/app/services/produk.py
"""
Product catalog service: CRUD, pricing, stock and product images.
"""
import uuid
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Tuple

from fastapi import UploadFile
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.constants import ALLOWED_IMAGE_EXTENSIONS, ONE_CENT, PERCENT_BASE, ZERO
from bulky.app.core.exceptions import ConflictError, NotFoundError, ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.core.metrics import produk_created_total
from bulky.app.core.responses import offset_for
from bulky.app.core.text import generate_slug
from bulky.app.core.uploads import remove_upload, save_image_upload
from bulky.app.models.catalog import (
    KategoriProduk,
    KondisiPaket,
    KondisiProduk,
    MerekProduk,
    SumberProduk,
    TipeProduk,
    Warehouse,
)
from bulky.app.models.produk import Produk, ProdukGambar
from bulky.app.services.reorder import ReorderService

logger = get_logger(__name__)

# FK field -> (model, label) of the master row it must reference
REFERENCES = {
    "kategori_id": (KategoriProduk, "kategori produk"),
    "tipe_produk_id": (TipeProduk, "tipe produk"),
    "kondisi_id": (KondisiProduk, "kondisi produk"),
    "kondisi_paket_id": (KondisiPaket, "kondisi paket"),
    "sumber_id": (SumberProduk, "sumber produk"),
    "warehouse_id": (Warehouse, "warehouse"),
}

PLAIN_FIELDS = (
    "nama", "id_cargo", "deskripsi", "harga_sebelum_diskon", "persentase_diskon",
    "quantity", "discrepancy", "is_active",
)

SORT_COLUMNS = {
    "created_at": Produk.created_at,
    "nama": Produk.nama,
    "harga_sesudah_diskon": Produk.harga_sesudah_diskon,
}


class ProdukServiceError(ServiceError):
    """Base exception for product service errors."""


def compute_harga_sesudah_diskon(harga: Decimal, persentase: Optional[Decimal]) -> Decimal:
    """harga x (100 - persentase) / 100, rounded half-up to cents."""
    persentase = Decimal(persentase or ZERO)
    value = Decimal(harga) * (PERCENT_BASE - persentase) / PERCENT_BASE
    return value.quantize(ONE_CENT, rounding=ROUND_HALF_UP)


def _ref(obj, *extra: str) -> Optional[Dict[str, Any]]:
    if obj is None:
        return None
    data = {"id": obj.id, "nama": obj.nama, "slug": obj.slug}
    for field in extra:
        data[field] = getattr(obj, field)
    return data


def gambar_to_dict(gambar: ProdukGambar) -> Dict[str, Any]:
    return {
        "id": gambar.id,
        "gambar_url": gambar.gambar_url,
        "urutan": gambar.urutan,
        "is_primary": gambar.is_primary,
    }


def produk_to_dict(produk: Produk) -> Dict[str, Any]:
    gambar = [gambar_to_dict(g) for g in produk.gambar]
    primary = next((g["gambar_url"] for g in gambar if g["is_primary"]), None)
    return {
        "id": produk.id,
        "nama": produk.nama,
        "slug": produk.slug,
        "id_cargo": produk.id_cargo,
        "deskripsi": produk.deskripsi,
        "kategori": _ref(produk.kategori),
        "tipe_produk": _ref(produk.tipe_produk),
        "merek": [_ref(m) for m in produk.merek],
        "kondisi": _ref(produk.kondisi),
        "kondisi_paket": _ref(produk.kondisi_paket),
        "sumber": _ref(produk.sumber),
        "warehouse": _ref(produk.warehouse, "kota"),
        "harga_sebelum_diskon": produk.harga_sebelum_diskon,
        "persentase_diskon": produk.persentase_diskon,
        "harga_sesudah_diskon": produk.harga_sesudah_diskon,
        "quantity": produk.quantity,
        "quantity_terjual": produk.quantity_terjual,
        "discrepancy": produk.discrepancy,
        "is_active": produk.is_active,
        "gambar": gambar,
        "gambar_utama": primary,
        "created_at": produk.created_at,
        "updated_at": produk.updated_at,
    }


class ProdukService:
    """Service class for product operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.reorderer = ReorderService(session)

    async def _get(self, produk_id: uuid.UUID, active_only: bool = False, fresh: bool = False) -> Produk:
        query = select(Produk).where(Produk.id == produk_id, Produk.alive())
        if active_only:
            query = query.where(Produk.is_active.is_(True))
        if fresh:
            query = query.execution_options(populate_existing=True)
        produk = (await self.session.execute(query)).scalar_one_or_none()
        if not produk:
            raise NotFoundError("produk tidak ditemukan")
        return produk

    async def _ensure_references(self, data: Dict[str, Any]) -> None:
        for field, (model, label) in REFERENCES.items():
            ref_id = data.get(field)
            if ref_id is None:
                continue
            exists = await self.session.execute(
                select(model.id).where(model.id == ref_id, model.alive())
            )
            if not exists.first():
                raise NotFoundError(f"{label} tidak ditemukan")

    async def _load_merek(self, merek_ids: List[uuid.UUID]) -> List[MerekProduk]:
        if not merek_ids:
            return []
        result = await self.session.execute(
            select(MerekProduk).where(MerekProduk.id.in_(merek_ids), MerekProduk.alive())
        )
        merek = list(result.scalars().all())
        if len(merek) != len(set(merek_ids)):
            raise NotFoundError("merek produk tidak ditemukan")
        return merek

    async def _ensure_id_cargo_free(self, id_cargo: Optional[str], exclude_id: Optional[uuid.UUID] = None) -> None:
        if not id_cargo:
            return
        query = select(Produk.id).where(Produk.id_cargo == id_cargo, Produk.alive())
        if exclude_id:
            query = query.where(Produk.id != exclude_id)
        if (await self.session.execute(query)).first():
            raise ConflictError("ID cargo sudah digunakan")

    async def _unique_slug(self, nama: str, exclude_id: Optional[uuid.UUID] = None) -> str:
        """Slug of ``nama``, suffixed -2, -3, ... until no live product uses it."""
        base = generate_slug(nama) or "produk"
        candidate, counter = base, 1
        while True:
            query = select(Produk.id).where(Produk.slug == candidate, Produk.alive())
            if exclude_id:
                query = query.where(Produk.id != exclude_id)
            if not (await self.session.execute(query)).first():
                return candidate
            counter += 1
            candidate = f"{base}-{counter}"

    # ----- Listing -----

    async def list_produk(
        self,
        page: int,
        per_page: int,
        search: Optional[str] = None,
        kategori_id: Optional[uuid.UUID] = None,
        tipe_produk_id: Optional[uuid.UUID] = None,
        merek_id: Optional[uuid.UUID] = None,
        kondisi_id: Optional[uuid.UUID] = None,
        kondisi_paket_id: Optional[uuid.UUID] = None,
        warehouse_id: Optional[uuid.UUID] = None,
        harga_min: Optional[Decimal] = None,
        harga_max: Optional[Decimal] = None,
        is_active: Optional[bool] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = select(Produk).where(Produk.alive())
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(Produk.nama.ilike(pattern), Produk.id_cargo.ilike(pattern)))
        if kategori_id:
            query = query.where(Produk.kategori_id == kategori_id)
        if tipe_produk_id:
            query = query.where(Produk.tipe_produk_id == tipe_produk_id)
        if merek_id:
            query = query.where(Produk.merek.any(MerekProduk.id == merek_id))
        if kondisi_id:
            query = query.where(Produk.kondisi_id == kondisi_id)
        if kondisi_paket_id:
            query = query.where(Produk.kondisi_paket_id == kondisi_paket_id)
        if warehouse_id:
            query = query.where(Produk.warehouse_id == warehouse_id)
        if harga_min is not None:
            query = query.where(Produk.harga_sesudah_diskon >= harga_min)
        if harga_max is not None:
            query = query.where(Produk.harga_sesudah_diskon <= harga_max)
        if is_active is not None:
            query = query.where(Produk.is_active.is_(is_active))

        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()

        column = SORT_COLUMNS.get(sort_by, Produk.created_at)
        order = column.asc() if sort_order == "asc" else column.desc()
        result = await self.session.execute(
            query.order_by(order, Produk.id).offset(offset_for(page, per_page)).limit(per_page)
        )
        return [produk_to_dict(p) for p in result.scalars().all()], total

    async def get_produk(self, produk_id: uuid.UUID, active_only: bool = False) -> Dict[str, Any]:
        return produk_to_dict(await self._get(produk_id, active_only))

    async def find_by_slug(self, slug: str, active_only: bool = False) -> Dict[str, Any]:
        query = select(Produk).where(Produk.slug == slug, Produk.alive())
        if active_only:
            query = query.where(Produk.is_active.is_(True))
        produk = (await self.session.execute(query)).scalar_one_or_none()
        if not produk:
            raise NotFoundError("produk tidak ditemukan")
        return produk_to_dict(produk)

    # ----- Writes -----

    async def create_produk(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a product.

        ``harga_sesudah_diskon`` is derived from the base price and discount
        percentage unless the caller supplies it.
        """
        await self._ensure_references(data)
        await self._ensure_id_cargo_free(data.get("id_cargo"))
        merek = await self._load_merek(data.get("merek_ids") or [])

        harga = Decimal(data["harga_sebelum_diskon"])
        persentase = Decimal(data.get("persentase_diskon") or ZERO)
        harga_sesudah = data.get("harga_sesudah_diskon")
        if harga_sesudah is None:
            harga_sesudah = compute_harga_sesudah_diskon(harga, persentase)

        produk = Produk(
            nama=data["nama"],
            slug=await self._unique_slug(data["nama"]),
            id_cargo=data.get("id_cargo"),
            deskripsi=data.get("deskripsi"),
            kategori_id=data["kategori_id"],
            tipe_produk_id=data["tipe_produk_id"],
            kondisi_id=data["kondisi_id"],
            kondisi_paket_id=data["kondisi_paket_id"],
            sumber_id=data.get("sumber_id"),
            warehouse_id=data["warehouse_id"],
            harga_sebelum_diskon=harga,
            persentase_diskon=persentase,
            harga_sesudah_diskon=harga_sesudah,
            quantity=data.get("quantity") or 0,
            discrepancy=data.get("discrepancy"),
            is_active=data.get("is_active") is not False,
            merek=merek,
        )
        self.session.add(produk)
        await self.session.commit()
        produk_created_total.inc()
        logger.info("Produk created", produk_id=str(produk.id), slug=produk.slug)
        return produk_to_dict(await self._get(produk.id, fresh=True))

    async def update_produk(self, produk_id: uuid.UUID, data: Dict[str, Any]) -> Dict[str, Any]:
        """Partial update; ``data`` contains only fields that were sent."""
        produk = await self._get(produk_id)
        await self._ensure_references(data)
        if data.get("id_cargo") and data["id_cargo"] != produk.id_cargo:
            await self._ensure_id_cargo_free(data["id_cargo"], exclude_id=produk_id)
        if data.get("merek_ids") is not None:
            produk.merek = await self._load_merek(data["merek_ids"])

        if data.get("nama") and data["nama"] != produk.nama:
            produk.slug = await self._unique_slug(data["nama"], exclude_id=produk_id)
        for field in PLAIN_FIELDS + tuple(REFERENCES):
            if field in data and data[field] is not None:
                setattr(produk, field, data[field])

        if data.get("harga_sesudah_diskon") is not None:
            produk.harga_sesudah_diskon = data["harga_sesudah_diskon"]
        elif "harga_sebelum_diskon" in data or "persentase_diskon" in data:
            produk.harga_sesudah_diskon = compute_harga_sesudah_diskon(
                produk.harga_sebelum_diskon, produk.persentase_diskon
            )
        await self.session.commit()
        return produk_to_dict(await self._get(produk_id, fresh=True))

    async def delete_produk(self, produk_id: uuid.UUID) -> None:
        """Soft delete; the slug is renamed so a new product can take it."""
        produk = await self._get(produk_id)
        now = datetime.utcnow()
        produk.slug = f"{produk.slug}-deleted-{int(now.timestamp())}{now.microsecond:06d}"
        produk.deleted_at = now
        await self.session.commit()
        logger.info("Produk deleted", produk_id=str(produk_id))

    async def toggle_status(self, produk_id: uuid.UUID) -> Dict[str, Any]:
        produk = await self._get(produk_id)
        produk.is_active = not produk.is_active
        await self.session.commit()
        return {"id": produk.id, "is_active": produk.is_active}

    async def update_stock(self, produk_id: uuid.UUID, quantity: int) -> Dict[str, Any]:
        if quantity < 0:
            raise ProdukServiceError("quantity tidak boleh negatif")
        produk = await self._get(produk_id)
        produk.quantity = quantity
        await self.session.commit()
        return {"id": produk.id, "quantity": produk.quantity, "quantity_terjual": produk.quantity_terjual}

    # ----- Images -----

    async def _get_gambar(self, produk_id: uuid.UUID, gambar_id: uuid.UUID) -> ProdukGambar:
        result = await self.session.execute(
            select(ProdukGambar).where(ProdukGambar.id == gambar_id, ProdukGambar.produk_id == produk_id)
        )
        gambar = result.scalar_one_or_none()
        if not gambar:
            raise NotFoundError("gambar produk tidak ditemukan")
        return gambar

    async def _list_gambar(self, produk_id: uuid.UUID) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            select(ProdukGambar).where(ProdukGambar.produk_id == produk_id).order_by(ProdukGambar.urutan)
        )
        return [gambar_to_dict(g) for g in result.scalars().all()]

    async def add_gambar(self, produk_id: uuid.UUID, file: UploadFile) -> Dict[str, Any]:
        await self._get(produk_id)
        url = await save_image_upload(file, f"produk/{produk_id.hex}", ALLOWED_IMAGE_EXTENSIONS)

        scope = ("produk_id", produk_id)
        has_images = (await self.session.execute(
            select(ProdukGambar.id).where(ProdukGambar.produk_id == produk_id).limit(1)
        )).first()
        gambar = ProdukGambar(
            produk_id=produk_id,
            gambar_url=url,
            urutan=await self.reorderer.next_urutan(ProdukGambar, scope),
            is_primary=not has_images,
        )
        self.session.add(gambar)
        await self.session.commit()
        return gambar_to_dict(gambar)

    async def delete_gambar(self, produk_id: uuid.UUID, gambar_id: uuid.UUID) -> List[Dict[str, Any]]:
        """Remove an image, close the urutan gap and promote a new primary if needed."""
        gambar = await self._get_gambar(produk_id, gambar_id)
        was_primary, urutan, url = gambar.is_primary, gambar.urutan, gambar.gambar_url
        await self.session.execute(delete(ProdukGambar).where(ProdukGambar.id == gambar_id))
        await self.reorderer.compact_after_delete(ProdukGambar, urutan, ("produk_id", produk_id))

        if was_primary:
            first = (await self.session.execute(
                select(ProdukGambar)
                .where(ProdukGambar.produk_id == produk_id)
                .order_by(ProdukGambar.urutan)
                .limit(1)
            )).scalar_one_or_none()
            if first is not None:
                first.is_primary = True
        await self.session.commit()
        remove_upload(url)
        return await self._list_gambar(produk_id)

    async def reorder_gambar(self, produk_id: uuid.UUID, gambar_id: uuid.UUID, direction: str) -> Dict[str, Any]:
        await self._get(produk_id)
        return await self.reorderer.reorder(ProdukGambar, gambar_id, direction, scope=("produk_id", produk_id))

    async def set_primary_gambar(self, produk_id: uuid.UUID, gambar_id: uuid.UUID) -> List[Dict[str, Any]]:
        gambar = await self._get_gambar(produk_id, gambar_id)
        await self.session.execute(
            update(ProdukGambar)
            .where(ProdukGambar.produk_id == produk_id, ProdukGambar.id != gambar_id)
            .values(is_primary=False)
            .execution_options(synchronize_session="fetch")
        )
        gambar.is_primary = True
        await self.session.commit()
        return await self._list_gambar(produk_id)
