# bulky/app/services/master.py
"""
Generic CRUD for catalog master data (kategori, tipe, merek, kondisi, kondisi
paket, sumber, warehouse). Every kind shares nama/slug/deskripsi/is_active and soft
delete; kinds with an ``urutan`` column are ordered and reorderable.
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.exceptions import ConflictError, NotFoundError, ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.core.responses import offset_for
from bulky.app.core.text import generate_slug
from bulky.app.models.catalog import (
    KategoriProduk,
    KondisiPaket,
    KondisiProduk,
    MerekProduk,
    SumberProduk,
    TipeProduk,
    Warehouse,
)
from bulky.app.services.reorder import ReorderService

logger = get_logger(__name__)

# Columns beyond the shared ones, per model
EXTRA_FIELDS: Dict[type, Tuple[str, ...]] = {
    KategoriProduk: ("icon_url",),
    TipeProduk: (),
    MerekProduk: ("logo_url",),
    KondisiProduk: (),
    KondisiPaket: (),
    SumberProduk: (),
    Warehouse: ("alamat", "kota", "telepon"),
}

# URL segment -> (model, human label used in messages)
MASTER_KINDS: Dict[str, Tuple[type, str]] = {
    "kategori-produk": (KategoriProduk, "kategori produk"),
    "tipe-produk": (TipeProduk, "tipe produk"),
    "merek-produk": (MerekProduk, "merek produk"),
    "kondisi-produk": (KondisiProduk, "kondisi produk"),
    "kondisi-paket": (KondisiPaket, "kondisi paket"),
    "sumber-produk": (SumberProduk, "sumber produk"),
    "warehouse": (Warehouse, "warehouse"),
}


class MasterDataServiceError(ServiceError):
    """Base exception for master data errors."""


def master_to_dict(obj) -> Dict[str, Any]:
    data = {
        "id": obj.id,
        "nama": obj.nama,
        "slug": obj.slug,
        "deskripsi": obj.deskripsi,
        "is_active": obj.is_active,
    }
    if hasattr(obj, "urutan"):
        data["urutan"] = obj.urutan
    for field in EXTRA_FIELDS.get(type(obj), ()):
        data[field] = getattr(obj, field)
    data["created_at"] = obj.created_at
    data["updated_at"] = obj.updated_at
    return data


class MasterDataService:

    def __init__(self, session: AsyncSession, model: type, label: str):
        self.session = session
        self.model = model
        self.label = label
        self.ordered = hasattr(model, "urutan")
        self.reorderer = ReorderService(session)

    @classmethod
    def for_kind(cls, session: AsyncSession, kind: str) -> "MasterDataService":
        if kind not in MASTER_KINDS:
            raise NotFoundError(f"jenis master data '{kind}' tidak dikenal")
        model, label = MASTER_KINDS[kind]
        return cls(session, model, label)

    def _not_found(self) -> NotFoundError:
        return NotFoundError(f"{self.label} tidak ditemukan")

    async def _get(self, obj_id: uuid.UUID, active_only: bool = False):
        query = select(self.model).where(self.model.id == obj_id, self.model.alive())
        if active_only:
            query = query.where(self.model.is_active.is_(True))
        obj = (await self.session.execute(query)).scalar_one_or_none()
        if not obj:
            raise self._not_found()
        return obj

    async def _ensure_slug_free(self, slug: str, exclude_id: Optional[uuid.UUID] = None) -> None:
        query = select(self.model.id).where(self.model.slug == slug, self.model.alive())
        if exclude_id:
            query = query.where(self.model.id != exclude_id)
        if (await self.session.execute(query)).first():
            raise ConflictError("slug sudah digunakan")

    def _order_by(self):
        if self.ordered:
            return (self.model.urutan.asc(), self.model.nama.asc())
        return (self.model.nama.asc(),)

    async def list(
        self,
        page: int,
        per_page: int,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = select(self.model).where(self.model.alive())
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(self.model.nama.ilike(pattern), self.model.deskripsi.ilike(pattern)))
        if is_active is not None:
            query = query.where(self.model.is_active.is_(is_active))
        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()
        result = await self.session.execute(
            query.order_by(*self._order_by()).offset(offset_for(page, per_page)).limit(per_page)
        )
        return [master_to_dict(obj) for obj in result.scalars().all()], total

    async def detail(self, obj_id: uuid.UUID, active_only: bool = False) -> Dict[str, Any]:
        return master_to_dict(await self._get(obj_id, active_only))

    async def find_by_slug(self, slug: str, active_only: bool = False) -> Dict[str, Any]:
        query = select(self.model).where(self.model.slug == slug, self.model.alive())
        if active_only:
            query = query.where(self.model.is_active.is_(True))
        obj = (await self.session.execute(query)).scalar_one_or_none()
        if not obj:
            raise self._not_found()
        return master_to_dict(obj)

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        slug = generate_slug(data.get("slug") or data["nama"])
        if not slug:
            raise MasterDataServiceError("slug tidak valid")
        await self._ensure_slug_free(slug)

        values = {
            "nama": data["nama"],
            "slug": slug,
            "deskripsi": data.get("deskripsi"),
            "is_active": data.get("is_active") is not False,
        }
        for field in EXTRA_FIELDS.get(self.model, ()):
            values[field] = data.get(field)
        if self.ordered:
            values["urutan"] = await self.reorderer.next_urutan(self.model)

        obj = self.model(**values)
        self.session.add(obj)
        await self.session.commit()
        logger.info("Master data created", table=self.model.__tablename__, id=str(obj.id))
        return master_to_dict(obj)

    async def update(self, obj_id: uuid.UUID, data: Dict[str, Any]) -> Dict[str, Any]:
        """Partial update. The slug follows a name change unless a slug is sent explicitly."""
        obj = await self._get(obj_id)

        new_slug = None
        if data.get("slug"):
            new_slug = generate_slug(data["slug"])
        elif data.get("nama") and data["nama"] != obj.nama:
            new_slug = generate_slug(data["nama"])
        if new_slug and new_slug != obj.slug:
            await self._ensure_slug_free(new_slug, exclude_id=obj_id)
            obj.slug = new_slug

        for field in ("nama", "deskripsi", "is_active") + EXTRA_FIELDS.get(self.model, ()):
            if field in data and data[field] is not None:
                setattr(obj, field, data[field])
        await self.session.commit()
        return master_to_dict(obj)

    async def delete(self, obj_id: uuid.UUID) -> None:
        obj = await self._get(obj_id)
        obj.deleted_at = datetime.utcnow()
        if self.ordered:
            await self.session.flush()
            await self.reorderer.compact_after_delete(self.model, obj.urutan)
        await self.session.commit()
        logger.info("Master data deleted", table=self.model.__tablename__, id=str(obj_id))

    async def toggle_status(self, obj_id: uuid.UUID) -> Dict[str, Any]:
        obj = await self._get(obj_id)
        obj.is_active = not obj.is_active
        await self.session.commit()
        return {"id": obj.id, "is_active": obj.is_active}

    async def dropdown(self) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            select(self.model.id, self.model.nama)
            .where(self.model.alive(), self.model.is_active.is_(True))
            .order_by(*self._order_by())
        )
        return [{"id": row.id, "nama": row.nama} for row in result.all()]

    async def public_list(self) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            select(self.model)
            .where(self.model.alive(), self.model.is_active.is_(True))
            .order_by(*self._order_by())
        )
        return [master_to_dict(obj) for obj in result.scalars().all()]

    async def reorder(self, obj_id: uuid.UUID, direction: str) -> Dict[str, Any]:
        self._ensure_ordered()
        return await self.reorderer.reorder(self.model, obj_id, direction)

    async def bulk_reorder(self, items: List[Dict[str, Any]]) -> int:
        self._ensure_ordered()
        return await self.reorderer.bulk_reorder(self.model, items)

    def _ensure_ordered(self) -> None:
        if not self.ordered:
            raise MasterDataServiceError(f"{self.label} tidak mendukung pengurutan")
