# bulky/app/services/wilayah.py
"""
Region hierarchy service: provinsi -> kota -> kecamatan -> kelurahan.

Public child lists are served from the Redis cache; every admin write to a
level invalidates the cached list of the affected parent.
"""
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.exceptions import ConflictError, NotFoundError, ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.core.responses import offset_for
from bulky.app.models.wilayah import AlamatBuyer, Kecamatan, Kelurahan, Kota, Provinsi
from bulky.app.services.cache import CacheService

logger = get_logger(__name__)


class WilayahServiceError(ServiceError):
    """Base exception for wilayah service errors."""


@dataclass(frozen=True)
class Level:
    name: str
    model: type
    parent_field: Optional[str] = None
    parent_model: Optional[type] = None
    child_model: Optional[type] = None
    child_parent_field: Optional[str] = None


LEVELS: Dict[str, Level] = {
    "provinsi": Level("provinsi", Provinsi, child_model=Kota, child_parent_field="provinsi_id"),
    "kota": Level("kota", Kota, "provinsi_id", Provinsi, Kecamatan, "kota_id"),
    "kecamatan": Level("kecamatan", Kecamatan, "kota_id", Kota, Kelurahan, "kecamatan_id"),
    "kelurahan": Level("kelurahan", Kelurahan, "kecamatan_id", Kecamatan),
}


def wilayah_to_dict(obj, level: Level) -> Dict[str, Any]:
    data = {"id": obj.id, "nama": obj.nama, "kode": obj.kode}
    if level.parent_field:
        data[level.parent_field] = getattr(obj, level.parent_field)
    return data


def get_level(name: str) -> Level:
    level = LEVELS.get(name)
    if level is None:
        raise NotFoundError(f"level wilayah '{name}' tidak dikenal")
    return level


class WilayahService:

    def __init__(self, session: AsyncSession, cache: Optional[CacheService] = None):
        self.session = session
        self.cache = cache

    async def _get(self, level: Level, obj_id: uuid.UUID):
        obj = await self.session.get(level.model, obj_id)
        if not obj:
            raise NotFoundError(f"{level.name} tidak ditemukan")
        return obj

    async def _ensure_parent(self, level: Level, parent_id: Optional[uuid.UUID]) -> None:
        if not level.parent_field:
            return
        if parent_id is None or not await self.session.get(level.parent_model, parent_id):
            raise NotFoundError(f"{level.parent_model.__tablename__} tidak ditemukan")

    async def _ensure_kode_free(self, level: Level, kode: Optional[str], exclude_id: Optional[uuid.UUID] = None) -> None:
        if not kode:
            return
        query = select(level.model.id).where(level.model.kode == kode)
        if exclude_id:
            query = query.where(level.model.id != exclude_id)
        if (await self.session.execute(query)).first():
            raise ConflictError(f"kode {level.name} sudah digunakan")

    async def _invalidate(self, level: Level, parent_id: Optional[uuid.UUID]) -> None:
        if self.cache is not None:
            await self.cache.invalidate_wilayah(level.name, parent_id)

    # ----- Public, cached -----

    async def list_provinsi(self) -> List[Dict[str, Any]]:
        if self.cache is not None:
            cached = await self.cache.get_provinsi()
            if cached is not None:
                return cached
        result = await self.session.execute(select(Provinsi).order_by(Provinsi.nama))
        level = LEVELS["provinsi"]
        items = [wilayah_to_dict(p, level) for p in result.scalars().all()]
        if self.cache is not None:
            await self.cache.set_provinsi(_jsonable(items))
        return items

    async def list_children(self, level_name: str, parent_id: uuid.UUID) -> List[Dict[str, Any]]:
        """Children of one parent, e.g. level_name="kota" lists the cities of a province."""
        level = get_level(level_name)
        await self._ensure_parent(level, parent_id)
        if self.cache is not None:
            cached = await self.cache.get_children(level.name, parent_id)
            if cached is not None:
                return cached
        model = level.model
        result = await self.session.execute(
            select(model).where(getattr(model, level.parent_field) == parent_id).order_by(model.nama)
        )
        items = [wilayah_to_dict(obj, level) for obj in result.scalars().all()]
        if self.cache is not None:
            await self.cache.set_children(level.name, parent_id, _jsonable(items))
        return items

    # ----- Admin -----

    async def list_admin(
        self,
        level_name: str,
        page: int,
        per_page: int,
        search: Optional[str] = None,
        parent_id: Optional[uuid.UUID] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        level = get_level(level_name)
        model = level.model
        query = select(model)
        if search:
            query = query.where(model.nama.ilike(f"%{search}%"))
        if parent_id and level.parent_field:
            query = query.where(getattr(model, level.parent_field) == parent_id)
        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()
        result = await self.session.execute(
            query.order_by(model.nama).offset(offset_for(page, per_page)).limit(per_page)
        )
        return [wilayah_to_dict(obj, level) for obj in result.scalars().all()], total

    async def get(self, level_name: str, obj_id: uuid.UUID) -> Dict[str, Any]:
        level = get_level(level_name)
        return wilayah_to_dict(await self._get(level, obj_id), level)

    async def create(
        self,
        level_name: str,
        nama: str,
        kode: Optional[str] = None,
        parent_id: Optional[uuid.UUID] = None,
    ) -> Dict[str, Any]:
        level = get_level(level_name)
        await self._ensure_parent(level, parent_id)
        await self._ensure_kode_free(level, kode)

        values: Dict[str, Any] = {"nama": nama, "kode": kode}
        if level.parent_field:
            values[level.parent_field] = parent_id
        obj = level.model(**values)
        self.session.add(obj)
        await self.session.commit()
        await self._invalidate(level, parent_id)
        logger.info("Wilayah created", level=level.name, wilayah_id=str(obj.id))
        return wilayah_to_dict(obj, level)

    async def update(
        self,
        level_name: str,
        obj_id: uuid.UUID,
        nama: Optional[str] = None,
        kode: Optional[str] = None,
        parent_id: Optional[uuid.UUID] = None,
    ) -> Dict[str, Any]:
        level = get_level(level_name)
        obj = await self._get(level, obj_id)
        old_parent = getattr(obj, level.parent_field) if level.parent_field else None

        if kode is not None and kode != obj.kode:
            await self._ensure_kode_free(level, kode, exclude_id=obj_id)
            obj.kode = kode
        if nama is not None:
            obj.nama = nama
        if parent_id is not None and level.parent_field and parent_id != old_parent:
            await self._ensure_parent(level, parent_id)
            setattr(obj, level.parent_field, parent_id)
        await self.session.commit()

        await self._invalidate(level, old_parent)
        if level.parent_field and getattr(obj, level.parent_field) != old_parent:
            await self._invalidate(level, getattr(obj, level.parent_field))
        return wilayah_to_dict(obj, level)

    async def _ensure_kelurahan_unused(self, kelurahan_id: uuid.UUID) -> None:
        # Soft-deleted addresses still hold the foreign key, so they count too
        result = await self.session.execute(
            select(func.count(AlamatBuyer.id)).where(AlamatBuyer.kelurahan_id == kelurahan_id)
        )
        if result.scalar_one() > 0:
            raise WilayahServiceError("kelurahan tidak dapat dihapus karena masih digunakan di alamat buyer")

    async def delete(self, level_name: str, obj_id: uuid.UUID) -> None:
        level = get_level(level_name)
        obj = await self._get(level, obj_id)
        if level.child_model is not None:
            child = await self.session.execute(
                select(level.child_model.id)
                .where(getattr(level.child_model, level.child_parent_field) == obj_id)
                .limit(1)
            )
            if child.first():
                raise WilayahServiceError("wilayah masih memiliki data turunan")
        if level.model is Kelurahan:
            await self._ensure_kelurahan_unused(obj_id)
        parent_id = getattr(obj, level.parent_field) if level.parent_field else None
        await self.session.delete(obj)
        await self.session.commit()
        await self._invalidate(level, parent_id)
        logger.info("Wilayah deleted", level=level.name, wilayah_id=str(obj_id))


def _jsonable(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """UUIDs as strings so cached and fresh responses are identical."""
    return [{k: (str(v) if isinstance(v, uuid.UUID) else v) for k, v in item.items()} for item in items]
