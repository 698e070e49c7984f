# bulky/app/services/content_kategori.py
"""
Ordered taxonomies of the content section: blog categories, video
categories and blog labels. Labels have no active flag.
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.exceptions import ConflictError, NotFoundError, ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.core.responses import offset_for
from bulky.app.core.text import generate_slug
from bulky.app.models.content import KategoriBlog, KategoriVideo, LabelBlog
from bulky.app.services.reorder import ReorderService

logger = get_logger(__name__)

CONTENT_KINDS: Dict[str, Tuple[type, str]] = {
    "kategori-blog": (KategoriBlog, "kategori blog"),
    "kategori-video": (KategoriVideo, "kategori video"),
    "label-blog": (LabelBlog, "label blog"),
}


def taxonomy_to_dict(obj) -> Dict[str, Any]:
    data = {"id": obj.id, "nama": obj.nama, "slug": obj.slug, "urutan": obj.urutan}
    if hasattr(obj, "is_active"):
        data["is_active"] = obj.is_active
    data["created_at"] = obj.created_at
    data["updated_at"] = obj.updated_at
    return data


class ContentKategoriService:

    def __init__(self, session: AsyncSession, model: type, label: str):
        self.session = session
        self.model = model
        self.label = label
        self.has_status = hasattr(model, "is_active")
        self.reorderer = ReorderService(session)

    @classmethod
    def for_kind(cls, session: AsyncSession, kind: str) -> "ContentKategoriService":
        if kind not in CONTENT_KINDS:
            raise NotFoundError(f"jenis data '{kind}' tidak dikenal")
        model, label = CONTENT_KINDS[kind]
        return cls(session, model, label)

    async def _get(self, obj_id: uuid.UUID):
        result = await self.session.execute(
            select(self.model).where(self.model.id == obj_id, self.model.alive())
        )
        obj = result.scalar_one_or_none()
        if not obj:
            raise NotFoundError(f"{self.label} tidak ditemukan")
        return obj

    async def _ensure_slug_free(self, slug: str, exclude_id: Optional[uuid.UUID] = None) -> None:
        query = select(self.model.id).where(self.model.slug == slug, self.model.alive())
        if exclude_id:
            query = query.where(self.model.id != exclude_id)
        if (await self.session.execute(query)).first():
            raise ConflictError("slug sudah digunakan")

    async def list(
        self,
        page: int,
        per_page: int,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = select(self.model).where(self.model.alive())
        if search:
            query = query.where(self.model.nama.ilike(f"%{search}%"))
        if is_active is not None and self.has_status:
            query = query.where(self.model.is_active.is_(is_active))
        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()
        result = await self.session.execute(
            query.order_by(self.model.urutan).offset(offset_for(page, per_page)).limit(per_page)
        )
        return [taxonomy_to_dict(obj) for obj in result.scalars().all()], total

    async def detail(self, obj_id: uuid.UUID) -> Dict[str, Any]:
        return taxonomy_to_dict(await self._get(obj_id))

    async def create(self, nama: str, slug: Optional[str] = None, is_active: Optional[bool] = None) -> Dict[str, Any]:
        slug = generate_slug(slug or nama)
        if not slug:
            raise ServiceError("slug tidak valid")
        await self._ensure_slug_free(slug)
        values: Dict[str, Any] = {
            "nama": nama,
            "slug": slug,
            "urutan": await self.reorderer.next_urutan(self.model),
        }
        if self.has_status:
            values["is_active"] = is_active is not False
        obj = self.model(**values)
        self.session.add(obj)
        await self.session.commit()
        logger.info("Content taxonomy created", table=self.model.__tablename__, id=str(obj.id))
        return taxonomy_to_dict(obj)

    async def update(
        self,
        obj_id: uuid.UUID,
        nama: Optional[str] = None,
        slug: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> Dict[str, Any]:
        obj = await self._get(obj_id)
        new_slug = generate_slug(slug) if slug else (generate_slug(nama) if nama and nama != obj.nama else None)
        if new_slug and new_slug != obj.slug:
            await self._ensure_slug_free(new_slug, exclude_id=obj_id)
            obj.slug = new_slug
        if nama is not None:
            obj.nama = nama
        if is_active is not None and self.has_status:
            obj.is_active = is_active
        await self.session.commit()
        return taxonomy_to_dict(obj)

    async def delete(self, obj_id: uuid.UUID) -> None:
        obj = await self._get(obj_id)
        obj.deleted_at = datetime.utcnow()
        await self.session.flush()
        await self.reorderer.compact_after_delete(self.model, obj.urutan)
        await self.session.commit()
        logger.info("Content taxonomy deleted", table=self.model.__tablename__, id=str(obj_id))

    async def toggle_status(self, obj_id: uuid.UUID) -> Dict[str, Any]:
        if not self.has_status:
            raise ServiceError(f"{self.label} tidak memiliki status")
        obj = await self._get(obj_id)
        obj.is_active = not obj.is_active
        await self.session.commit()
        return {"id": obj.id, "is_active": obj.is_active}

    async def reorder(self, obj_id: uuid.UUID, direction: str) -> Dict[str, Any]:
        return await self.reorderer.reorder(self.model, obj_id, direction)

    async def dropdown(self) -> List[Dict[str, Any]]:
        query = select(self.model.id, self.model.nama).where(self.model.alive())
        if self.has_status:
            query = query.where(self.model.is_active.is_(True))
        result = await self.session.execute(query.order_by(self.model.urutan))
        return [{"id": row.id, "nama": row.nama} for row in result.all()]

    async def public_list(self) -> List[Dict[str, Any]]:
        query = select(self.model).where(self.model.alive())
        if self.has_status:
            query = query.where(self.model.is_active.is_(True))
        result = await self.session.execute(query.order_by(self.model.urutan))
        return [
            {"id": obj.id, "nama": obj.nama, "slug": obj.slug, "urutan": obj.urutan}
            for obj in result.scalars().all()
        ]
