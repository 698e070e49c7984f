# bulky/app/services/published.py
"""
Shared behaviour of publishable content (blog posts and videos): unique
slugs, first-publication timestamp, view counting and the public queries.
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

logger = get_logger(__name__)

POPULAR_LIMIT = 5
RELATED_LIMIT = 4
SORT_FIELDS = ("created_at", "view_count", "published_at")


class PublishedContentService:
    """
    Subclasses set ``model``, ``kategori_model``, ``label``, ``search_columns``
    and ``fields`` (writable plain columns) and implement ``to_dict``.
    """

    model: type
    kategori_model: type
    label: str
    search_columns: Tuple[str, ...] = ()
    fields: Tuple[str, ...] = ()
    # Statistics keys: total_<prefix>, <prefix>_populer
    stat_prefix: str = "konten"

    def __init__(self, session: AsyncSession):
        self.session = session

    def to_dict(self, obj) -> Dict[str, Any]:
        raise NotImplementedError

    async def _get(self, obj_id: uuid.UUID, fresh: bool = False):
        query = select(self.model).where(self.model.id == obj_id, self.model.alive())
        if fresh:
            query = query.execution_options(populate_existing=True)
        obj = (await self.session.execute(query)).scalar_one_or_none()
        if not obj:
            raise NotFoundError(f"{self.label} tidak ditemukan")
        return obj

    async def _ensure_kategori(self, kategori_id: uuid.UUID) -> None:
        exists = await self.session.execute(
            select(self.kategori_model.id).where(
                self.kategori_model.id == kategori_id, self.kategori_model.alive()
            )
        )
        if not exists.first():
            raise NotFoundError(f"kategori {self.label} tidak ditemukan")

    async def _ensure_slug_free(self, slug: str, exclude_id: Optional[uuid.UUID] = None) -> None:
        query = select(self.model.id).where(self.model.slug == slug, self.model.alive())
        if exclude_id:
            query = query.where(self.model.id != exclude_id)
        if (await self.session.execute(query)).first():
            raise ConflictError("slug sudah digunakan")

    def _mark_published(self, obj) -> None:
        if obj.is_active and obj.published_at is None:
            obj.published_at = datetime.utcnow()

    async def _apply(self, obj, data: Dict[str, Any]) -> None:
        """Hook for subclass specific relations (e.g. blog labels)."""

    # ----- Admin -----

    async def list_admin(
        self,
        page: int,
        per_page: int,
        search: Optional[str] = None,
        kategori_id: Optional[uuid.UUID] = None,
        is_active: Optional[bool] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = select(self.model).where(self.model.alive())
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(*(getattr(self.model, c).ilike(pattern) for c in self.search_columns)))
        if kategori_id:
            query = query.where(self.model.kategori_id == kategori_id)
        if is_active is not None:
            query = query.where(self.model.is_active.is_(is_active))
        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()

        column = getattr(self.model, sort_by if sort_by in SORT_FIELDS else "created_at")
        order = column.asc() if sort_order == "asc" else column.desc()
        result = await self.session.execute(
            query.order_by(order).offset(offset_for(page, per_page)).limit(per_page)
        )
        return [self.to_dict(obj) for obj in result.scalars().all()], total

    async def get(self, obj_id: uuid.UUID) -> Dict[str, Any]:
        return self.to_dict(await self._get(obj_id))

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        await self._ensure_kategori(data["kategori_id"])
        slug = generate_slug(data.get("slug") or data["judul_id"])
        if not slug:
            raise ServiceError("slug tidak valid")
        await self._ensure_slug_free(slug)

        values = {field: data.get(field) for field in self.fields if data.get(field) is not None}
        obj = self.model(
            slug=slug,
            kategori_id=data["kategori_id"],
            is_active=bool(data.get("is_active")),
            view_count=0,
            **values,
        )
        await self._apply(obj, data)
        self._mark_published(obj)
        self.session.add(obj)
        await self.session.commit()
        logger.info("Content created", table=self.model.__tablename__, id=str(obj.id), slug=slug)
        return self.to_dict(await self._get(obj.id, fresh=True))

    async def update(self, obj_id: uuid.UUID, data: Dict[str, Any]) -> Dict[str, Any]:
        obj = await self._get(obj_id)
        if data.get("kategori_id") and data["kategori_id"] != obj.kategori_id:
            await self._ensure_kategori(data["kategori_id"])
            obj.kategori_id = data["kategori_id"]

        new_slug = None
        if data.get("slug"):
            new_slug = generate_slug(data["slug"])
        elif data.get("judul_id") and data["judul_id"] != obj.judul_id:
            new_slug = generate_slug(data["judul_id"])
        if new_slug and new_slug != obj.slug:
            await self._ensure_slug_free(new_slug, exclude_id=obj_id)
            obj.slug = new_slug

        for field in self.fields + ("is_active",):
            if field in data and data[field] is not None:
                setattr(obj, field, data[field])
        await self._apply(obj, data)
        self._mark_published(obj)
        await self.session.commit()
        return self.to_dict(await self._get(obj_id, fresh=True))

    async def delete(self, obj_id: uuid.UUID) -> None:
        obj = await self._get(obj_id)
        obj.deleted_at = datetime.utcnow()
        await self.session.commit()
        logger.info("Content deleted", table=self.model.__tablename__, id=str(obj_id))

    async def toggle_status(self, obj_id: uuid.UUID) -> Dict[str, Any]:
        obj = await self._get(obj_id)
        obj.is_active = not obj.is_active
        self._mark_published(obj)
        await self.session.commit()
        return {"id": obj.id, "is_active": obj.is_active, "published_at": obj.published_at}

    async def statistik(self) -> Dict[str, Any]:
        alive = self.model.alive()
        total = (await self.session.execute(select(func.count(self.model.id)).where(alive))).scalar_one()
        published = (await self.session.execute(
            select(func.count(self.model.id)).where(alive, self.model.is_active.is_(True))
        )).scalar_one()
        views = (await self.session.execute(
            select(func.coalesce(func.sum(self.model.view_count), 0)).where(alive)
        )).scalar_one()
        return {
            f"total_{self.stat_prefix}": total,
            "total_published": published,
            "total_draft": total - published,
            "total_views": int(views),
            f"{self.stat_prefix}_populer": await self.popular(),
        }

    # ----- Public -----

    def _public(self):
        return select(self.model).where(self.model.alive(), self.model.is_active.is_(True))

    async def list_public(
        self,
        page: int,
        per_page: int,
        kategori_id: Optional[uuid.UUID] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = self._public()
        if kategori_id:
            query = query.where(self.model.kategori_id == kategori_id)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(or_(*(
                func.lower(getattr(self.model, c)).like(pattern) for c in self.search_columns
            )))
        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()
        result = await self.session.execute(
            query.order_by(self.model.published_at.desc(), self.model.created_at.desc())
            .offset(offset_for(page, per_page))
            .limit(per_page)
        )
        return [self.to_dict(obj) for obj in result.scalars().all()], total

    async def get_public_by_slug(self, slug: str) -> Dict[str, Any]:
        """Public detail; every read counts as a view."""
        result = await self.session.execute(self._public().where(self.model.slug == slug))
        obj = result.scalar_one_or_none()
        if not obj:
            raise NotFoundError(f"{self.label} tidak ditemukan")
        obj.view_count = (obj.view_count or 0) + 1
        await self.session.commit()
        return self.to_dict(obj)

    async def popular(self, limit: int = POPULAR_LIMIT) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            self._public().order_by(self.model.view_count.desc(), self.model.created_at.desc()).limit(limit)
        )
        return [self.to_dict(obj) for obj in result.scalars().all()]

    async def related(self, slug: str, limit: int = RELATED_LIMIT) -> List[Dict[str, Any]]:
        """Other published items of the same category."""
        result = await self.session.execute(self._public().where(self.model.slug == slug))
        obj = result.scalar_one_or_none()
        if not obj:
            raise NotFoundError(f"{self.label} tidak ditemukan")
        result = await self.session.execute(
            self._public()
            .where(self.model.kategori_id == obj.kategori_id, self.model.id != obj.id)
            .order_by(self.model.published_at.desc())
            .limit(limit)
        )
        return [self.to_dict(o) for o in result.scalars().all()]
