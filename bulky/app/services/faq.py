# bulky/app/services/faq.py
"""
The FAQ is a single document holding an ordered JSON list of
question/answer pairs in both languages.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.exceptions import NotFoundError, ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.models.content import Faq
from bulky.app.services.reorder import DIRECTION_DOWN, DIRECTION_UP

logger = get_logger(__name__)

DEFAULT_JUDUL = "Pertanyaan yang Sering Diajukan"
DEFAULT_JUDUL_EN = "Frequently Asked Questions"
ITEM_KEYS = ("question", "question_en", "answer", "answer_en")


class FaqServiceError(ServiceError):
    """Base exception for FAQ errors."""


def faq_to_dict(faq: Faq) -> Dict[str, Any]:
    return {
        "id": faq.id,
        "judul": faq.judul,
        "judul_en": faq.judul_en,
        "is_active": faq.is_active,
        "items": list(faq.items or []),
        "updated_at": faq.updated_at,
    }


class FaqService:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _find(self) -> Optional[Faq]:
        result = await self.session.execute(select(Faq).order_by(Faq.created_at).limit(1))
        return result.scalar_one_or_none()

    async def _get_or_create(self) -> Faq:
        faq = await self._find()
        if faq is None:
            faq = Faq(judul=DEFAULT_JUDUL, judul_en=DEFAULT_JUDUL_EN, is_active=True, items=[])
            self.session.add(faq)
            await self.session.flush()
        return faq

    async def get(self) -> Dict[str, Any]:
        faq = await self._get_or_create()
        await self.session.commit()
        return faq_to_dict(faq)

    async def get_public(self) -> Dict[str, Any]:
        faq = await self._find()
        if faq is None or not faq.is_active:
            raise NotFoundError("FAQ tidak ditemukan")
        return faq_to_dict(faq)

    async def update(
        self,
        judul: str,
        judul_en: str,
        items: List[Dict[str, Any]],
        is_active: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """Replace the whole document; items keep the order they are sent in."""
        faq = await self._get_or_create()
        faq.judul = judul
        faq.judul_en = judul_en
        # A new list object so the JSON column is flagged as changed
        faq.items = [{key: item.get(key) or "" for key in ITEM_KEYS} for item in items]
        if is_active is not None:
            faq.is_active = is_active
        await self.session.commit()
        logger.info("FAQ updated", items=len(faq.items))
        return faq_to_dict(faq)

    async def reorder_item(self, index: int, direction: str) -> Dict[str, Any]:
        if direction not in (DIRECTION_UP, DIRECTION_DOWN):
            raise FaqServiceError("direction harus 'up' atau 'down'")
        faq = await self._get_or_create()
        items = list(faq.items or [])
        if index < 0 or index >= len(items):
            raise NotFoundError(f"FAQ item dengan index {index} tidak ditemukan")
        if direction == DIRECTION_UP and index == 0:
            raise FaqServiceError("item sudah berada di posisi paling atas")
        if direction == DIRECTION_DOWN and index == len(items) - 1:
            raise FaqServiceError("item sudah berada di posisi paling bawah")

        target = index - 1 if direction == DIRECTION_UP else index + 1
        items[index], items[target] = items[target], items[index]
        faq.items = items
        await self.session.commit()
        return faq_to_dict(faq)
