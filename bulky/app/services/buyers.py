# bulky/app/services/buyers.py
"""
Buyer service - buyer account management for the admin panel.
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.exceptions import NotFoundError, ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.core.responses import offset_for
from bulky.app.core.security import USER_TYPE_ADMIN, hash_password
from bulky.app.models.auth import Buyer
from bulky.app.models.wilayah import AlamatBuyer
from bulky.app.services.activity_log import ACTION_RESET_PASSWORD, log_activity
from bulky.app.services.alamat import alamat_to_dict
from bulky.app.services.auth import buyer_to_dict, ensure_password_strength

logger = get_logger(__name__)


class BuyerServiceError(ServiceError):
    """Base exception for buyer service errors."""


class BuyerNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("buyer tidak ditemukan")


class BuyerService:
    """Service class for buyer management operations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get(self, buyer_id: uuid.UUID) -> Buyer:
        result = await self.session.execute(
            select(Buyer).where(Buyer.id == buyer_id, Buyer.alive())
        )
        buyer = result.scalar_one_or_none()
        if not buyer:
            raise BuyerNotFoundError()
        return buyer

    async def list_buyers(
        self,
        page: int,
        per_page: int,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
        is_verified: Optional[bool] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = select(Buyer).where(Buyer.alive())
        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                Buyer.nama.ilike(pattern),
                Buyer.username.ilike(pattern),
                Buyer.email.ilike(pattern),
                Buyer.telepon.ilike(pattern),
            ))
        if is_active is not None:
            query = query.where(Buyer.is_active.is_(is_active))
        if is_verified is not None:
            query = query.where(Buyer.is_verified.is_(is_verified))

        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()
        result = await self.session.execute(
            query.order_by(Buyer.created_at.desc()).offset(offset_for(page, per_page)).limit(per_page)
        )
        return [buyer_to_dict(b) for b in result.scalars().all()], total

    async def get_buyer_detail(self, buyer_id: uuid.UUID) -> Dict[str, Any]:
        """Buyer profile together with the saved addresses (default first)."""
        buyer = await self._get(buyer_id)
        result = await self.session.execute(
            select(AlamatBuyer)
            .where(AlamatBuyer.buyer_id == buyer_id, AlamatBuyer.alive())
            .order_by(AlamatBuyer.is_default.desc(), AlamatBuyer.created_at)
        )
        data = buyer_to_dict(buyer)
        data["alamat"] = [alamat_to_dict(a) for a in result.scalars().all()]
        return data

    async def delete_buyer(self, buyer_id: uuid.UUID) -> None:
        buyer = await self._get(buyer_id)
        buyer.deleted_at = datetime.utcnow()
        buyer.is_active = False
        await self.session.commit()
        logger.info("Buyer deleted", buyer_id=str(buyer_id))

    async def reset_password(self, buyer_id: uuid.UUID, new_password: str, actor_id: uuid.UUID) -> None:
        buyer = await self._get(buyer_id)
        ensure_password_strength(new_password)
        buyer.password = hash_password(new_password)
        await log_activity(
            self.session, USER_TYPE_ADMIN, ACTION_RESET_PASSWORD, "buyer",
            deskripsi=f"reset password buyer {buyer.email}", user_id=actor_id,
        )
        await self.session.commit()

    async def get_statistik(self, now: Optional[datetime] = None) -> Dict[str, int]:
        now = now or datetime.utcnow()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        async def count(*conditions) -> int:
            result = await self.session.execute(
                select(func.count(Buyer.id)).where(Buyer.alive(), *conditions)
            )
            return result.scalar_one()

        return {
            "total_buyer": await count(),
            "total_active": await count(Buyer.is_active.is_(True)),
            "total_verified": await count(Buyer.is_verified.is_(True)),
            "new_this_month": await count(Buyer.created_at >= month_start),
        }
