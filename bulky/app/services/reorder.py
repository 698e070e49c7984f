# bulky/app/services/reorder.py
"""
Ordinal (urutan) maintenance shared by every ordered table.

Moving an item up or down swaps its urutan with the adjacent row of the
same scope (e.g. images of one product), so values stay unique and dense.
"""
import uuid
from typing import Any, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.exceptions import NotFoundError, ServiceError
from bulky.app.core.logging import get_logger

logger = get_logger(__name__)

DIRECTION_UP = "up"
DIRECTION_DOWN = "down"

# (column name, value) restricting the rows that take part in the ordering
Scope = Optional[tuple[str, Any]]


class ReorderError(ServiceError):
    pass


def _conditions(model, scope: Scope) -> list:
    conds = []
    if hasattr(model, "deleted_at"):
        conds.append(model.deleted_at.is_(None))
    if scope is not None:
        column, value = scope
        conds.append(getattr(model, column) == value)
    return conds


class ReorderService:
    """Swap-based reordering executed inside the caller's session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def reorder(
        self,
        model,
        item_id: uuid.UUID,
        direction: str,
        scope: Scope = None,
        commit: bool = True,
    ) -> dict[str, Any]:
        """
        Move one item a single step up or down.

        Returns:
            {"item_id", "item_urutan", "swapped_id", "swapped_urutan"} with the new values
        """
        if direction not in (DIRECTION_UP, DIRECTION_DOWN):
            raise ReorderError("direction harus 'up' atau 'down'")

        conds = _conditions(model, scope)
        item = (await self.session.execute(
            select(model).where(model.id == item_id, *conds)
        )).scalar_one_or_none()
        if item is None:
            raise NotFoundError("data tidak ditemukan")

        current = item.urutan
        if direction == DIRECTION_UP:
            neighbour_q = select(model).where(model.urutan < current, *conds).order_by(model.urutan.desc())
        else:
            neighbour_q = select(model).where(model.urutan > current, *conds).order_by(model.urutan.asc())
        neighbour = (await self.session.execute(neighbour_q.limit(1))).scalar_one_or_none()
        if neighbour is None:
            edge = "atas" if direction == DIRECTION_UP else "bawah"
            raise ReorderError(f"item sudah berada di urutan paling {edge}")

        item.urutan, neighbour.urutan = neighbour.urutan, current
        if commit:
            await self.session.commit()
        else:
            await self.session.flush()

        logger.info(
            "Item reordered",
            table=model.__tablename__,
            item_id=str(item.id),
            direction=direction,
        )
        return {
            "item_id": item.id,
            "item_urutan": item.urutan,
            "swapped_id": neighbour.id,
            "swapped_urutan": neighbour.urutan,
        }

    async def next_urutan(self, model, scope: Scope = None) -> int:
        """Ordinal for a new row: one past the current maximum (1 for an empty scope)."""
        result = await self.session.execute(
            select(func.max(model.urutan)).where(*_conditions(model, scope))
        )
        current_max = result.scalar()
        return (current_max or 0) + 1

    async def compact_after_delete(self, model, deleted_urutan: int, scope: Scope = None) -> None:
        """Close the gap left by a removed row. Caller commits."""
        await self.session.execute(
            update(model)
            .where(model.urutan > deleted_urutan, *_conditions(model, scope))
            .values(urutan=model.urutan - 1)
            .execution_options(synchronize_session="fetch")
        )

    async def bulk_reorder(self, model, items: list[dict[str, Any]]) -> int:
        """
        Assign explicit ordinals: items = [{"id": uuid, "urutan": int >= 0}, ...].
        All ids must exist, otherwise nothing is written.
        """
        ids = [entry["id"] for entry in items]
        result = await self.session.execute(
            select(model).where(model.id.in_(ids), *_conditions(model, None))
        )
        rows = {row.id: row for row in result.scalars().all()}
        if len(rows) != len(set(ids)):
            raise NotFoundError("satu atau lebih data tidak ditemukan")

        for entry in items:
            rows[entry["id"]].urutan = entry["urutan"]
        await self.session.commit()
        logger.info("Bulk reorder applied", table=model.__tablename__, count=len(items))
        return len(items)
