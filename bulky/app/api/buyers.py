"""Panel: buyer accounts."""
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.api.deps import (
    CurrentUser,
    Pagination,
    get_pagination,
    get_session,
    raise_service_error,
    require_permission,
)
from bulky.app.core.exceptions import ServiceError
from bulky.app.core.responses import paginated_response, success_response
from bulky.app.schemas import ResetPasswordRequest
from bulky.app.services.buyers import BuyerService

router = APIRouter()


@router.get("", dependencies=[Depends(require_permission("buyer:read"))])
async def list_buyers(
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    is_verified: Optional[bool] = Query(None),
    pagination: Pagination = Depends(get_pagination),
    session: AsyncSession = Depends(get_session),
):
    items, total = await BuyerService(session).list_buyers(
        pagination.page,
        pagination.per_page,
        search=search,
        is_active=is_active,
        is_verified=is_verified,
    )
    return paginated_response("data buyer", items, pagination.page, pagination.per_page, total)


@router.get("/statistik", dependencies=[Depends(require_permission("buyer:read"))])
async def buyer_statistik(session: AsyncSession = Depends(get_session)):
    return success_response("statistik buyer", await BuyerService(session).get_statistik())


@router.get("/{buyer_id}", dependencies=[Depends(require_permission("buyer:read"))])
async def get_buyer(buyer_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        data = await BuyerService(session).get_buyer_detail(buyer_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("detail buyer", data)


@router.delete("/{buyer_id}", dependencies=[Depends(require_permission("buyer:delete"))])
async def delete_buyer(buyer_id: uuid.UUID, session: AsyncSession = Depends(get_session)):
    try:
        await BuyerService(session).delete_buyer(buyer_id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("buyer berhasil dihapus")


@router.put("/{buyer_id}/reset-password")
async def reset_buyer_password(
    buyer_id: uuid.UUID,
    data: ResetPasswordRequest,
    current: CurrentUser = Depends(require_permission("buyer:update")),
    session: AsyncSession = Depends(get_session),
):
    try:
        await BuyerService(session).reset_password(buyer_id, data.new_password, actor_id=current.id)
    except ServiceError as e:
        raise_service_error(e)
    return success_response("password buyer berhasil direset")
