"""
Response envelope and pagination metadata shared by all routers.

Every successful response is ``{"success": true, "message": ..., "data": ...}``
with an optional ``meta`` block for paginated lists.
"""
import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class PaginationMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_page: int = 1
    last_page: int
    current_page: int
    from_: int = Field(alias="from")
    last: int
    total: int
    per_page: int

    @classmethod
    def build(cls, page: int, per_page: int, total: int) -> "PaginationMeta":
        last_page = max(1, math.ceil(total / per_page)) if per_page else 1
        if total > 0:
            start = (page - 1) * per_page + 1
            end = min(start + per_page - 1, total)
        else:
            start = end = 0
        return cls(
            last_page=last_page,
            current_page=page,
            from_=start,
            last=end,
            total=total,
            per_page=per_page,
        )

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


def success_response(message: str, data: Any = None, meta: Optional[PaginationMeta] = None) -> dict:
    body = {"success": True, "message": message, "data": data}
    if meta is not None:
        body["meta"] = meta.to_dict()
    return body


def paginated_response(message: str, items: list, page: int, per_page: int, total: int) -> dict:
    return success_response(message, items, PaginationMeta.build(page, per_page, total))


def offset_for(page: int, per_page: int) -> int:
    return (page - 1) * per_page
