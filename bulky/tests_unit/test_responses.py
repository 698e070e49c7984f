"""Tests for the response envelope and pagination metadata (core.responses)."""
from bulky.app.core.responses import PaginationMeta, offset_for, paginated_response, success_response


def test_meta_middle_page():
    meta = PaginationMeta.build(page=2, per_page=10, total=25).to_dict()
    assert meta == {
        "first_page": 1,
        "last_page": 3,
        "current_page": 2,
        "from": 11,
        "last": 20,
        "total": 25,
        "per_page": 10,
    }


def test_meta_last_page_is_partial():
    meta = PaginationMeta.build(page=3, per_page=10, total=25).to_dict()
    assert (meta["from"], meta["last"]) == (21, 25)


def test_meta_empty_result():
    meta = PaginationMeta.build(page=1, per_page=10, total=0).to_dict()
    assert meta["last_page"] == 1
    assert (meta["from"], meta["last"]) == (0, 0)


def test_success_response_without_meta():
    assert success_response("ok", {"a": 1}) == {"success": True, "message": "ok", "data": {"a": 1}}


def test_paginated_response_carries_meta():
    body = paginated_response("data", [1, 2], page=1, per_page=2, total=5)
    assert body["data"] == [1, 2]
    assert body["meta"]["last_page"] == 3


def test_offset_for():
    assert offset_for(1, 20) == 0
    assert offset_for(3, 20) == 40
