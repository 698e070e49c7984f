"""
Tests for order management (panel) and the buyer's own orders.

Tests cover:
- Status machine: allowed steps, rejected jumps, terminal statuses
- Timestamp stamping and status history with the acting admin
- Filters, search, date range and statistics
- Delete only for cancelled orders
- Buyer order isolation
"""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient

from bulky.app.models.auth import Admin, Buyer
from bulky.app.models.pesanan import Pesanan
from bulky.app.models.produk import Produk
from bulky.tests.conftest import buyer_headers, make_buyer, make_pesanan


async def _set_status(client: AsyncClient, headers: dict, pesanan_id, status: str, **extra):
    return await client.patch(
        f"/panel/pesanan/{pesanan_id}/status", json={"order_status": status, **extra}, headers=headers
    )


# ============================================
# STATUS MACHINE
# ============================================

@pytest.mark.asyncio
async def test_full_happy_path(
    client: AsyncClient, staff_headers: dict, staff_admin: Admin, test_buyer: Buyer, test_produk: Produk, test_session
):
    pesanan = await make_pesanan(test_session, test_buyer, [test_produk], order_status="PENDING")

    for status in ("PROCESSING", "READY", "SHIPPED", "COMPLETED"):
        response = await _set_status(client, staff_headers, pesanan.id, status)
        assert response.status_code == 200, response.text
        assert response.json()["data"]["order_status"] == status

    detail = (await client.get(f"/panel/pesanan/{pesanan.id}", headers=staff_headers)).json()["data"]
    assert detail["completed_at"] is not None
    assert detail["processed_at"] is not None
    history = detail["status_history"]
    assert len(history) == 4
    assert {h["status_to"] for h in history} == {"PROCESSING", "READY", "SHIPPED", "COMPLETED"}
    assert all(h["changed_by"]["nama"] == staff_admin.nama for h in history)


@pytest.mark.asyncio
async def test_skipping_a_step_rejected(
    client: AsyncClient, super_headers: dict, test_buyer: Buyer, test_produk: Produk, test_session
):
    pesanan = await make_pesanan(test_session, test_buyer, [test_produk], order_status="PENDING")
    response = await _set_status(client, super_headers, pesanan.id, "SHIPPED")
    assert response.status_code == 400
    assert response.json()["detail"] == "tidak dapat mengubah status dari PENDING ke SHIPPED"


@pytest.mark.asyncio
async def test_terminal_status_is_final(client: AsyncClient, super_headers: dict, completed_pesanan: Pesanan):
    response = await _set_status(client, super_headers, completed_pesanan.id, "CANCELLED")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_status_rejected(client: AsyncClient, super_headers: dict, completed_pesanan: Pesanan):
    response = await _set_status(client, super_headers, completed_pesanan.id, "LOST")
    assert response.status_code == 400
    assert response.json()["detail"] == "status pesanan tidak valid"


@pytest.mark.asyncio
async def test_cancel_stores_reason(
    client: AsyncClient, super_headers: dict, test_buyer: Buyer, test_produk: Produk, test_session
):
    pesanan = await make_pesanan(test_session, test_buyer, [test_produk], order_status="PROCESSING")
    response = await _set_status(
        client, super_headers, pesanan.id, "CANCELLED", note="stok habis", catatan_admin="hubungi buyer"
    )
    assert response.status_code == 200
    assert response.json()["data"]["previous_status"] == "PROCESSING"

    detail = (await client.get(f"/panel/pesanan/{pesanan.id}", headers=super_headers)).json()["data"]
    assert detail["cancelled_reason"] == "stok habis"
    assert detail["catatan_admin"] == "hubungi buyer"
    assert detail["cancelled_at"] is not None


@pytest.mark.asyncio
async def test_buyer_cannot_change_status(client: AsyncClient, buyer_auth: dict, completed_pesanan: Pesanan):
    response = await _set_status(client, buyer_auth, completed_pesanan.id, "CANCELLED")
    assert response.status_code == 403


# ============================================
# DELETE
# ============================================

@pytest.mark.asyncio
async def test_delete_only_cancelled(
    client: AsyncClient, super_headers: dict, test_buyer: Buyer, test_produk: Produk, test_session
):
    aktif = await make_pesanan(test_session, test_buyer, [test_produk], order_status="PENDING")
    batal = await make_pesanan(test_session, test_buyer, [test_produk], order_status="CANCELLED")

    assert (await client.delete(f"/panel/pesanan/{aktif.id}", headers=super_headers)).status_code == 400
    assert (await client.delete(f"/panel/pesanan/{batal.id}", headers=super_headers)).status_code == 200
    assert (await client.get(f"/panel/pesanan/{batal.id}", headers=super_headers)).status_code == 404


# ============================================
# LISTING AND STATISTICS
# ============================================

@pytest.mark.asyncio
async def test_list_search_and_filters(
    client: AsyncClient, super_headers: dict, test_buyer: Buyer, test_produk: Produk, test_session
):
    other = await make_buyer(test_session, username="rina", email="rina@example.com", nama="Rina Wati")
    await make_pesanan(test_session, test_buyer, [test_produk], order_status="PENDING", kode="ORD-AAA")
    await make_pesanan(test_session, other, [test_produk], order_status="COMPLETED", kode="ORD-BBB")
    await make_pesanan(
        test_session, other, [test_produk], order_status="COMPLETED", kode="ORD-OLD",
        created_at=datetime.utcnow() - timedelta(days=60),
    )

    response = await client.get("/panel/pesanan", params={"cari": "rina"}, headers=super_headers)
    assert response.json()["meta"]["total"] == 2

    response = await client.get("/panel/pesanan", params={"order_status": "PENDING"}, headers=super_headers)
    assert [p["kode"] for p in response.json()["data"]] == ["ORD-AAA"]

    dari = (datetime.utcnow() - timedelta(days=7)).date().isoformat()
    response = await client.get(
        "/panel/pesanan",
        params={"tanggal_dari": dari, "sort_by": "kode", "sort_order": "asc"},
        headers=super_headers,
    )
    assert [p["kode"] for p in response.json()["data"]] == ["ORD-AAA", "ORD-BBB"]
    assert response.json()["data"][0]["total_item"] == 1


@pytest.mark.asyncio
async def test_statistik_counts_paid_revenue(
    client: AsyncClient, super_headers: dict, test_buyer: Buyer, test_produk: Produk, test_session
):
    paid = await make_pesanan(test_session, test_buyer, [test_produk])
    paid.payment_status = "PAID"
    await test_session.commit()
    await make_pesanan(test_session, test_buyer, [test_produk], order_status="PENDING")

    response = await client.get("/panel/pesanan/statistik", headers=super_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_pesanan"] == 2
    assert Decimal(str(data["total_revenue"])) == Decimal("90000")
    assert data["per_status"] == {"COMPLETED": 1, "PENDING": 1}
    assert data["per_payment_status"] == {"PAID": 1, "PENDING": 1}


# ============================================
# BUYER ORDERS
# ============================================

@pytest.mark.asyncio
async def test_buyer_sees_only_own_orders(
    client: AsyncClient, buyer_auth: dict, completed_pesanan: Pesanan, test_produk: Produk, test_session
):
    other = await make_buyer(test_session, username="rina", email="rina@example.com")
    foreign = await make_pesanan(test_session, other, [test_produk])

    response = await client.get("/buyer/pesanan", headers=buyer_auth)
    assert [p["id"] for p in response.json()["data"]] == [str(completed_pesanan.id)]

    detail = await client.get(f"/buyer/pesanan/{completed_pesanan.id}", headers=buyer_auth)
    assert detail.status_code == 200
    assert detail.json()["data"]["items"][0]["nama_produk"] == "Kaos Polos"

    response = await client.get(f"/buyer/pesanan/{foreign.id}", headers=buyer_auth)
    assert response.status_code == 404

    response = await client.get(f"/buyer/pesanan/{foreign.id}", headers=buyer_headers(other))
    assert response.status_code == 200
