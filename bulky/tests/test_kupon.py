"""
Tests for coupon management.

Tests cover:
- Create validation (kode normalisation, past expiry, category rules)
- Derived usage flags (usage_count, is_limit_reached, remaining_usage, is_expired)
- Usage history with buyer and order details
- Code generation, filters, soft delete
"""
from datetime import date, timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient

from bulky.app.models.auth import Buyer
from bulky.app.models.kupon import Kupon, KuponUsage
from bulky.app.models.pesanan import Pesanan


def _payload(catalog: dict, **overrides) -> dict:
    payload = {
        "kode": "  promo25 ",
        "nama": "Promo 25rb",
        "jenis_diskon": "jumlah_tetap",
        "nilai_diskon": "25000",
        "minimal_pembelian": "100000",
        "tanggal_kedaluarsa": (date.today() + timedelta(days=7)).isoformat(),
        "kategori_ids": [str(catalog["kategori"].id)],
    }
    payload.update(overrides)
    return payload


async def _use(test_session, kupon: Kupon, buyer: Buyer, pesanan: Pesanan, amount: str = "10000") -> None:
    test_session.add(KuponUsage(
        kupon_id=kupon.id,
        buyer_id=buyer.id,
        pesanan_id=pesanan.id,
        kode_kupon=kupon.kode,
        nilai_potongan=Decimal(amount),
    ))
    await test_session.commit()


# ============================================
# CREATE
# ============================================

@pytest.mark.asyncio
async def test_create_kupon_normalises_kode(client: AsyncClient, super_headers: dict, catalog: dict):
    response = await client.post("/panel/kupon", json=_payload(catalog), headers=super_headers)
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["kode"] == "PROMO25"
    assert data["usage_count"] == 0
    assert data["remaining_usage"] is None
    assert data["is_expired"] is False
    assert data["kategori"][0]["nama"] == "Fashion"


@pytest.mark.asyncio
async def test_duplicate_kode(client: AsyncClient, super_headers: dict, catalog: dict, test_kupon: Kupon):
    response = await client.post("/panel/kupon", json=_payload(catalog, kode="hemat10"), headers=super_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_past_expiry_rejected(client: AsyncClient, super_headers: dict, catalog: dict):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    response = await client.post(
        "/panel/kupon", json=_payload(catalog, tanggal_kedaluarsa=yesterday), headers=super_headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_percentage_over_100_rejected(client: AsyncClient, super_headers: dict, catalog: dict):
    response = await client.post(
        "/panel/kupon", json=_payload(catalog, jenis_diskon="persentase", nilai_diskon="150"), headers=super_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_category_rules(client: AsyncClient, super_headers: dict, catalog: dict):
    response = await client.post("/panel/kupon", json=_payload(catalog, kategori_ids=[]), headers=super_headers)
    assert response.status_code == 400

    response = await client.post(
        "/panel/kupon", json=_payload(catalog, is_all_kategori=True), headers=super_headers
    )
    assert response.status_code == 400

    response = await client.post(
        "/panel/kupon", json=_payload(catalog, is_all_kategori=True, kategori_ids=[]), headers=super_headers
    )
    assert response.status_code == 201
    assert response.json()["data"]["kategori"] == []


# ============================================
# USAGE
# ============================================

@pytest.mark.asyncio
async def test_usage_flags(
    client: AsyncClient,
    super_headers: dict,
    test_kupon: Kupon,
    test_buyer: Buyer,
    completed_pesanan: Pesanan,
    test_session,
):
    await _use(test_session, test_kupon, test_buyer, completed_pesanan)

    data = (await client.get(f"/panel/kupon/{test_kupon.id}", headers=super_headers)).json()["data"]
    assert data["usage_count"] == 1
    assert data["remaining_usage"] == 1
    assert data["is_limit_reached"] is False

    await _use(test_session, test_kupon, test_buyer, completed_pesanan)
    data = (await client.get(f"/panel/kupon/{test_kupon.id}", headers=super_headers)).json()["data"]
    assert data["remaining_usage"] == 0
    assert data["is_limit_reached"] is True

    test_kupon.limit_pemakaian = 1
    await test_session.commit()
    data = (await client.get(f"/panel/kupon/{test_kupon.id}", headers=super_headers)).json()["data"]
    assert data["remaining_usage"] == -1
    assert data["is_limit_reached"] is True


@pytest.mark.asyncio
async def test_usage_history(
    client: AsyncClient,
    super_headers: dict,
    test_kupon: Kupon,
    test_buyer: Buyer,
    completed_pesanan: Pesanan,
    test_session,
):
    await _use(test_session, test_kupon, test_buyer, completed_pesanan, amount="9000")

    response = await client.get(f"/panel/kupon/{test_kupon.id}/usage", headers=super_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["data"]["kupon"]["total_usage"] == 1
    item = body["data"]["items"][0]
    assert item["buyer"]["email"] == test_buyer.email
    assert item["pesanan"]["kode"] == completed_pesanan.kode
    assert body["meta"]["total"] == 1


# ============================================
# LISTING, CODES, DELETE
# ============================================

@pytest.mark.asyncio
async def test_list_expired_filter(client: AsyncClient, super_headers: dict, test_kupon: Kupon, test_session):
    test_session.add(Kupon(
        kode="LAMA",
        nama="Kupon lama",
        jenis_diskon="jumlah_tetap",
        nilai_diskon=Decimal("5000"),
        tanggal_kedaluarsa=date.today() - timedelta(days=3),
        is_all_kategori=True,
    ))
    await test_session.commit()

    response = await client.get("/panel/kupon", params={"is_expired": True}, headers=super_headers)
    data = response.json()["data"]
    assert [k["kode"] for k in data] == ["LAMA"]
    assert data[0]["is_expired"] is True

    response = await client.get("/panel/kupon", params={"is_expired": False}, headers=super_headers)
    assert [k["kode"] for k in response.json()["data"]] == ["HEMAT10"]


@pytest.mark.asyncio
async def test_generate_kode(client: AsyncClient, super_headers: dict, test_session):
    response = await client.post("/panel/kupon/generate-kode", json={"prefix": "bulk", "length": 6}, headers=super_headers)
    assert response.status_code == 200
    kode = response.json()["data"]["kode"]
    assert kode.startswith("BULK")
    assert len(kode) == 10

    response = await client.post("/panel/kupon/generate-kode", json={"length": 2}, headers=super_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_kupon_switches_to_all_categories(
    client: AsyncClient, super_headers: dict, test_kupon: Kupon
):
    response = await client.put(
        f"/panel/kupon/{test_kupon.id}",
        json={"is_all_kategori": True, "kategori_ids": []},
        headers=super_headers,
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["is_all_kategori"] is True
    assert data["kategori"] == []


@pytest.mark.asyncio
async def test_delete_kupon_frees_kode(client: AsyncClient, super_headers: dict, catalog: dict, test_kupon: Kupon):
    response = await client.delete(f"/panel/kupon/{test_kupon.id}", headers=super_headers)
    assert response.status_code == 200
    response = await client.post("/panel/kupon", json=_payload(catalog, kode="HEMAT10"), headers=super_headers)
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_kategori_dropdown(client: AsyncClient, staff_headers: dict, catalog: dict):
    response = await client.get("/panel/kupon/kategori-dropdown", headers=staff_headers)
    assert response.status_code == 200
    assert [k["nama"] for k in response.json()["data"]] == ["Fashion"]
