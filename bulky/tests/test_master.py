"""
Tests for catalog master data (panel + public) and urutan maintenance.

Tests cover:
- Slug generation and live-row slug uniqueness
- Soft delete and slug reuse
- Active-only public views and the dropdown
- Ordered kinds: next urutan, up/down swap, edges, compaction, bulk reorder
"""
import uuid

import pytest
from httpx import AsyncClient

from bulky.app.models.catalog import KondisiProduk


async def _create(client: AsyncClient, headers: dict, kind: str, **payload) -> dict:
    response = await client.post(f"/panel/master/{kind}", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def _urutan_by_nama(client: AsyncClient, headers: dict, kind: str) -> dict:
    response = await client.get(f"/panel/master/{kind}", headers=headers)
    return {item["nama"]: item["urutan"] for item in response.json()["data"]}


# ============================================
# CRUD AND SLUGS
# ============================================

@pytest.mark.asyncio
async def test_create_generates_slug(client: AsyncClient, super_headers: dict):
    data = await _create(client, super_headers, "kategori-produk", nama="Elektronik & Gadget!", icon_url="/i.png")
    assert data["slug"] == "elektronik-gadget"
    assert data["icon_url"] == "/i.png"
    assert data["is_active"] is True


@pytest.mark.asyncio
async def test_duplicate_slug_conflicts(client: AsyncClient, super_headers: dict):
    await _create(client, super_headers, "merek-produk", nama="Samsung")
    response = await client.post("/panel/master/merek-produk", json={"nama": "SAMSUNG"}, headers=super_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_slug_reusable_after_soft_delete(client: AsyncClient, super_headers: dict):
    merek = await _create(client, super_headers, "merek-produk", nama="Samsung")
    response = await client.delete(f"/panel/master/merek-produk/{merek['id']}", headers=super_headers)
    assert response.status_code == 200

    response = await client.get(f"/panel/master/merek-produk/{merek['id']}", headers=super_headers)
    assert response.status_code == 404
    again = await _create(client, super_headers, "merek-produk", nama="Samsung")
    assert again["slug"] == "samsung"


@pytest.mark.asyncio
async def test_rename_follows_slug(client: AsyncClient, super_headers: dict):
    gudang = await _create(client, super_headers, "warehouse", nama="Gudang Lama", kota="Bekasi")
    response = await client.put(
        f"/panel/master/warehouse/{gudang['id']}", json={"nama": "Gudang Baru"}, headers=super_headers
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["slug"] == "gudang-baru"
    assert data["kota"] == "Bekasi"


@pytest.mark.asyncio
async def test_find_by_slug(client: AsyncClient, super_headers: dict):
    await _create(client, super_headers, "sumber-produk", nama="Retur Marketplace")
    response = await client.get("/panel/master/sumber-produk/slug/retur-marketplace", headers=super_headers)
    assert response.status_code == 200
    assert response.json()["data"]["nama"] == "Retur Marketplace"


@pytest.mark.asyncio
async def test_unknown_kind(client: AsyncClient, super_headers: dict):
    response = await client.get("/panel/master/planet", headers=super_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_staff_reads_but_cannot_create(client: AsyncClient, staff_headers: dict):
    assert (await client.get("/panel/master/warehouse", headers=staff_headers)).status_code == 200
    response = await client.post("/panel/master/warehouse", json={"nama": "X"}, headers=staff_headers)
    assert response.status_code == 403


# ============================================
# ACTIVE-ONLY VIEWS
# ============================================

@pytest.mark.asyncio
async def test_inactive_hidden_from_public_and_dropdown(client: AsyncClient, super_headers: dict):
    aktif = await _create(client, super_headers, "kategori-produk", nama="Fashion")
    nonaktif = await _create(client, super_headers, "kategori-produk", nama="Mainan")
    toggled = await client.patch(
        f"/panel/master/kategori-produk/{nonaktif['id']}/toggle-status", headers=super_headers
    )
    assert toggled.json()["data"]["is_active"] is False

    public = (await client.get("/public/master/kategori-produk")).json()["data"]
    assert [k["nama"] for k in public] == ["Fashion"]

    dropdown = (await client.get("/panel/master/kategori-produk/dropdown", headers=super_headers)).json()["data"]
    assert [k["id"] for k in dropdown] == [aktif["id"]]

    response = await client.get(f"/public/master/kategori-produk/{nonaktif['id']}")
    assert response.status_code == 404
    response = await client.get("/public/master/kategori-produk/slug/mainan")
    assert response.status_code == 404

    panel = await client.get("/panel/master/kategori-produk", params={"is_active": False}, headers=super_headers)
    assert panel.json()["meta"]["total"] == 1


# ============================================
# URUTAN
# ============================================

@pytest.mark.asyncio
async def test_new_rows_append_to_order(client: AsyncClient, super_headers: dict):
    for nama in ("Baru", "Bekas", "Rusak"):
        await _create(client, super_headers, "kondisi-produk", nama=nama)
    assert await _urutan_by_nama(client, super_headers, "kondisi-produk") == {"Baru": 1, "Bekas": 2, "Rusak": 3}


@pytest.mark.asyncio
async def test_move_up_swaps_with_neighbour(client: AsyncClient, super_headers: dict):
    await _create(client, super_headers, "kondisi-paket", nama="Segel")
    kedua = await _create(client, super_headers, "kondisi-paket", nama="Terbuka")

    response = await client.patch(
        f"/panel/master/kondisi-paket/{kedua['id']}/reorder", json={"direction": "up"}, headers=super_headers
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["item_urutan"] == 1
    assert data["swapped_urutan"] == 2
    assert await _urutan_by_nama(client, super_headers, "kondisi-paket") == {"Terbuka": 1, "Segel": 2}


@pytest.mark.asyncio
async def test_move_past_edge_rejected(client: AsyncClient, super_headers: dict):
    pertama = await _create(client, super_headers, "kondisi-paket", nama="Segel")
    await _create(client, super_headers, "kondisi-paket", nama="Terbuka")

    response = await client.patch(
        f"/panel/master/kondisi-paket/{pertama['id']}/reorder", json={"direction": "up"}, headers=super_headers
    )
    assert response.status_code == 400
    assert "paling atas" in response.json()["detail"]


@pytest.mark.asyncio
async def test_invalid_direction(client: AsyncClient, super_headers: dict):
    item = await _create(client, super_headers, "kondisi-paket", nama="Segel")
    response = await client.patch(
        f"/panel/master/kondisi-paket/{item['id']}/reorder", json={"direction": "left"}, headers=super_headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_compacts_order(client: AsyncClient, super_headers: dict):
    await _create(client, super_headers, "kondisi-produk", nama="Baru")
    tengah = await _create(client, super_headers, "kondisi-produk", nama="Bekas")
    await _create(client, super_headers, "kondisi-produk", nama="Rusak")

    await client.delete(f"/panel/master/kondisi-produk/{tengah['id']}", headers=super_headers)
    assert await _urutan_by_nama(client, super_headers, "kondisi-produk") == {"Baru": 1, "Rusak": 2}

    baru = await _create(client, super_headers, "kondisi-produk", nama="Refurbished")
    assert baru["urutan"] == 3


@pytest.mark.asyncio
async def test_bulk_reorder(client: AsyncClient, super_headers: dict):
    a = await _create(client, super_headers, "kondisi-produk", nama="Baru")
    b = await _create(client, super_headers, "kondisi-produk", nama="Bekas")

    response = await client.put("/panel/master/kondisi-produk/reorder", json={"items": [
        {"id": a["id"], "urutan": 2},
        {"id": b["id"], "urutan": 1},
    ]}, headers=super_headers)
    assert response.status_code == 200
    assert await _urutan_by_nama(client, super_headers, "kondisi-produk") == {"Bekas": 1, "Baru": 2}


@pytest.mark.asyncio
async def test_bulk_reorder_unknown_id_writes_nothing(client: AsyncClient, super_headers: dict, test_session):
    a = await _create(client, super_headers, "kondisi-produk", nama="Baru")
    response = await client.put("/panel/master/kondisi-produk/reorder", json={"items": [
        {"id": a["id"], "urutan": 5},
        {"id": "00000000-0000-0000-0000-000000000000", "urutan": 1},
    ]}, headers=super_headers)
    assert response.status_code == 404

    row = await test_session.get(KondisiProduk, uuid.UUID(a["id"]))
    assert row.urutan == 1


@pytest.mark.asyncio
async def test_tipe_produk_is_ordered(client: AsyncClient, super_headers: dict):
    await _create(client, super_headers, "tipe-produk", nama="Pallet")
    retail = await _create(client, super_headers, "tipe-produk", nama="Retail")
    assert retail["urutan"] == 2

    response = await client.patch(
        f"/panel/master/tipe-produk/{retail['id']}/reorder", json={"direction": "up"}, headers=super_headers
    )
    assert response.status_code == 200

    public = (await client.get("/public/master/tipe-produk")).json()["data"]
    assert [(t["nama"], t["urutan"]) for t in public] == [("Retail", 1), ("Pallet", 2)]


@pytest.mark.asyncio
async def test_reorder_not_supported_for_unordered_kind(client: AsyncClient, super_headers: dict):
    merek = await _create(client, super_headers, "merek-produk", nama="Sony")
    response = await client.patch(
        f"/panel/master/merek-produk/{merek['id']}/reorder", json={"direction": "down"}, headers=super_headers
    )
    assert response.status_code == 400
