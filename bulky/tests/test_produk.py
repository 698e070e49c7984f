"""
Tests for the product catalog (panel + public storefront).

Tests cover:
- Create with derived discounted price and unique slug suffixing
- Reference validation (tipe produk required) and id_cargo uniqueness
- Partial update recomputing the price
- Listing filters and sorting, public active-only views
- Soft delete freeing the slug, stock update
- Product images: WebP conversion, primary promotion, reorder within one product
"""
import io

import pytest
from httpx import AsyncClient
from PIL import Image

from bulky.app.models.catalog import TipeProduk
from bulky.app.models.produk import Produk
from bulky.tests.conftest import make_produk


def _payload(catalog: dict, **overrides) -> dict:
    payload = {
        "nama": "Sepatu Lari",
        "kategori_id": str(catalog["kategori"].id),
        "tipe_produk_id": str(catalog["tipe_produk"].id),
        "merek_ids": [str(catalog["merek"].id)],
        "kondisi_id": str(catalog["kondisi"].id),
        "kondisi_paket_id": str(catalog["kondisi_paket"].id),
        "warehouse_id": str(catalog["warehouse"].id),
        "harga_sebelum_diskon": "250000",
        "persentase_diskon": "12.5",
        "quantity": 4,
    }
    payload.update(overrides)
    return payload


def _png_bytes(size=(40, 20), color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, "PNG")
    return buf.getvalue()


async def _upload(client: AsyncClient, headers: dict, produk_id) -> dict:
    response = await client.post(
        f"/panel/produk/{produk_id}/gambar",
        files={"file": ("foto.png", _png_bytes(), "image/png")},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


# ============================================
# CREATE AND PRICING
# ============================================

@pytest.mark.asyncio
async def test_create_produk_derives_discounted_price(client: AsyncClient, super_headers: dict, catalog: dict):
    response = await client.post("/panel/produk", json=_payload(catalog), headers=super_headers)
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["slug"] == "sepatu-lari"
    assert float(data["harga_sesudah_diskon"]) == 218750.0
    assert data["merek"][0]["nama"] == "Uniqlo"
    assert data["tipe_produk"]["nama"] == "Pallet"
    assert data["warehouse"]["kota"] == "Bekasi"
    assert data["gambar"] == []
    assert data["gambar_utama"] is None


@pytest.mark.asyncio
async def test_explicit_discounted_price_kept(client: AsyncClient, super_headers: dict, catalog: dict):
    response = await client.post(
        "/panel/produk", json=_payload(catalog, harga_sesudah_diskon="199999"), headers=super_headers
    )
    assert float(response.json()["data"]["harga_sesudah_diskon"]) == 199999.0


@pytest.mark.asyncio
async def test_same_name_gets_suffixed_slug(client: AsyncClient, super_headers: dict, catalog: dict):
    first = await client.post("/panel/produk", json=_payload(catalog), headers=super_headers)
    second = await client.post("/panel/produk", json=_payload(catalog), headers=super_headers)
    assert first.json()["data"]["slug"] == "sepatu-lari"
    assert second.json()["data"]["slug"] == "sepatu-lari-2"


@pytest.mark.asyncio
async def test_unknown_reference_rejected(client: AsyncClient, super_headers: dict, catalog: dict):
    response = await client.post(
        "/panel/produk",
        json=_payload(catalog, warehouse_id="00000000-0000-0000-0000-000000000000"),
        headers=super_headers,
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "warehouse tidak ditemukan"


@pytest.mark.asyncio
async def test_tipe_produk_required(client: AsyncClient, super_headers: dict, catalog: dict):
    payload = _payload(catalog)
    del payload["tipe_produk_id"]
    response = await client.post("/panel/produk", json=payload, headers=super_headers)
    assert response.status_code == 422

    response = await client.post(
        "/panel/produk",
        json=_payload(catalog, tipe_produk_id="00000000-0000-0000-0000-000000000000"),
        headers=super_headers,
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "tipe produk tidak ditemukan"


@pytest.mark.asyncio
async def test_duplicate_id_cargo(client: AsyncClient, super_headers: dict, catalog: dict):
    await client.post("/panel/produk", json=_payload(catalog, id_cargo="CRG-1"), headers=super_headers)
    response = await client.post(
        "/panel/produk", json=_payload(catalog, nama="Lain", id_cargo="CRG-1"), headers=super_headers
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_discount_over_100_rejected(client: AsyncClient, super_headers: dict, catalog: dict):
    response = await client.post("/panel/produk", json=_payload(catalog, persentase_diskon="101"), headers=super_headers)
    assert response.status_code == 422


# ============================================
# UPDATE, DELETE, STOCK
# ============================================

@pytest.mark.asyncio
async def test_update_recomputes_price(client: AsyncClient, super_headers: dict, test_produk: Produk):
    response = await client.put(
        f"/panel/produk/{test_produk.id}", json={"persentase_diskon": "50"}, headers=super_headers
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert float(data["harga_sesudah_diskon"]) == 50000.0
    assert data["nama"] == "Kaos Polos"


@pytest.mark.asyncio
async def test_rename_changes_slug(client: AsyncClient, super_headers: dict, test_produk: Produk):
    response = await client.put(
        f"/panel/produk/{test_produk.id}", json={"nama": "Kaos Oversize"}, headers=super_headers
    )
    assert response.json()["data"]["slug"] == "kaos-oversize"


@pytest.mark.asyncio
async def test_delete_frees_slug(client: AsyncClient, super_headers: dict, catalog: dict, test_produk: Produk):
    response = await client.delete(f"/panel/produk/{test_produk.id}", headers=super_headers)
    assert response.status_code == 200

    response = await client.get(f"/panel/produk/{test_produk.id}", headers=super_headers)
    assert response.status_code == 404
    created = await client.post("/panel/produk", json=_payload(catalog, nama="Kaos Polos"), headers=super_headers)
    assert created.json()["data"]["slug"] == "kaos-polos"


@pytest.mark.asyncio
async def test_update_stock(client: AsyncClient, super_headers: dict, test_produk: Produk):
    response = await client.patch(f"/panel/produk/{test_produk.id}/stock", json={"quantity": 0}, headers=super_headers)
    assert response.status_code == 200
    assert response.json()["data"]["quantity"] == 0

    response = await client.patch(f"/panel/produk/{test_produk.id}/stock", json={"quantity": -1}, headers=super_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_staff_cannot_update_produk(client: AsyncClient, staff_headers: dict, test_produk: Produk):
    response = await client.patch(f"/panel/produk/{test_produk.id}/toggle-status", headers=staff_headers)
    assert response.status_code == 403


# ============================================
# LISTING
# ============================================

@pytest.mark.asyncio
async def test_list_filters_and_sort(client: AsyncClient, super_headers: dict, catalog: dict, test_session):
    await make_produk(test_session, catalog, nama="Murah", diskon=0, harga=10000)
    await make_produk(test_session, catalog, nama="Mahal", diskon=0, harga=900000)
    await make_produk(test_session, catalog, nama="Sedang", diskon=0, harga=50000, is_active=False)

    response = await client.get(
        "/panel/produk",
        params={"sort_by": "harga_sesudah_diskon", "sort_order": "asc"},
        headers=super_headers,
    )
    assert [p["nama"] for p in response.json()["data"]] == ["Murah", "Sedang", "Mahal"]

    response = await client.get(
        "/panel/produk", params={"harga_min": 20000, "harga_max": 100000}, headers=super_headers
    )
    assert [p["nama"] for p in response.json()["data"]] == ["Sedang"]

    response = await client.get(
        "/panel/produk", params={"merek_id": str(catalog["merek"].id), "search": "mah"}, headers=super_headers
    )
    assert response.json()["meta"]["total"] == 1


@pytest.mark.asyncio
async def test_list_filters_by_tipe_produk(
    client: AsyncClient, super_headers: dict, catalog: dict, test_session
):
    retail = TipeProduk(nama="Retail", slug="retail", urutan=2)
    test_session.add(retail)
    await test_session.commit()
    await make_produk(test_session, catalog, nama="Satu Pallet")
    eceran = await make_produk(test_session, catalog, nama="Eceran")
    eceran.tipe_produk_id = retail.id
    await test_session.commit()

    response = await client.get("/public/produk", params={"tipe_produk_id": str(retail.id)})
    data = response.json()["data"]
    assert [p["nama"] for p in data] == ["Eceran"]
    assert data[0]["tipe_produk"]["slug"] == "retail"


@pytest.mark.asyncio
async def test_invalid_sort_rejected(client: AsyncClient, super_headers: dict, test_session):
    response = await client.get("/panel/produk", params={"sort_by": "password"}, headers=super_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_public_hides_inactive(client: AsyncClient, catalog: dict, test_session):
    await make_produk(test_session, catalog, nama="Tampil")
    await make_produk(test_session, catalog, nama="Sembunyi", is_active=False)

    response = await client.get("/public/produk")
    assert [p["nama"] for p in response.json()["data"]] == ["Tampil"]

    assert (await client.get("/public/produk/tampil")).status_code == 200
    assert (await client.get("/public/produk/sembunyi")).status_code == 404


# ============================================
# IMAGES
# ============================================

@pytest.mark.asyncio
async def test_first_image_is_primary_and_stored_as_webp(
    client: AsyncClient, super_headers: dict, test_produk: Produk
):
    gambar = await _upload(client, super_headers, test_produk.id)
    assert gambar["is_primary"] is True
    assert gambar["urutan"] == 1
    assert gambar["gambar_url"].startswith(f"/uploads/produk/{test_produk.id.hex}/")
    assert gambar["gambar_url"].endswith(".webp")

    second = await _upload(client, super_headers, test_produk.id)
    assert second["is_primary"] is False
    assert second["urutan"] == 2

    detail = (await client.get(f"/panel/produk/{test_produk.id}", headers=super_headers)).json()["data"]
    assert detail["gambar_utama"] == gambar["gambar_url"]


@pytest.mark.asyncio
async def test_upload_rejects_non_image(client: AsyncClient, super_headers: dict, test_produk: Produk):
    response = await client.post(
        f"/panel/produk/{test_produk.id}/gambar",
        files={"file": ("foto.png", b"not really a png", "image/png")},
        headers=super_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_upload_rejects_extension(client: AsyncClient, super_headers: dict, test_produk: Produk):
    response = await client.post(
        f"/panel/produk/{test_produk.id}/gambar",
        files={"file": ("foto.gif", _png_bytes(), "image/gif")},
        headers=super_headers,
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_primary_promotes_next(client: AsyncClient, super_headers: dict, test_produk: Produk):
    first = await _upload(client, super_headers, test_produk.id)
    second = await _upload(client, super_headers, test_produk.id)

    response = await client.delete(f"/panel/produk/{test_produk.id}/gambar/{first['id']}", headers=super_headers)
    assert response.status_code == 200
    remaining = response.json()["data"]
    assert len(remaining) == 1
    assert remaining[0]["id"] == second["id"]
    assert remaining[0]["is_primary"] is True
    assert remaining[0]["urutan"] == 1


@pytest.mark.asyncio
async def test_set_primary_and_reorder_images(client: AsyncClient, super_headers: dict, test_produk: Produk):
    first = await _upload(client, super_headers, test_produk.id)
    second = await _upload(client, super_headers, test_produk.id)

    response = await client.patch(
        f"/panel/produk/{test_produk.id}/gambar/{second['id']}/primary", headers=super_headers
    )
    primaries = [g["id"] for g in response.json()["data"] if g["is_primary"]]
    assert primaries == [second["id"]]

    response = await client.patch(
        f"/panel/produk/{test_produk.id}/gambar/{second['id']}/reorder",
        json={"direction": "up"},
        headers=super_headers,
    )
    assert response.status_code == 200
    detail = (await client.get(f"/panel/produk/{test_produk.id}", headers=super_headers)).json()["data"]
    assert [g["id"] for g in detail["gambar"]] == [second["id"], first["id"]]


@pytest.mark.asyncio
async def test_image_order_is_per_produk(
    client: AsyncClient, super_headers: dict, catalog: dict, test_produk: Produk, test_session
):
    lain = await make_produk(test_session, catalog, nama="Celana Jeans")
    a_first = await _upload(client, super_headers, test_produk.id)
    await _upload(client, super_headers, test_produk.id)
    b_first = await _upload(client, super_headers, lain.id)
    b_second = await _upload(client, super_headers, lain.id)
    assert (b_first["urutan"], b_second["urutan"]) == (1, 2)

    # The other product's images are not neighbours
    response = await client.patch(
        f"/panel/produk/{lain.id}/gambar/{b_first['id']}/reorder",
        json={"direction": "up"},
        headers=super_headers,
    )
    assert response.status_code == 400
    assert "paling atas" in response.json()["detail"]

    response = await client.delete(f"/panel/produk/{test_produk.id}/gambar/{a_first['id']}", headers=super_headers)
    assert response.status_code == 200
    assert [g["urutan"] for g in response.json()["data"]] == [1]

    detail = (await client.get(f"/panel/produk/{lain.id}", headers=super_headers)).json()["data"]
    assert [(g["id"], g["urutan"]) for g in detail["gambar"]] == [(b_first["id"], 1), (b_second["id"], 2)]
