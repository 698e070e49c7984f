"""
Tests for the content section: blog, video, banner, FAQ and taxonomies.

Tests cover:
- Taxonomy CRUD with slugs and urutan, labels without status
- Blog drafts, first-publication timestamp, view counting, related posts
- Video statistics
- Banner display windows, kategori targets and ordering
- FAQ singleton document and item reordering
"""
from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient


async def _taxonomy(client: AsyncClient, headers: dict, kind: str, nama: str) -> dict:
    response = await client.post(f"/panel/konten/{kind}", json={"nama": nama}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def _blog(client: AsyncClient, headers: dict, kategori_id: str, judul: str, **extra) -> dict:
    payload = {
        "judul_id": judul,
        "konten_id": "<p>Isi artikel</p>",
        "deskripsi_singkat_id": "Ringkasan",
        "kategori_id": kategori_id,
        **extra,
    }
    response = await client.post("/panel/konten/blog", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


# ============================================
# TAXONOMIES
# ============================================

@pytest.mark.asyncio
async def test_taxonomy_crud_and_order(client: AsyncClient, super_headers: dict):
    tips = await _taxonomy(client, super_headers, "kategori-blog", "Tips Belanja")
    berita = await _taxonomy(client, super_headers, "kategori-blog", "Berita")
    assert tips["slug"] == "tips-belanja"
    assert (tips["urutan"], berita["urutan"]) == (1, 2)

    response = await client.patch(
        f"/panel/konten/kategori-blog/{berita['id']}/reorder", json={"direction": "up"}, headers=super_headers
    )
    assert response.status_code == 200

    public = (await client.get("/public/konten/kategori-blog")).json()["data"]
    assert [k["nama"] for k in public] == ["Berita", "Tips Belanja"]

    await client.delete(f"/panel/konten/kategori-blog/{berita['id']}", headers=super_headers)
    public = (await client.get("/public/konten/kategori-blog")).json()["data"]
    assert [(k["nama"], k["urutan"]) for k in public] == [("Tips Belanja", 1)]


@pytest.mark.asyncio
async def test_label_has_no_status(client: AsyncClient, super_headers: dict):
    label = await _taxonomy(client, super_headers, "label-blog", "Promo")
    assert "is_active" not in label
    response = await client.patch(f"/panel/konten/label-blog/{label['id']}/toggle-status", headers=super_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_taxonomy_kind(client: AsyncClient, super_headers: dict):
    response = await client.get("/panel/konten/kategori-podcast", headers=super_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_staff_reads_content_only(client: AsyncClient, staff_headers: dict):
    assert (await client.get("/panel/konten/blog", headers=staff_headers)).status_code == 200
    response = await client.post("/panel/konten/kategori-blog", json={"nama": "X"}, headers=staff_headers)
    assert response.status_code == 403


# ============================================
# BLOG AND VIDEO
# ============================================

@pytest.mark.asyncio
async def test_blog_draft_then_publish(client: AsyncClient, super_headers: dict):
    kategori = await _taxonomy(client, super_headers, "kategori-blog", "Tips")
    label = await _taxonomy(client, super_headers, "label-blog", "Hemat")
    blog = await _blog(client, super_headers, kategori["id"], "Cara Beli Grosir", label_ids=[label["id"]])

    assert blog["slug"] == "cara-beli-grosir"
    assert blog["is_active"] is False
    assert blog["published_at"] is None
    assert [lbl["nama"] for lbl in blog["labels"]] == ["Hemat"]
    assert (await client.get("/public/blog/cara-beli-grosir")).status_code == 404

    toggled = await client.patch(f"/panel/konten/blog/{blog['id']}/toggle-status", headers=super_headers)
    published_at = toggled.json()["data"]["published_at"]
    assert published_at is not None

    # Unpublishing and publishing again keeps the first publication time
    await client.patch(f"/panel/konten/blog/{blog['id']}/toggle-status", headers=super_headers)
    again = await client.patch(f"/panel/konten/blog/{blog['id']}/toggle-status", headers=super_headers)
    assert again.json()["data"]["published_at"] == published_at


@pytest.mark.asyncio
async def test_blog_unknown_label(client: AsyncClient, super_headers: dict):
    kategori = await _taxonomy(client, super_headers, "kategori-blog", "Tips")
    response = await client.post("/panel/konten/blog", json={
        "judul_id": "Judul",
        "konten_id": "Isi",
        "deskripsi_singkat_id": "Ringkas",
        "kategori_id": kategori["id"],
        "label_ids": ["00000000-0000-0000-0000-000000000000"],
    }, headers=super_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_blog_duplicate_slug(client: AsyncClient, super_headers: dict):
    kategori = await _taxonomy(client, super_headers, "kategori-blog", "Tips")
    await _blog(client, super_headers, kategori["id"], "Judul Sama")
    response = await client.post("/panel/konten/blog", json={
        "judul_id": "Judul Sama",
        "konten_id": "Isi",
        "deskripsi_singkat_id": "Ringkas",
        "kategori_id": kategori["id"],
    }, headers=super_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_public_blog_counts_views_and_related(client: AsyncClient, super_headers: dict):
    tips = await _taxonomy(client, super_headers, "kategori-blog", "Tips")
    berita = await _taxonomy(client, super_headers, "kategori-blog", "Berita")
    await _blog(client, super_headers, tips["id"], "Artikel Satu", is_active=True)
    await _blog(client, super_headers, tips["id"], "Artikel Dua", is_active=True)
    await _blog(client, super_headers, berita["id"], "Artikel Lain", is_active=True)

    for _ in range(2):
        response = await client.get("/public/blog/artikel-dua")
        assert response.status_code == 200
    assert response.json()["data"]["view_count"] == 2

    populer = (await client.get("/public/blog/populer")).json()["data"]
    assert populer[0]["slug"] == "artikel-dua"

    related = (await client.get("/public/blog/artikel-satu/related")).json()["data"]
    assert [b["slug"] for b in related] == ["artikel-dua"]

    listing = await client.get("/public/blog", params={"kategori_id": berita["id"]})
    assert [b["slug"] for b in listing.json()["data"]] == ["artikel-lain"]


@pytest.mark.asyncio
async def test_video_statistik(client: AsyncClient, super_headers: dict):
    kategori = await _taxonomy(client, super_headers, "kategori-video", "Unboxing")
    for judul, aktif in (("Unboxing Pallet", True), ("Draft Video", False)):
        response = await client.post("/panel/konten/video", json={
            "judul_id": judul,
            "video_url": "https://youtu.be/abc",
            "kategori_id": kategori["id"],
            "durasi_detik": 120,
            "is_active": aktif,
        }, headers=super_headers)
        assert response.status_code == 201

    await client.get("/public/video/unboxing-pallet")
    data = (await client.get("/panel/konten/video/statistik", headers=super_headers)).json()["data"]
    assert data["total_video"] == 2
    assert data["total_published"] == 1
    assert data["total_draft"] == 1
    assert data["total_views"] == 1
    assert [v["slug"] for v in data["video_populer"]] == ["unboxing-pallet"]


# ============================================
# BANNER
# ============================================

@pytest.mark.asyncio
async def test_banner_window_and_targets(client: AsyncClient, super_headers: dict, catalog: dict):
    now = datetime.utcnow()
    aktif = await client.post("/panel/konten/banner", json={
        "nama": "Flash Sale",
        "gambar_url_id": "/uploads/banner/a.webp",
        "kategori_ids": [str(catalog["kategori"].id)],
    }, headers=super_headers)
    assert aktif.status_code == 201
    data = aktif.json()["data"]
    assert data["tujuan"] == [{"id": str(catalog["kategori"].id), "slug": catalog["kategori"].slug}]
    assert data["is_currently_visible"] is True

    await client.post("/panel/konten/banner", json={
        "nama": "Nanti",
        "gambar_url_id": "/uploads/banner/b.webp",
        "tanggal_mulai": (now + timedelta(days=3)).isoformat(),
    }, headers=super_headers)

    public = (await client.get("/public/banner")).json()["data"]
    assert [b["nama"] for b in public] == ["Flash Sale"]


@pytest.mark.asyncio
async def test_banner_invalid_window(client: AsyncClient, super_headers: dict):
    now = datetime.utcnow()
    response = await client.post("/panel/konten/banner", json={
        "nama": "Salah",
        "gambar_url_id": "/x.webp",
        "tanggal_mulai": now.isoformat(),
        "tanggal_selesai": (now - timedelta(days=1)).isoformat(),
    }, headers=super_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_banner_unknown_kategori(client: AsyncClient, super_headers: dict):
    response = await client.post("/panel/konten/banner", json={
        "nama": "Salah",
        "gambar_url_id": "/x.webp",
        "kategori_ids": ["00000000-0000-0000-0000-000000000000"],
    }, headers=super_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_banner_bulk_reorder(client: AsyncClient, super_headers: dict):
    ids = []
    for nama in ("Satu", "Dua"):
        response = await client.post(
            "/panel/konten/banner", json={"nama": nama, "gambar_url_id": "/x.webp"}, headers=super_headers
        )
        ids.append(response.json()["data"]["id"])

    response = await client.put("/panel/konten/banner/reorder", json={"items": [
        {"id": ids[0], "urutan": 2},
        {"id": ids[1], "urutan": 1},
    ]}, headers=super_headers)
    assert response.status_code == 200

    listing = (await client.get("/panel/konten/banner", headers=super_headers)).json()["data"]
    assert [b["nama"] for b in listing] == ["Dua", "Satu"]


# ============================================
# FAQ
# ============================================

@pytest.mark.asyncio
async def test_faq_document(client: AsyncClient, super_headers: dict):
    assert (await client.get("/public/faq")).status_code == 404

    panel = (await client.get("/panel/konten/faq", headers=super_headers)).json()["data"]
    assert panel["items"] == []

    response = await client.put("/panel/konten/faq", json={
        "judul": "FAQ",
        "judul_en": "FAQ",
        "items": [
            {"question": "Apa itu Bulky?", "answer": "Marketplace grosir."},
            {"question": "Bisa COD?", "answer": "Belum.", "answer_en": "Not yet."},
        ],
    }, headers=super_headers)
    assert response.status_code == 200
    items = response.json()["data"]["items"]
    assert items[0] == {
        "question": "Apa itu Bulky?", "question_en": "", "answer": "Marketplace grosir.", "answer_en": "",
    }

    response = await client.patch(
        "/panel/konten/faq/reorder", json={"index": 1, "direction": "up"}, headers=super_headers
    )
    assert [i["question"] for i in response.json()["data"]["items"]] == ["Bisa COD?", "Apa itu Bulky?"]

    public = (await client.get("/public/faq")).json()["data"]
    assert public["items"][0]["answer_en"] == "Not yet."


@pytest.mark.asyncio
async def test_faq_reorder_bounds(client: AsyncClient, super_headers: dict):
    await client.put("/panel/konten/faq", json={
        "judul": "FAQ", "judul_en": "FAQ", "items": [{"question": "Q", "answer": "A"}],
    }, headers=super_headers)

    response = await client.patch(
        "/panel/konten/faq/reorder", json={"index": 0, "direction": "up"}, headers=super_headers
    )
    assert response.status_code == 400
    response = await client.patch(
        "/panel/konten/faq/reorder", json={"index": 5, "direction": "down"}, headers=super_headers
    )
    assert response.status_code == 404
