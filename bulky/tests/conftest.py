"""
Test fixtures for Bulky backend tests.

Provides:
- In-memory SQLite database for isolated testing
- Async test client with proper session management
- Test data factories for admins, buyers, regions, catalog, products and orders
- Bearer header helpers built from real access tokens
"""
# IMPORTANT: Set environment variables BEFORE any other imports
import os
import tempfile

os.environ.setdefault("JWT_SECRET", "test_jwt_secret")
# DB settings required by Settings validation (tests use SQLite in-memory, these are not actually used)
os.environ.setdefault("DB_USER", "test")
os.environ.setdefault("DB_PASSWORD", "test")
os.environ.setdefault("DB_NAME", "test")
# Development mode for tests (disables ALLOWED_ORIGINS requirement)
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("UPLOAD_PATH", tempfile.mkdtemp(prefix="bulky-uploads-"))

import uuid
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import AsyncGenerator, List, Optional

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    async_sessionmaker,
)
from sqlalchemy.pool import StaticPool

from bulky.app.core.base import Base
from bulky.app.core.constants import ORDER_COMPLETED, ROLE_PERMISSIONS, ROLE_STAFF, ROLE_SUPER_ADMIN
from bulky.app.core.limiter import limiter
from bulky.app.core.security import USER_TYPE_ADMIN, USER_TYPE_BUYER, create_access_token, hash_password
from bulky.app.main import app
from bulky.app.api.deps import get_session, get_cache
from bulky.app.models.auth import Admin, Buyer, Permission, Role
from bulky.app.models.catalog import KategoriProduk, KondisiPaket, KondisiProduk, MerekProduk, TipeProduk, Warehouse
from bulky.app.models.content import KategoriBlog, KategoriVideo, LabelBlog  # noqa: F401
from bulky.app.models.kupon import Kupon, KuponUsage  # noqa: F401
from bulky.app.models.pesanan import Pesanan, PesananItem
from bulky.app.models.produk import Produk
from bulky.app.models.ulasan import Ulasan  # noqa: F401
from bulky.app.models.wilayah import Kecamatan, Kelurahan, Kota, Provinsi


# Test database URL - SQLite in-memory
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "Rahasia123"

# Create test engine with StaticPool for in-memory SQLite
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    echo=False,
)

TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class MockCacheService:
    """Mock Redis cache for testing without actual Redis."""

    def __init__(self):
        self._cache = {}

    async def get(self, key: str):
        return self._cache.get(key)

    async def set(self, key: str, value, ttl: int = 300):
        self._cache[key] = value

    async def delete(self, key: str):
        self._cache.pop(key, None)

    async def delete_pattern(self, pattern: str):
        prefix = pattern.rstrip("*")
        for key in [k for k in self._cache if k.startswith(prefix)]:
            self._cache.pop(key, None)

    async def get_provinsi(self):
        return self._cache.get("wilayah:provinsi")

    async def set_provinsi(self, items):
        self._cache["wilayah:provinsi"] = items

    async def get_children(self, level: str, parent_id):
        return self._cache.get(f"wilayah:{level}:{parent_id}")

    async def set_children(self, level: str, parent_id, items):
        self._cache[f"wilayah:{level}:{parent_id}"] = items

    # Cache invalidation (used by the panel wilayah endpoints)
    async def invalidate_wilayah(self, level: str, parent_id=None):
        if level == "provinsi":
            await self.delete("wilayah:provinsi")
        elif parent_id is not None:
            await self.delete(f"wilayah:{level}:{parent_id}")
        else:
            await self.delete_pattern(f"wilayah:{level}:*")


@pytest.fixture(scope="function")
async def test_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh database session for each test.
    Creates all tables before and drops after each test.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def mock_cache() -> MockCacheService:
    """Provide mock cache service for testing."""
    return MockCacheService()


@pytest.fixture
async def client(
    test_session: AsyncSession,
    mock_cache: MockCacheService,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Async HTTP client for testing API endpoints.
    Overrides database and cache dependencies.

    Note: We create a fresh session for each API call to avoid
    transaction conflicts with the test_session used for fixtures.
    """
    async def override_get_session():
        async with TestSessionLocal() as session:
            yield session

    async def override_get_cache():
        yield mock_cache

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_cache] = override_get_cache
    # Login endpoints are rate limited per IP; every test starts with a clean window
    limiter.reset()

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# --- Auth Helpers ---

def admin_headers(admin: Admin) -> dict:
    """Bearer header carrying the admin's role and permission kodes."""
    token = create_access_token(
        admin.id,
        USER_TYPE_ADMIN,
        admin.email,
        role_kode=admin.role.kode,
        permissions=sorted(p.kode for p in admin.role.permissions),
    )
    return {"Authorization": f"Bearer {token}"}


def buyer_headers(buyer: Buyer) -> dict:
    token = create_access_token(buyer.id, USER_TYPE_BUYER, buyer.email)
    return {"Authorization": f"Bearer {token}"}


# --- Test Data Factories ---

async def make_role(session: AsyncSession, kode: str, permission_kodes=()) -> Role:
    permissions = []
    for kode_permission in permission_kodes:
        modul, action = kode_permission.split(":")
        permissions.append(Permission(kode=kode_permission, nama=f"{action} {modul}", modul=modul))
    role = Role(kode=kode, nama=kode.replace("_", " ").title(), is_active=True, permissions=permissions)
    session.add(role)
    await session.commit()
    await session.refresh(role)
    return role


async def make_admin(
    session: AsyncSession,
    role: Role,
    email: str,
    nama: str = "Admin Test",
    is_active: bool = True,
) -> Admin:
    admin = Admin(
        nama=nama,
        email=email,
        password=hash_password(TEST_PASSWORD),
        role_id=role.id,
        is_active=is_active,
    )
    session.add(admin)
    await session.commit()
    await session.refresh(admin)
    return admin


async def make_buyer(
    session: AsyncSession,
    username: str = "budi",
    email: str = "budi@example.com",
    nama: str = "Budi Santoso",
    is_active: bool = True,
    is_verified: bool = False,
) -> Buyer:
    buyer = Buyer(
        nama=nama,
        username=username,
        email=email,
        password=hash_password(TEST_PASSWORD),
        telepon="081234567890",
        is_active=is_active,
        is_verified=is_verified,
    )
    session.add(buyer)
    await session.commit()
    await session.refresh(buyer)
    return buyer


async def make_produk(
    session: AsyncSession,
    catalog: dict,
    nama: str = "Kaos Polos",
    harga: Decimal = Decimal("100000"),
    diskon: Decimal = Decimal("10"),
    quantity: int = 10,
    is_active: bool = True,
) -> Produk:
    harga_sesudah = (harga - harga * diskon / Decimal("100")).quantize(Decimal("0.01"))
    produk = Produk(
        nama=nama,
        slug=nama.lower().replace(" ", "-"),
        kategori_id=catalog["kategori"].id,
        tipe_produk_id=catalog["tipe_produk"].id,
        kondisi_id=catalog["kondisi"].id,
        kondisi_paket_id=catalog["kondisi_paket"].id,
        warehouse_id=catalog["warehouse"].id,
        harga_sebelum_diskon=harga,
        persentase_diskon=diskon,
        harga_sesudah_diskon=harga_sesudah,
        quantity=quantity,
        is_active=is_active,
        merek=[catalog["merek"]],
    )
    session.add(produk)
    await session.commit()
    await session.refresh(produk)
    return produk


async def make_pesanan(
    session: AsyncSession,
    buyer: Buyer,
    produk_list: List[Produk],
    order_status: str = ORDER_COMPLETED,
    kode: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> Pesanan:
    """Seed an order directly; checkout is not exposed over HTTP."""
    items = []
    biaya_produk = Decimal("0")
    for produk in produk_list:
        subtotal = produk.harga_sesudah_diskon
        biaya_produk += subtotal
        items.append(PesananItem(
            produk_id=produk.id,
            nama_produk=produk.nama,
            qty=1,
            harga_satuan=produk.harga_sesudah_diskon,
            subtotal=subtotal,
        ))
    pesanan = Pesanan(
        kode=kode or f"ORD-{uuid.uuid4().hex[:10].upper()}",
        buyer_id=buyer.id,
        delivery_type="PICKUP",
        order_status=order_status,
        biaya_produk=biaya_produk,
        total=biaya_produk,
        items=items,
        created_at=created_at or datetime.utcnow(),
    )
    session.add(pesanan)
    await session.commit()
    await session.refresh(pesanan)
    return pesanan


@pytest.fixture
async def super_admin(test_session: AsyncSession) -> Admin:
    """SUPER_ADMIN bypasses every permission check."""
    role = await make_role(test_session, ROLE_SUPER_ADMIN)
    return await make_admin(test_session, role, "super@bulky.id", nama="Super Admin")


@pytest.fixture
async def staff_admin(test_session: AsyncSession) -> Admin:
    """STAFF can read most modules and update orders and reviews only."""
    role = await make_role(test_session, ROLE_STAFF, ROLE_PERMISSIONS[ROLE_STAFF])
    return await make_admin(test_session, role, "staff@bulky.id", nama="Staff Gudang")


@pytest.fixture
def super_headers(super_admin: Admin) -> dict:
    return admin_headers(super_admin)


@pytest.fixture
def staff_headers(staff_admin: Admin) -> dict:
    return admin_headers(staff_admin)


@pytest.fixture
async def test_buyer(test_session: AsyncSession) -> Buyer:
    return await make_buyer(test_session)


@pytest.fixture
def buyer_auth(test_buyer: Buyer) -> dict:
    return buyer_headers(test_buyer)


@pytest.fixture
async def wilayah_chain(test_session: AsyncSession) -> dict:
    """Provinsi -> kota -> kecamatan -> kelurahan, one row per level."""
    provinsi = Provinsi(nama="Jawa Barat", kode="32")
    test_session.add(provinsi)
    await test_session.flush()
    kota = Kota(provinsi_id=provinsi.id, nama="Kota Bandung", kode="3273")
    test_session.add(kota)
    await test_session.flush()
    kecamatan = Kecamatan(kota_id=kota.id, nama="Coblong", kode="327302")
    test_session.add(kecamatan)
    await test_session.flush()
    kelurahan = Kelurahan(kecamatan_id=kecamatan.id, nama="Dago", kode="3273021001")
    test_session.add(kelurahan)
    await test_session.commit()
    return {"provinsi": provinsi, "kota": kota, "kecamatan": kecamatan, "kelurahan": kelurahan}


@pytest.fixture
async def catalog(test_session: AsyncSession) -> dict:
    """Minimal master data a product needs."""
    rows = {
        "kategori": KategoriProduk(nama="Fashion", slug="fashion"),
        "tipe_produk": TipeProduk(nama="Pallet", slug="pallet", urutan=1),
        "merek": MerekProduk(nama="Uniqlo", slug="uniqlo"),
        "kondisi": KondisiProduk(nama="Baru", slug="baru", urutan=1),
        "kondisi_paket": KondisiPaket(nama="Segel", slug="segel", urutan=1),
        "warehouse": Warehouse(nama="Gudang Cikarang", slug="gudang-cikarang", kota="Bekasi"),
    }
    test_session.add_all(rows.values())
    await test_session.commit()
    return rows


@pytest.fixture
async def test_produk(test_session: AsyncSession, catalog: dict) -> Produk:
    return await make_produk(test_session, catalog)


@pytest.fixture
async def completed_pesanan(test_session: AsyncSession, test_buyer: Buyer, test_produk: Produk) -> Pesanan:
    return await make_pesanan(test_session, test_buyer, [test_produk])


@pytest.fixture
async def test_kupon(test_session: AsyncSession, catalog: dict) -> Kupon:
    kupon = Kupon(
        kode="HEMAT10",
        nama="Hemat 10 persen",
        jenis_diskon="persentase",
        nilai_diskon=Decimal("10"),
        minimal_pembelian=Decimal("50000"),
        limit_pemakaian=2,
        tanggal_kedaluarsa=date.today() + timedelta(days=30),
        is_all_kategori=False,
        kategori=[catalog["kategori"]],
    )
    test_session.add(kupon)
    await test_session.commit()
    await test_session.refresh(kupon)
    return kupon
