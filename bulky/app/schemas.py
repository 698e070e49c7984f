import re
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, Field, field_validator, model_validator

from bulky.app.core.validation import sanitize_user_input

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _check_email(v: str) -> str:
    v = v.strip().lower()
    if not _EMAIL_RE.match(v):
        raise ValueError("format email tidak valid")
    return v


Email = Annotated[str, AfterValidator(_check_email)]


# --- Auth ---
class LoginRequest(BaseModel):
    email: Email
    password: str = Field(min_length=1)
    device_info: Optional[str] = Field(default=None, max_length=255)


class RegisterRequest(BaseModel):
    nama: str = Field(min_length=2, max_length=100)
    username: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.]+$")
    email: Email
    password: str
    telepon: Optional[str] = Field(default=None, max_length=20)

    @field_validator("nama")
    @classmethod
    def sanitize_nama(cls, v: str) -> str:
        return sanitize_user_input(v, max_length=100)


class RefreshRequest(BaseModel):
    refresh_token: str


class UpdateProfileRequest(BaseModel):
    nama: str = Field(min_length=2, max_length=100)
    telepon: Optional[str] = Field(default=None, max_length=20)

    @field_validator("nama")
    @classmethod
    def sanitize_nama(cls, v: str) -> str:
        return sanitize_user_input(v, max_length=100)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class ResetPasswordRequest(BaseModel):
    new_password: str


# --- Admin management ---
class AdminCreate(BaseModel):
    nama: str = Field(min_length=2, max_length=100)
    email: Email
    password: str
    role_id: uuid.UUID


class AdminUpdate(BaseModel):
    nama: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[Email] = None
    role_id: Optional[uuid.UUID] = None
    is_active: Optional[bool] = None


# --- Wilayah ---
class WilayahCreate(BaseModel):
    nama: str = Field(min_length=1, max_length=100)
    kode: Optional[str] = Field(default=None, max_length=15)
    parent_id: Optional[uuid.UUID] = None


class WilayahUpdate(BaseModel):
    nama: Optional[str] = Field(default=None, min_length=1, max_length=100)
    kode: Optional[str] = Field(default=None, max_length=15)
    parent_id: Optional[uuid.UUID] = None


# --- Alamat buyer ---
class AlamatCreate(BaseModel):
    kelurahan_id: uuid.UUID
    label: str = Field(min_length=1, max_length=50)
    nama_penerima: str = Field(min_length=1, max_length=100)
    telepon_penerima: str = Field(min_length=6, max_length=20)
    kode_pos: str = Field(min_length=3, max_length=10)
    alamat_lengkap: str = Field(min_length=5, max_length=500)
    catatan: Optional[str] = Field(default=None, max_length=500)
    is_default: bool = False

    @field_validator("alamat_lengkap", "catatan")
    @classmethod
    def sanitize_text(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return sanitize_user_input(v, max_length=500)


class AlamatUpdate(BaseModel):
    kelurahan_id: Optional[uuid.UUID] = None
    label: Optional[str] = Field(default=None, min_length=1, max_length=50)
    nama_penerima: Optional[str] = Field(default=None, min_length=1, max_length=100)
    telepon_penerima: Optional[str] = Field(default=None, min_length=6, max_length=20)
    kode_pos: Optional[str] = Field(default=None, min_length=3, max_length=10)
    alamat_lengkap: Optional[str] = Field(default=None, min_length=5, max_length=500)
    catatan: Optional[str] = Field(default=None, max_length=500)
    is_default: Optional[bool] = None


# --- Reordering ---
class ReorderRequest(BaseModel):
    direction: str


class BulkReorderItem(BaseModel):
    id: uuid.UUID
    urutan: int = Field(ge=0)


class BulkReorderRequest(BaseModel):
    items: List[BulkReorderItem] = Field(min_length=1)


# --- Master catalog ---
class MasterCreate(BaseModel):
    nama: str = Field(min_length=1, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=120)
    deskripsi: Optional[str] = None
    is_active: Optional[bool] = None
    icon_url: Optional[str] = Field(default=None, max_length=500)
    logo_url: Optional[str] = Field(default=None, max_length=500)
    alamat: Optional[str] = None
    kota: Optional[str] = Field(default=None, max_length=100)
    telepon: Optional[str] = Field(default=None, max_length=20)


class MasterUpdate(MasterCreate):
    nama: Optional[str] = Field(default=None, min_length=1, max_length=100)


# --- Produk ---
class ProdukCreate(BaseModel):
    nama: str = Field(min_length=1, max_length=255)
    id_cargo: Optional[str] = Field(default=None, max_length=50)
    deskripsi: Optional[str] = None
    kategori_id: uuid.UUID
    tipe_produk_id: uuid.UUID
    merek_ids: List[uuid.UUID] = []
    kondisi_id: uuid.UUID
    kondisi_paket_id: uuid.UUID
    sumber_id: Optional[uuid.UUID] = None
    warehouse_id: uuid.UUID
    harga_sebelum_diskon: Decimal = Field(ge=0)
    persentase_diskon: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    harga_sesudah_diskon: Optional[Decimal] = Field(default=None, ge=0)
    quantity: int = Field(default=0, ge=0)
    discrepancy: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("nama", "deskripsi")
    @classmethod
    def sanitize_text_fields(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return sanitize_user_input(v, max_length=5000)


class ProdukUpdate(BaseModel):
    nama: Optional[str] = Field(default=None, min_length=1, max_length=255)
    id_cargo: Optional[str] = Field(default=None, max_length=50)
    deskripsi: Optional[str] = None
    kategori_id: Optional[uuid.UUID] = None
    tipe_produk_id: Optional[uuid.UUID] = None
    merek_ids: Optional[List[uuid.UUID]] = None
    kondisi_id: Optional[uuid.UUID] = None
    kondisi_paket_id: Optional[uuid.UUID] = None
    sumber_id: Optional[uuid.UUID] = None
    warehouse_id: Optional[uuid.UUID] = None
    harga_sebelum_diskon: Optional[Decimal] = Field(default=None, ge=0)
    persentase_diskon: Optional[Decimal] = Field(default=None, ge=0, le=100)
    harga_sesudah_diskon: Optional[Decimal] = Field(default=None, ge=0)
    quantity: Optional[int] = Field(default=None, ge=0)
    discrepancy: Optional[str] = None
    is_active: Optional[bool] = None


class StockUpdate(BaseModel):
    quantity: int = Field(ge=0)


# --- Kupon ---
class KuponCreate(BaseModel):
    kode: str = Field(min_length=3, max_length=50)
    nama: str = Field(min_length=1, max_length=100)
    deskripsi: Optional[str] = None
    jenis_diskon: Literal["persentase", "jumlah_tetap"]
    nilai_diskon: Decimal = Field(gt=0)
    minimal_pembelian: Decimal = Field(default=Decimal("0"), ge=0)
    limit_pemakaian: Optional[int] = Field(default=None, gt=0)
    tanggal_kedaluarsa: date
    is_all_kategori: bool = False
    kategori_ids: List[uuid.UUID] = []
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def check_persentase(self):
        if self.jenis_diskon == "persentase" and self.nilai_diskon > 100:
            raise ValueError("nilai diskon persentase maksimal 100")
        return self


class KuponUpdate(BaseModel):
    kode: Optional[str] = Field(default=None, min_length=3, max_length=50)
    nama: Optional[str] = Field(default=None, min_length=1, max_length=100)
    deskripsi: Optional[str] = None
    jenis_diskon: Optional[Literal["persentase", "jumlah_tetap"]] = None
    nilai_diskon: Optional[Decimal] = Field(default=None, gt=0)
    minimal_pembelian: Optional[Decimal] = Field(default=None, ge=0)
    limit_pemakaian: Optional[int] = Field(default=None, gt=0)
    tanggal_kedaluarsa: Optional[date] = None
    is_all_kategori: Optional[bool] = None
    kategori_ids: Optional[List[uuid.UUID]] = None
    is_active: Optional[bool] = None


class GenerateKodeRequest(BaseModel):
    prefix: str = Field(default="", max_length=20)
    length: int = 8


# --- Pesanan ---
class PesananStatusUpdate(BaseModel):
    order_status: str
    note: Optional[str] = Field(default=None, max_length=1000)
    catatan_admin: Optional[str] = Field(default=None, max_length=2000)


# --- Ulasan ---
class UlasanApprove(BaseModel):
    is_approved: bool


class UlasanBulkApprove(BaseModel):
    ids: List[uuid.UUID] = Field(min_length=1)
    is_approved: bool


# --- Content ---
class TaxonomyCreate(BaseModel):
    nama: str = Field(min_length=1, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=120)
    is_active: Optional[bool] = None


class TaxonomyUpdate(BaseModel):
    nama: Optional[str] = Field(default=None, min_length=1, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=120)
    is_active: Optional[bool] = None


class BlogCreate(BaseModel):
    judul_id: str = Field(min_length=1, max_length=200)
    judul_en: Optional[str] = Field(default=None, max_length=200)
    slug: Optional[str] = Field(default=None, max_length=250)
    konten_id: str = Field(min_length=1)
    konten_en: Optional[str] = None
    deskripsi_singkat_id: str = Field(min_length=1, max_length=500)
    deskripsi_singkat_en: Optional[str] = Field(default=None, max_length=500)
    featured_image_url: Optional[str] = Field(default=None, max_length=500)
    kategori_id: uuid.UUID
    label_ids: List[uuid.UUID] = []
    meta_title_id: Optional[str] = Field(default=None, max_length=200)
    meta_title_en: Optional[str] = Field(default=None, max_length=200)
    meta_description_id: Optional[str] = Field(default=None, max_length=300)
    meta_description_en: Optional[str] = Field(default=None, max_length=300)
    meta_keywords: Optional[str] = Field(default=None, max_length=300)
    is_active: bool = False


class BlogUpdate(BaseModel):
    judul_id: Optional[str] = Field(default=None, min_length=1, max_length=200)
    judul_en: Optional[str] = Field(default=None, max_length=200)
    slug: Optional[str] = Field(default=None, max_length=250)
    konten_id: Optional[str] = None
    konten_en: Optional[str] = None
    deskripsi_singkat_id: Optional[str] = Field(default=None, max_length=500)
    deskripsi_singkat_en: Optional[str] = Field(default=None, max_length=500)
    featured_image_url: Optional[str] = Field(default=None, max_length=500)
    kategori_id: Optional[uuid.UUID] = None
    label_ids: Optional[List[uuid.UUID]] = None
    meta_title_id: Optional[str] = Field(default=None, max_length=200)
    meta_title_en: Optional[str] = Field(default=None, max_length=200)
    meta_description_id: Optional[str] = Field(default=None, max_length=300)
    meta_description_en: Optional[str] = Field(default=None, max_length=300)
    meta_keywords: Optional[str] = Field(default=None, max_length=300)
    is_active: Optional[bool] = None


class VideoCreate(BaseModel):
    judul_id: str = Field(min_length=1, max_length=200)
    judul_en: Optional[str] = Field(default=None, max_length=200)
    slug: Optional[str] = Field(default=None, max_length=250)
    deskripsi_id: Optional[str] = None
    deskripsi_en: Optional[str] = None
    video_url: str = Field(min_length=1, max_length=500)
    thumbnail_url: Optional[str] = Field(default=None, max_length=500)
    kategori_id: uuid.UUID
    durasi_detik: int = Field(default=0, ge=0)
    is_active: bool = False


class VideoUpdate(BaseModel):
    judul_id: Optional[str] = Field(default=None, min_length=1, max_length=200)
    judul_en: Optional[str] = Field(default=None, max_length=200)
    slug: Optional[str] = Field(default=None, max_length=250)
    deskripsi_id: Optional[str] = None
    deskripsi_en: Optional[str] = None
    video_url: Optional[str] = Field(default=None, max_length=500)
    thumbnail_url: Optional[str] = Field(default=None, max_length=500)
    kategori_id: Optional[uuid.UUID] = None
    durasi_detik: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class BannerCreate(BaseModel):
    nama: str = Field(min_length=1, max_length=100)
    gambar_url_id: str = Field(min_length=1, max_length=500)
    gambar_url_en: Optional[str] = Field(default=None, max_length=500)
    kategori_ids: List[uuid.UUID] = []
    is_active: Optional[bool] = None
    tanggal_mulai: Optional[datetime] = None
    tanggal_selesai: Optional[datetime] = None


class BannerUpdate(BaseModel):
    nama: Optional[str] = Field(default=None, min_length=1, max_length=100)
    gambar_url_id: Optional[str] = Field(default=None, max_length=500)
    gambar_url_en: Optional[str] = Field(default=None, max_length=500)
    kategori_ids: Optional[List[uuid.UUID]] = None
    is_active: Optional[bool] = None
    tanggal_mulai: Optional[datetime] = None
    tanggal_selesai: Optional[datetime] = None


class FaqItem(BaseModel):
    question: str = Field(min_length=1)
    question_en: str = ""
    answer: str = Field(min_length=1)
    answer_en: str = ""


class FaqUpdate(BaseModel):
    judul: str = Field(min_length=1, max_length=200)
    judul_en: str = Field(min_length=1, max_length=200)
    is_active: Optional[bool] = None
    items: List[FaqItem] = []


class FaqReorderRequest(BaseModel):
    index: int
    direction: str
