"""Catalog master data: product categories, types, brands, conditions, package conditions, sources, warehouses."""
from typing import Optional

from sqlalchemy import Boolean, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from bulky.app.core.base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class MasterDataMixin(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    nama: Mapped[str] = mapped_column(String(100))
    # Unique among live rows only; enforced in the service, deleted rows keep their slug
    slug: Mapped[str] = mapped_column(String(120))
    deskripsi: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class KategoriProduk(MasterDataMixin, Base):
    __tablename__ = 'kategori_produk'
    icon_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    __table_args__ = (Index('ix_kategori_produk_slug', 'slug'),)


class TipeProduk(MasterDataMixin, Base):
    __tablename__ = 'tipe_produk'
    urutan: Mapped[int] = mapped_column(Integer, default=0, server_default='0')

    __table_args__ = (Index('ix_tipe_produk_slug', 'slug'),)


class MerekProduk(MasterDataMixin, Base):
    __tablename__ = 'merek_produk'
    logo_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    __table_args__ = (Index('ix_merek_produk_slug', 'slug'),)


class KondisiProduk(MasterDataMixin, Base):
    __tablename__ = 'kondisi_produk'
    urutan: Mapped[int] = mapped_column(Integer, default=0, server_default='0')

    __table_args__ = (Index('ix_kondisi_produk_slug', 'slug'),)


class KondisiPaket(MasterDataMixin, Base):
    __tablename__ = 'kondisi_paket'
    urutan: Mapped[int] = mapped_column(Integer, default=0, server_default='0')

    __table_args__ = (Index('ix_kondisi_paket_slug', 'slug'),)


class SumberProduk(MasterDataMixin, Base):
    __tablename__ = 'sumber_produk'

    __table_args__ = (Index('ix_sumber_produk_slug', 'slug'),)


class Warehouse(MasterDataMixin, Base):
    __tablename__ = 'warehouse'
    alamat: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    kota: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    telepon: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    __table_args__ = (Index('ix_warehouse_slug', 'slug'),)
