import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Column, DECIMAL, ForeignKey, Index, Integer, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bulky.app.core.base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin
from bulky.app.models.catalog import (
    KategoriProduk,
    KondisiPaket,
    KondisiProduk,
    MerekProduk,
    SumberProduk,
    TipeProduk,
    Warehouse,
)

produk_merek = Table(
    'produk_merek',
    Base.metadata,
    Column('produk_id', Uuid, ForeignKey('produk.id', ondelete='CASCADE'), primary_key=True),
    Column('merek_id', Uuid, ForeignKey('merek_produk.id', ondelete='CASCADE'), primary_key=True),
)


class Produk(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = 'produk'
    nama: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(300))
    id_cargo: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    deskripsi: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    kategori_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('kategori_produk.id'))
    tipe_produk_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('tipe_produk.id'))
    kondisi_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('kondisi_produk.id'))
    kondisi_paket_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('kondisi_paket.id'))
    sumber_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey('sumber_produk.id'), nullable=True)
    warehouse_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('warehouse.id'))
    harga_sebelum_diskon: Mapped[Decimal] = mapped_column(DECIMAL(15, 2))
    persentase_diskon: Mapped[Decimal] = mapped_column(DECIMAL(5, 2), default=0)
    harga_sesudah_diskon: Mapped[Decimal] = mapped_column(DECIMAL(15, 2))
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    quantity_terjual: Mapped[int] = mapped_column(Integer, default=0)
    discrepancy: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    kategori: Mapped[KategoriProduk] = relationship(lazy='selectin')
    tipe_produk: Mapped[TipeProduk] = relationship(lazy='selectin')
    kondisi: Mapped[KondisiProduk] = relationship(lazy='selectin')
    kondisi_paket: Mapped[KondisiPaket] = relationship(lazy='selectin')
    sumber: Mapped[Optional[SumberProduk]] = relationship(lazy='selectin')
    warehouse: Mapped[Warehouse] = relationship(lazy='selectin')
    merek: Mapped[list[MerekProduk]] = relationship(secondary=produk_merek, lazy='selectin')
    gambar: Mapped[list["ProdukGambar"]] = relationship(
        back_populates='produk',
        lazy='selectin',
        order_by='ProdukGambar.urutan',
        cascade='all, delete-orphan',
    )

    __table_args__ = (
        Index('ix_produk_slug', 'slug'),
        Index('ix_produk_id_cargo', 'id_cargo'),
        Index('ix_produk_kategori_id', 'kategori_id'),
        Index('ix_produk_warehouse_id', 'warehouse_id'),
        Index('ix_produk_active_created', 'is_active', 'created_at'),
    )


class ProdukGambar(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = 'produk_gambar'
    produk_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('produk.id', ondelete='CASCADE'))
    gambar_url: Mapped[str] = mapped_column(String(500))
    urutan: Mapped[int] = mapped_column(Integer, default=0)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)

    produk: Mapped[Produk] = relationship(back_populates='gambar')

    __table_args__ = (Index('ix_produk_gambar_produk_id', 'produk_id'),)
