import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Column, Date, DECIMAL, ForeignKey, Index, Integer, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bulky.app.core.base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin
from bulky.app.models.catalog import KategoriProduk

kupon_kategori = Table(
    'kupon_kategori',
    Base.metadata,
    Column('kupon_id', Uuid, ForeignKey('kupon.id', ondelete='CASCADE'), primary_key=True),
    Column('kategori_id', Uuid, ForeignKey('kategori_produk.id', ondelete='CASCADE'), primary_key=True),
)


class Kupon(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = 'kupon'
    kode: Mapped[str] = mapped_column(String(50))
    nama: Mapped[str] = mapped_column(String(100))
    deskripsi: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    jenis_diskon: Mapped[str] = mapped_column(String(20))  # persentase | jumlah_tetap
    nilai_diskon: Mapped[Decimal] = mapped_column(DECIMAL(15, 2))
    minimal_pembelian: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    limit_pemakaian: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    tanggal_kedaluarsa: Mapped[date] = mapped_column(Date)
    is_all_kategori: Mapped[bool] = mapped_column(Boolean, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    kategori: Mapped[list[KategoriProduk]] = relationship(secondary=kupon_kategori, lazy='selectin')

    __table_args__ = (
        Index('ix_kupon_kode', 'kode'),
        Index('ix_kupon_tanggal_kedaluarsa', 'tanggal_kedaluarsa'),
    )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """Valid through the whole expiry day."""
        now = now or datetime.now()
        return now > datetime.combine(self.tanggal_kedaluarsa, time.max)

    def is_limit_reached(self, usage_count: int) -> bool:
        return self.limit_pemakaian is not None and usage_count >= self.limit_pemakaian

    def remaining_usage(self, usage_count: int) -> Optional[int]:
        if self.limit_pemakaian is None:
            return None
        # Negative once the limit is lowered below the usage already recorded
        return self.limit_pemakaian - usage_count


class KuponUsage(UUIDPrimaryKeyMixin, Base):
    __tablename__ = 'kupon_usage'
    kupon_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('kupon.id'))
    buyer_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('buyer.id'))
    pesanan_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('pesanan.id'))
    kode_kupon: Mapped[str] = mapped_column(String(50))
    nilai_potongan: Mapped[Decimal] = mapped_column(DECIMAL(15, 2))
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)

    __table_args__ = (
        Index('ix_kupon_usage_kupon_id', 'kupon_id'),
        Index('ix_kupon_usage_buyer_id', 'buyer_id'),
    )
