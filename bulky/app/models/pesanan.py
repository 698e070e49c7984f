import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, DECIMAL, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bulky.app.core.base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin
from bulky.app.models.auth import Admin, Buyer


class Pesanan(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = 'pesanan'
    kode: Mapped[str] = mapped_column(String(30), unique=True)
    buyer_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('buyer.id'))
    delivery_type: Mapped[str] = mapped_column(String(20))
    alamat_buyer_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey('alamat_buyer.id'), nullable=True)
    payment_type: Mapped[str] = mapped_column(String(20), default='REGULAR')
    payment_status: Mapped[str] = mapped_column(String(20), default='PENDING')
    order_status: Mapped[str] = mapped_column(String(20), default='PENDING')
    biaya_produk: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    biaya_pengiriman: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    biaya_ppn: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    biaya_lainnya: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    total: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    catatan: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    catatan_admin: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    expired_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    ready_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    shipped_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    cancelled_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    deliveree_booking_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    forwarder_tracking_no: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    buyer: Mapped[Buyer] = relationship(lazy='selectin')
    items: Mapped[list["PesananItem"]] = relationship(back_populates='pesanan', lazy='selectin')
    pembayaran: Mapped[list["PesananPembayaran"]] = relationship(lazy='selectin')
    status_history: Mapped[list["PesananStatusHistory"]] = relationship(
        lazy='selectin',
        order_by='PesananStatusHistory.created_at.desc()',
    )

    __table_args__ = (
        Index('ix_pesanan_buyer_id', 'buyer_id'),
        Index('ix_pesanan_order_status', 'order_status'),
        Index('ix_pesanan_payment_status', 'payment_status'),
        Index('ix_pesanan_created_at', 'created_at'),
    )


class PesananItem(UUIDPrimaryKeyMixin, Base):
    __tablename__ = 'pesanan_item'
    pesanan_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('pesanan.id', ondelete='CASCADE'))
    produk_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('produk.id'))
    # Snapshot of the product at order time
    nama_produk: Mapped[str] = mapped_column(String(255))
    sku: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    qty: Mapped[int] = mapped_column(Integer)
    harga_satuan: Mapped[Decimal] = mapped_column(DECIMAL(15, 2))
    diskon_satuan: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), default=0)
    subtotal: Mapped[Decimal] = mapped_column(DECIMAL(15, 2))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    pesanan: Mapped[Pesanan] = relationship(back_populates='items')

    __table_args__ = (Index('ix_pesanan_item_pesanan_id', 'pesanan_id'),)


class PesananPembayaran(UUIDPrimaryKeyMixin, Base):
    __tablename__ = 'pesanan_pembayaran'
    pesanan_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('pesanan.id', ondelete='CASCADE'))
    buyer_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('buyer.id'))
    metode_pembayaran: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    jumlah: Mapped[Decimal] = mapped_column(DECIMAL(15, 2))
    status: Mapped[str] = mapped_column(String(20), default='PENDING')
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (Index('ix_pesanan_pembayaran_pesanan_id', 'pesanan_id'),)


class PesananStatusHistory(UUIDPrimaryKeyMixin, Base):
    __tablename__ = 'pesanan_status_history'
    pesanan_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('pesanan.id', ondelete='CASCADE'))
    status_from: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    status_to: Mapped[str] = mapped_column(String(20))
    status_type: Mapped[str] = mapped_column(String(10))  # ORDER | PAYMENT
    changed_by: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey('admin.id'), nullable=True)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    admin: Mapped[Optional[Admin]] = relationship(lazy='selectin')

    __table_args__ = (Index('ix_pesanan_status_history_pesanan_id', 'pesanan_id'),)
