import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bulky.app.core.base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin
from bulky.app.models.auth import Buyer
from bulky.app.models.pesanan import Pesanan, PesananItem
from bulky.app.models.produk import Produk


class Ulasan(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = 'ulasan'
    pesanan_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('pesanan.id'))
    # One review per purchased line item
    pesanan_item_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('pesanan_item.id'), unique=True)
    buyer_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('buyer.id'))
    produk_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('produk.id'))
    rating: Mapped[int] = mapped_column(Integer)
    komentar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gambar: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_approved: Mapped[bool] = mapped_column(Boolean, default=False)
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    approved_by: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey('admin.id'), nullable=True)

    buyer: Mapped[Buyer] = relationship(lazy='selectin')
    produk: Mapped[Produk] = relationship(lazy='selectin')
    pesanan: Mapped[Pesanan] = relationship(lazy='selectin')
    pesanan_item: Mapped[PesananItem] = relationship(lazy='selectin')

    __table_args__ = (
        Index('ix_ulasan_produk_approved', 'produk_id', 'is_approved'),
        Index('ix_ulasan_buyer_id', 'buyer_id'),
    )
