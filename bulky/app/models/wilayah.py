import uuid
from typing import Optional

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bulky.app.core.base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Provinsi(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = 'provinsi'
    nama: Mapped[str] = mapped_column(String(100))
    kode: Mapped[Optional[str]] = mapped_column(String(10), unique=True, nullable=True)


class Kota(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = 'kota'
    provinsi_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('provinsi.id'))
    nama: Mapped[str] = mapped_column(String(100))
    kode: Mapped[Optional[str]] = mapped_column(String(10), unique=True, nullable=True)

    provinsi: Mapped[Provinsi] = relationship(lazy='joined')

    __table_args__ = (Index('ix_kota_provinsi_id', 'provinsi_id'),)


class Kecamatan(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = 'kecamatan'
    kota_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('kota.id'))
    nama: Mapped[str] = mapped_column(String(100))
    kode: Mapped[Optional[str]] = mapped_column(String(10), unique=True, nullable=True)

    kota: Mapped[Kota] = relationship(lazy='joined')

    __table_args__ = (Index('ix_kecamatan_kota_id', 'kota_id'),)


class Kelurahan(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = 'kelurahan'
    kecamatan_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('kecamatan.id'))
    nama: Mapped[str] = mapped_column(String(100))
    kode: Mapped[Optional[str]] = mapped_column(String(15), unique=True, nullable=True)

    # Joined eagerly all the way up so an address can be formatted without extra queries
    kecamatan: Mapped[Kecamatan] = relationship(lazy='joined')

    __table_args__ = (Index('ix_kelurahan_kecamatan_id', 'kecamatan_id'),)


class AlamatBuyer(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = 'alamat_buyer'
    buyer_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('buyer.id', ondelete='CASCADE'))
    kelurahan_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('kelurahan.id'))
    label: Mapped[str] = mapped_column(String(50))
    nama_penerima: Mapped[str] = mapped_column(String(100))
    telepon_penerima: Mapped[str] = mapped_column(String(20))
    kode_pos: Mapped[str] = mapped_column(String(10))
    alamat_lengkap: Mapped[str] = mapped_column(String(500))
    catatan: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    is_default: Mapped[bool] = mapped_column(default=False)

    kelurahan: Mapped[Kelurahan] = relationship(lazy='joined')

    __table_args__ = (Index('ix_alamat_buyer_buyer_id', 'buyer_id'),)

    def formatted(self) -> str:
        """Street, kelurahan, kecamatan, kota, provinsi and postal code on one line."""
        kel = self.kelurahan
        kec = kel.kecamatan
        kota = kec.kota
        return (
            f"{self.alamat_lengkap}, {kel.nama}, {kec.nama}, "
            f"{kota.nama}, {kota.provinsi.nama} {self.kode_pos}"
        )
