import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bulky.app.core.base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin

role_permission = Table(
    'role_permission',
    Base.metadata,
    Column('role_id', Uuid, ForeignKey('role.id', ondelete='CASCADE'), primary_key=True),
    Column('permission_id', Uuid, ForeignKey('permission.id', ondelete='CASCADE'), primary_key=True),
)


class Permission(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = 'permission'
    kode: Mapped[str] = mapped_column(String(100), unique=True)  # "produk:read"
    nama: Mapped[str] = mapped_column(String(100))
    modul: Mapped[str] = mapped_column(String(50))


class Role(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = 'role'
    kode: Mapped[str] = mapped_column(String(50), unique=True)
    nama: Mapped[str] = mapped_column(String(100))
    deskripsi: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    permissions: Mapped[list[Permission]] = relationship(secondary=role_permission, lazy='selectin')


class Admin(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = 'admin'
    nama: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255))
    password: Mapped[str] = mapped_column(String(255))
    role_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('role.id'))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    role: Mapped[Role] = relationship(lazy='selectin')

    __table_args__ = (
        Index('ix_admin_email', 'email'),
    )


class Buyer(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = 'buyer'
    nama: Mapped[str] = mapped_column(String(100))
    username: Mapped[str] = mapped_column(String(50))
    email: Mapped[str] = mapped_column(String(255))
    password: Mapped[str] = mapped_column(String(255))
    telepon: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        Index('ix_buyer_email', 'email'),
        Index('ix_buyer_username', 'username'),
    )


class RefreshToken(UUIDPrimaryKeyMixin, Base):
    __tablename__ = 'refresh_token'
    user_type: Mapped[str] = mapped_column(String(10))
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    token: Mapped[str] = mapped_column(String(64), unique=True)  # sha256 hex
    device_info: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    expired_at: Mapped[datetime] = mapped_column(DateTime)
    is_revoked: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index('ix_refresh_token_user', 'user_type', 'user_id'),
    )


class ActivityLog(UUIDPrimaryKeyMixin, Base):
    __tablename__ = 'activity_log'
    user_type: Mapped[str] = mapped_column(String(10))
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    action: Mapped[str] = mapped_column(String(30))
    modul: Mapped[str] = mapped_column(String(50))
    deskripsi: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index('ix_activity_log_user', 'user_type', 'user_id'),
        Index('ix_activity_log_created_at', 'created_at'),
    )
