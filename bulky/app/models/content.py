"""Marketing content: blog, video, event/promo banners and the FAQ document."""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Table, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bulky.app.core.base import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class OrderedCategoryMixin(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin):
    nama: Mapped[str] = mapped_column(String(100))
    slug: Mapped[str] = mapped_column(String(120))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    urutan: Mapped[int] = mapped_column(Integer, default=0)


class KategoriBlog(OrderedCategoryMixin, Base):
    __tablename__ = 'kategori_blog'


class KategoriVideo(OrderedCategoryMixin, Base):
    __tablename__ = 'kategori_video'


class LabelBlog(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = 'label_blog'
    nama: Mapped[str] = mapped_column(String(100))
    slug: Mapped[str] = mapped_column(String(120))
    urutan: Mapped[int] = mapped_column(Integer, default=0)


blog_label = Table(
    'blog_label',
    Base.metadata,
    Column('blog_id', Uuid, ForeignKey('blog.id', ondelete='CASCADE'), primary_key=True),
    Column('label_id', Uuid, ForeignKey('label_blog.id', ondelete='CASCADE'), primary_key=True),
)


class Blog(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = 'blog'
    judul_id: Mapped[str] = mapped_column(String(200))
    judul_en: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    slug: Mapped[str] = mapped_column(String(250))
    konten_id: Mapped[str] = mapped_column(Text)
    konten_en: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    deskripsi_singkat_id: Mapped[str] = mapped_column(String(500))
    deskripsi_singkat_en: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    featured_image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    kategori_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('kategori_blog.id'))
    meta_title_id: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    meta_title_en: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    meta_description_id: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    meta_description_en: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    meta_keywords: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    kategori: Mapped[KategoriBlog] = relationship(lazy='selectin')
    labels: Mapped[list[LabelBlog]] = relationship(secondary=blog_label, lazy='selectin')

    __table_args__ = (
        Index('ix_blog_slug', 'slug'),
        Index('ix_blog_kategori_id', 'kategori_id'),
    )


class Video(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = 'video'
    judul_id: Mapped[str] = mapped_column(String(200))
    judul_en: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    slug: Mapped[str] = mapped_column(String(250))
    deskripsi_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    deskripsi_en: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    video_url: Mapped[str] = mapped_column(String(500))
    thumbnail_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    kategori_id: Mapped[uuid.UUID] = mapped_column(ForeignKey('kategori_video.id'))
    durasi_detik: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=False)
    view_count: Mapped[int] = mapped_column(Integer, default=0)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    kategori: Mapped[KategoriVideo] = relationship(lazy='selectin')

    __table_args__ = (
        Index('ix_video_slug', 'slug'),
        Index('ix_video_kategori_id', 'kategori_id'),
    )


class BannerEventPromo(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = 'banner_event_promo'
    nama: Mapped[str] = mapped_column(String(100))
    gambar_url_id: Mapped[str] = mapped_column(String(500))
    gambar_url_en: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    # [{"id": "<kategori uuid>", "slug": "..."}]
    tujuan: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    urutan: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    tanggal_mulai: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    tanggal_selesai: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def is_currently_visible(self, now: Optional[datetime] = None) -> bool:
        if not self.is_active:
            return False
        now = now or datetime.utcnow()
        if self.tanggal_mulai and now < self.tanggal_mulai:
            return False
        if self.tanggal_selesai and now > self.tanggal_selesai:
            return False
        return True


class Faq(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = 'faq'
    judul: Mapped[str] = mapped_column(String(200))
    judul_en: Mapped[str] = mapped_column(String(200))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # [{"question", "question_en", "answer", "answer_en"}]
    items: Mapped[list] = mapped_column(JSON, default=list)
