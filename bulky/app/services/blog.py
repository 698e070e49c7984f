# bulky/app/services/blog.py
"""Blog posts with bilingual fields, categories and labels."""
from typing import Any, Dict

from sqlalchemy import select

from bulky.app.core.exceptions import ServiceError
from bulky.app.models.content import Blog, KategoriBlog, LabelBlog
from bulky.app.services.published import PublishedContentService


class BlogServiceError(ServiceError):
    """Base exception for blog service errors."""


def blog_to_dict(blog: Blog) -> Dict[str, Any]:
    return {
        "id": blog.id,
        "judul_id": blog.judul_id,
        "judul_en": blog.judul_en,
        "slug": blog.slug,
        "konten_id": blog.konten_id,
        "konten_en": blog.konten_en,
        "deskripsi_singkat_id": blog.deskripsi_singkat_id,
        "deskripsi_singkat_en": blog.deskripsi_singkat_en,
        "featured_image_url": blog.featured_image_url,
        "kategori": {"id": blog.kategori.id, "nama": blog.kategori.nama, "slug": blog.kategori.slug},
        "labels": [{"id": label.id, "nama": label.nama, "slug": label.slug} for label in blog.labels],
        "meta_title_id": blog.meta_title_id,
        "meta_title_en": blog.meta_title_en,
        "meta_description_id": blog.meta_description_id,
        "meta_description_en": blog.meta_description_en,
        "meta_keywords": blog.meta_keywords,
        "is_active": blog.is_active,
        "view_count": blog.view_count,
        "published_at": blog.published_at,
        "created_at": blog.created_at,
        "updated_at": blog.updated_at,
    }


class BlogService(PublishedContentService):
    model = Blog
    kategori_model = KategoriBlog
    label = "blog"
    stat_prefix = "blog"
    search_columns = ("judul_id", "judul_en", "deskripsi_singkat_id", "deskripsi_singkat_en")
    fields = (
        "judul_id", "judul_en", "konten_id", "konten_en",
        "deskripsi_singkat_id", "deskripsi_singkat_en", "featured_image_url",
        "meta_title_id", "meta_title_en", "meta_description_id", "meta_description_en",
        "meta_keywords",
    )

    def to_dict(self, obj: Blog) -> Dict[str, Any]:
        return blog_to_dict(obj)

    async def _apply(self, obj: Blog, data: Dict[str, Any]) -> None:
        """Replace the label set when label_ids is sent."""
        label_ids = data.get("label_ids")
        if label_ids is None:
            return
        labels = []
        if label_ids:
            result = await self.session.execute(
                select(LabelBlog).where(LabelBlog.id.in_(label_ids), LabelBlog.alive())
            )
            labels = list(result.scalars().all())
            if len(labels) != len(set(label_ids)):
                raise BlogServiceError("satu atau lebih label tidak ditemukan")
        obj.labels = labels
