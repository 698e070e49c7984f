# bulky/app/services/video.py
from typing import Any, Dict

from bulky.app.models.content import KategoriVideo, Video
from bulky.app.services.published import PublishedContentService


def video_to_dict(video: Video) -> Dict[str, Any]:
    return {
        "id": video.id,
        "judul_id": video.judul_id,
        "judul_en": video.judul_en,
        "slug": video.slug,
        "deskripsi_id": video.deskripsi_id,
        "deskripsi_en": video.deskripsi_en,
        "video_url": video.video_url,
        "thumbnail_url": video.thumbnail_url,
        "kategori": {"id": video.kategori.id, "nama": video.kategori.nama, "slug": video.kategori.slug},
        "durasi_detik": video.durasi_detik,
        "is_active": video.is_active,
        "view_count": video.view_count,
        "published_at": video.published_at,
        "created_at": video.created_at,
        "updated_at": video.updated_at,
    }


class VideoService(PublishedContentService):
    model = Video
    kategori_model = KategoriVideo
    label = "video"
    stat_prefix = "video"
    search_columns = ("judul_id", "judul_en", "deskripsi_id", "deskripsi_en")
    fields = (
        "judul_id", "judul_en", "deskripsi_id", "deskripsi_en",
        "video_url", "thumbnail_url", "durasi_detik",
    )

    def to_dict(self, obj: Video) -> Dict[str, Any]:
        return video_to_dict(obj)
