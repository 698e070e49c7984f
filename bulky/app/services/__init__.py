# bulky/app/services/__init__.py
"""
Services layer for business logic.
Keeps API endpoints thin and business logic testable and reusable.
"""

from bulky.app.services.auth import AuthService, AuthServiceError
from bulky.app.services.admins import AdminService, AdminServiceError, AdminNotFoundError
from bulky.app.services.buyers import BuyerService, BuyerServiceError, BuyerNotFoundError
from bulky.app.services.alamat import AlamatService, AlamatServiceError
from bulky.app.services.wilayah import WilayahService, WilayahServiceError
from bulky.app.services.master import MasterDataService, MasterDataServiceError
from bulky.app.services.produk import ProdukService, ProdukServiceError, compute_harga_sesudah_diskon
from bulky.app.services.kupon import KuponService, KuponServiceError
from bulky.app.services.pesanan import PesananService, PesananServiceError, InvalidStatusTransitionError
from bulky.app.services.ulasan import UlasanService, UlasanServiceError
from bulky.app.services.content_kategori import ContentKategoriService
from bulky.app.services.blog import BlogService, BlogServiceError
from bulky.app.services.video import VideoService
from bulky.app.services.banner import BannerService, BannerServiceError
from bulky.app.services.faq import FaqService, FaqServiceError
from bulky.app.services.reorder import ReorderService, ReorderError
from bulky.app.services.cache import CacheService

__all__ = [
    # Auth and accounts
    "AuthService",
    "AuthServiceError",
    "AdminService",
    "AdminServiceError",
    "AdminNotFoundError",
    "BuyerService",
    "BuyerServiceError",
    "BuyerNotFoundError",
    "AlamatService",
    "AlamatServiceError",
    # Reference data
    "WilayahService",
    "WilayahServiceError",
    "MasterDataService",
    "MasterDataServiceError",
    # Catalog and orders
    "ProdukService",
    "ProdukServiceError",
    "compute_harga_sesudah_diskon",
    "KuponService",
    "KuponServiceError",
    "PesananService",
    "PesananServiceError",
    "InvalidStatusTransitionError",
    "UlasanService",
    "UlasanServiceError",
    # Content
    "ContentKategoriService",
    "BlogService",
    "BlogServiceError",
    "VideoService",
    "BannerService",
    "BannerServiceError",
    "FaqService",
    "FaqServiceError",
    # Shared
    "ReorderService",
    "ReorderError",
    "CacheService",
]
