"""
Tests for pure domain rules: discounted price, the order status machine,
coupon expiry/usage and banner visibility windows.
"""
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from bulky.app.models.content import BannerEventPromo
from bulky.app.models.kupon import Kupon
from bulky.app.services.pesanan import InvalidStatusTransitionError, validate_transition
from bulky.app.services.produk import compute_harga_sesudah_diskon


# --- compute_harga_sesudah_diskon ---


@pytest.mark.parametrize("harga,persen,expected", [
    ("100000", "10", "90000.00"),
    ("250000", "12.5", "218750.00"),
    ("99999", "33.33", "66669.33"),
    ("50000", None, "50000.00"),
    ("50000", "100", "0.00"),
])
def test_compute_harga_sesudah_diskon(harga, persen, expected):
    persentase = Decimal(persen) if persen is not None else None
    assert compute_harga_sesudah_diskon(Decimal(harga), persentase) == Decimal(expected)


# --- validate_transition ---


@pytest.mark.parametrize("status_from,status_to", [
    ("PENDING", "PROCESSING"),
    ("PROCESSING", "READY"),
    ("READY", "SHIPPED"),
    ("SHIPPED", "COMPLETED"),
    ("PENDING", "CANCELLED"),
    ("SHIPPED", "CANCELLED"),
])
def test_allowed_transitions(status_from, status_to):
    validate_transition(status_from, status_to)


@pytest.mark.parametrize("status_from,status_to", [
    ("PENDING", "COMPLETED"),
    ("READY", "PROCESSING"),
    ("COMPLETED", "CANCELLED"),
    ("CANCELLED", "PENDING"),
    ("PENDING", "PENDING"),
])
def test_rejected_transitions(status_from, status_to):
    with pytest.raises(InvalidStatusTransitionError) as exc:
        validate_transition(status_from, status_to)
    assert exc.value.status_code == 400
    assert exc.value.message == f"tidak dapat mengubah status dari {status_from} ke {status_to}"


# --- Kupon ---


def _kupon(limit=None, expires=None) -> Kupon:
    return Kupon(
        kode="TEST",
        nama="Test",
        jenis_diskon="persentase",
        nilai_diskon=Decimal("10"),
        limit_pemakaian=limit,
        tanggal_kedaluarsa=expires or date.today(),
    )


def test_kupon_valid_through_expiry_day():
    kupon = _kupon(expires=date(2026, 3, 1))
    assert kupon.is_expired(datetime(2026, 3, 1, 23, 59)) is False
    assert kupon.is_expired(datetime(2026, 3, 2, 0, 0, 1)) is True


def test_kupon_without_limit():
    kupon = _kupon()
    assert kupon.remaining_usage(100) is None
    assert kupon.is_limit_reached(100) is False


def test_kupon_remaining_usage():
    kupon = _kupon(limit=3)
    assert kupon.remaining_usage(1) == 2
    assert kupon.remaining_usage(3) == 0
    assert kupon.remaining_usage(5) == -2
    assert kupon.is_limit_reached(3) is True


# --- Banner visibility ---


def _banner(is_active=True, mulai=None, selesai=None) -> BannerEventPromo:
    return BannerEventPromo(
        nama="Promo", gambar_url_id="/x.webp", is_active=is_active,
        tanggal_mulai=mulai, tanggal_selesai=selesai,
    )


def test_banner_without_window_visible():
    assert _banner().is_currently_visible() is True


def test_inactive_banner_hidden():
    assert _banner(is_active=False).is_currently_visible() is False


def test_banner_window():
    now = datetime(2026, 6, 15, 12, 0)
    banner = _banner(mulai=now - timedelta(days=1), selesai=now + timedelta(days=1))
    assert banner.is_currently_visible(now) is True
    assert banner.is_currently_visible(now + timedelta(days=2)) is False
    assert banner.is_currently_visible(now - timedelta(days=2)) is False
