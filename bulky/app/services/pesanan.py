# bulky/app/services/pesanan.py
"""
Order (pesanan) service for the admin panel and the buyer's order history.
"""
import uuid
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.constants import (
    ORDER_CANCELLED,
    ORDER_STATUS_TIMESTAMP,
    ORDER_STATUS_TRANSITIONS,
    ORDER_STATUSES,
    PAYMENT_PAID,
    STATUS_TYPE_ORDER,
)
from bulky.app.core.exceptions import NotFoundError, ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.core.metrics import pesanan_status_changes_total
from bulky.app.core.responses import offset_for
from bulky.app.models.auth import Buyer
from bulky.app.models.pesanan import Pesanan, PesananStatusHistory
from bulky.app.models.wilayah import AlamatBuyer
from bulky.app.services.alamat import alamat_to_dict

logger = get_logger(__name__)

SORT_COLUMNS = {
    "created_at": Pesanan.created_at,
    "total": Pesanan.total,
    "kode": Pesanan.kode,
}

STATISTICS_DEFAULT_DAYS = 30


class PesananServiceError(ServiceError):
    """Base exception for order service errors."""


class InvalidStatusTransitionError(PesananServiceError):
    def __init__(self, status_from: str, status_to: str):
        super().__init__(f"tidak dapat mengubah status dari {status_from} ke {status_to}")


def validate_transition(status_from: str, status_to: str) -> None:
    if status_to not in ORDER_STATUS_TRANSITIONS.get(status_from, ()):
        raise InvalidStatusTransitionError(status_from, status_to)


def pesanan_to_list_dict(p: Pesanan) -> Dict[str, Any]:
    return {
        "id": p.id,
        "kode": p.kode,
        "buyer": {"id": p.buyer_id, "nama": p.buyer.nama, "email": p.buyer.email},
        "delivery_type": p.delivery_type,
        "payment_type": p.payment_type,
        "payment_status": p.payment_status,
        "order_status": p.order_status,
        "total_item": len(p.items),
        "biaya_produk": p.biaya_produk,
        "biaya_pengiriman": p.biaya_pengiriman,
        "biaya_ppn": p.biaya_ppn,
        "biaya_lainnya": p.biaya_lainnya,
        "total": p.total,
        "created_at": p.created_at,
        "updated_at": p.updated_at,
    }


def pesanan_to_detail_dict(p: Pesanan, alamat: Optional[AlamatBuyer] = None) -> Dict[str, Any]:
    data = pesanan_to_list_dict(p)
    data["buyer"]["telepon"] = p.buyer.telepon
    data.update({
        "items": [
            {
                "id": item.id,
                "produk_id": item.produk_id,
                "nama_produk": item.nama_produk,
                "sku": item.sku,
                "qty": item.qty,
                "harga_satuan": item.harga_satuan,
                "diskon_satuan": item.diskon_satuan,
                "subtotal": item.subtotal,
            }
            for item in p.items
        ],
        "pembayaran": [
            {
                "id": bayar.id,
                "buyer_id": bayar.buyer_id,
                "metode_pembayaran": bayar.metode_pembayaran,
                "jumlah": bayar.jumlah,
                "status": bayar.status,
                "paid_at": bayar.paid_at,
            }
            for bayar in p.pembayaran
        ],
        "status_history": [
            {
                "status_from": h.status_from,
                "status_to": h.status_to,
                "status_type": h.status_type,
                "note": h.note,
                "changed_by": {"id": h.admin.id, "nama": h.admin.nama} if h.admin else None,
                "created_at": h.created_at,
            }
            for h in p.status_history
        ],
        "alamat_pengiriman": alamat_to_dict(alamat) if alamat else None,
        "catatan": p.catatan,
        "catatan_admin": p.catatan_admin,
        "cancelled_reason": p.cancelled_reason,
        "deliveree_booking_id": p.deliveree_booking_id,
        "forwarder_tracking_no": p.forwarder_tracking_no,
        "expired_at": p.expired_at,
        "paid_at": p.paid_at,
        "processed_at": p.processed_at,
        "ready_at": p.ready_at,
        "shipped_at": p.shipped_at,
        "completed_at": p.completed_at,
        "cancelled_at": p.cancelled_at,
    })
    return data


class PesananService:

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get(self, pesanan_id: uuid.UUID) -> Pesanan:
        result = await self.session.execute(
            select(Pesanan).where(Pesanan.id == pesanan_id, Pesanan.alive())
        )
        pesanan = result.scalar_one_or_none()
        if not pesanan:
            raise NotFoundError("pesanan tidak ditemukan")
        return pesanan

    async def _detail(self, pesanan: Pesanan) -> Dict[str, Any]:
        alamat = None
        if pesanan.alamat_buyer_id:
            alamat = await self.session.get(AlamatBuyer, pesanan.alamat_buyer_id)
        return pesanan_to_detail_dict(pesanan, alamat)

    # ----- Admin -----

    async def list_pesanan(
        self,
        page: int,
        per_page: int,
        cari: Optional[str] = None,
        order_status: Optional[str] = None,
        payment_status: Optional[str] = None,
        delivery_type: Optional[str] = None,
        tanggal_dari: Optional[date] = None,
        tanggal_sampai: Optional[date] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = select(Pesanan).join(Buyer, Buyer.id == Pesanan.buyer_id).where(Pesanan.alive())
        if cari:
            pattern = f"%{cari.lower()}%"
            query = query.where(or_(
                func.lower(Pesanan.kode).like(pattern),
                func.lower(Buyer.nama).like(pattern),
            ))
        if order_status:
            query = query.where(Pesanan.order_status == order_status)
        if payment_status:
            query = query.where(Pesanan.payment_status == payment_status)
        if delivery_type:
            query = query.where(Pesanan.delivery_type == delivery_type)
        if tanggal_dari:
            query = query.where(Pesanan.created_at >= datetime.combine(tanggal_dari, time.min))
        if tanggal_sampai:
            query = query.where(Pesanan.created_at <= datetime.combine(tanggal_sampai, time.max))

        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()

        column = SORT_COLUMNS.get(sort_by, Pesanan.created_at)
        order = column.asc() if sort_order == "asc" else column.desc()
        result = await self.session.execute(
            query.order_by(order).offset(offset_for(page, per_page)).limit(per_page)
        )
        return [pesanan_to_list_dict(p) for p in result.scalars().all()], total

    async def get_pesanan(self, pesanan_id: uuid.UUID) -> Dict[str, Any]:
        return await self._detail(await self._get(pesanan_id))

    async def update_status(
        self,
        pesanan_id: uuid.UUID,
        order_status: str,
        admin_id: uuid.UUID,
        note: Optional[str] = None,
        catatan_admin: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Move an order along the status machine.

        The matching timestamp column is stamped and a history row is written
        in the same transaction. Cancelling stores the note as the reason.
        """
        if order_status not in ORDER_STATUSES:
            raise PesananServiceError("status pesanan tidak valid")
        pesanan = await self._get(pesanan_id)
        previous = pesanan.order_status
        validate_transition(previous, order_status)

        now = datetime.utcnow()
        pesanan.order_status = order_status
        setattr(pesanan, ORDER_STATUS_TIMESTAMP[order_status], now)
        if order_status == ORDER_CANCELLED:
            pesanan.cancelled_reason = note
        if catatan_admin is not None:
            pesanan.catatan_admin = catatan_admin

        self.session.add(PesananStatusHistory(
            pesanan_id=pesanan.id,
            status_from=previous,
            status_to=order_status,
            status_type=STATUS_TYPE_ORDER,
            changed_by=admin_id,
            note=note,
        ))
        await self.session.commit()
        pesanan_status_changes_total.labels(status_to=order_status).inc()
        logger.info(
            "Pesanan status changed",
            pesanan_id=str(pesanan_id),
            status_from=previous,
            status_to=order_status,
            admin_id=str(admin_id),
        )
        return {
            "id": pesanan.id,
            "kode": pesanan.kode,
            "order_status": order_status,
            "previous_status": previous,
            "updated_at": pesanan.updated_at,
            "updated_by": admin_id,
        }

    async def delete_pesanan(self, pesanan_id: uuid.UUID) -> None:
        pesanan = await self._get(pesanan_id)
        if pesanan.order_status != ORDER_CANCELLED:
            raise PesananServiceError("hanya pesanan yang dibatalkan yang dapat dihapus")
        pesanan.deleted_at = datetime.utcnow()
        await self.session.commit()
        logger.info("Pesanan deleted", pesanan_id=str(pesanan_id))

    async def get_statistik(
        self,
        tanggal_dari: Optional[date] = None,
        tanggal_sampai: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        now = now or datetime.utcnow()
        start = datetime.combine(tanggal_dari, time.min) if tanggal_dari else now - timedelta(days=STATISTICS_DEFAULT_DAYS)
        end = datetime.combine(tanggal_sampai, time.max) if tanggal_sampai else now
        window = (Pesanan.alive(), Pesanan.created_at >= start, Pesanan.created_at <= end)

        total_pesanan = (await self.session.execute(
            select(func.count(Pesanan.id)).where(*window)
        )).scalar_one()
        total_revenue = (await self.session.execute(
            select(func.coalesce(func.sum(Pesanan.total), 0))
            .where(*window, Pesanan.payment_status == PAYMENT_PAID)
        )).scalar_one()

        async def grouped(column) -> Dict[str, int]:
            result = await self.session.execute(
                select(column, func.count(Pesanan.id)).where(*window).group_by(column)
            )
            return {row[0]: row[1] for row in result.all()}

        return {
            "tanggal_dari": start,
            "tanggal_sampai": end,
            "total_pesanan": total_pesanan,
            "total_revenue": total_revenue,
            "per_status": await grouped(Pesanan.order_status),
            "per_delivery_type": await grouped(Pesanan.delivery_type),
            "per_payment_status": await grouped(Pesanan.payment_status),
        }

    # ----- Buyer -----

    async def list_for_buyer(
        self,
        buyer_id: uuid.UUID,
        page: int,
        per_page: int,
        order_status: Optional[str] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = select(Pesanan).where(Pesanan.buyer_id == buyer_id, Pesanan.alive())
        if order_status:
            query = query.where(Pesanan.order_status == order_status)
        total = (await self.session.execute(
            select(func.count()).select_from(query.subquery())
        )).scalar_one()
        result = await self.session.execute(
            query.order_by(Pesanan.created_at.desc()).offset(offset_for(page, per_page)).limit(per_page)
        )
        return [pesanan_to_list_dict(p) for p in result.scalars().all()], total

    async def get_for_buyer(self, buyer_id: uuid.UUID, pesanan_id: uuid.UUID) -> Dict[str, Any]:
        pesanan = await self._get(pesanan_id)
        if pesanan.buyer_id != buyer_id:
            raise NotFoundError("pesanan tidak ditemukan")
        return await self._detail(pesanan)
