# bulky/app/services/alamat.py
"""
Buyer address book. A buyer has at most one default address; the first
address saved is always the default.
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bulky.app.core.exceptions import NotFoundError, ServiceError
from bulky.app.core.logging import get_logger
from bulky.app.models.wilayah import AlamatBuyer, Kelurahan

logger = get_logger(__name__)

EDITABLE_FIELDS = (
    "kelurahan_id", "label", "nama_penerima", "telepon_penerima",
    "kode_pos", "alamat_lengkap", "catatan",
)


class AlamatServiceError(ServiceError):
    """Base exception for address service errors."""


def alamat_to_dict(alamat: AlamatBuyer) -> Dict[str, Any]:
    kel = alamat.kelurahan
    kec = kel.kecamatan
    kota = kec.kota
    return {
        "id": alamat.id,
        "label": alamat.label,
        "nama_penerima": alamat.nama_penerima,
        "telepon_penerima": alamat.telepon_penerima,
        "kode_pos": alamat.kode_pos,
        "alamat_lengkap": alamat.alamat_lengkap,
        "catatan": alamat.catatan,
        "is_default": alamat.is_default,
        "wilayah": {
            "kelurahan": {"id": kel.id, "nama": kel.nama},
            "kecamatan": {"id": kec.id, "nama": kec.nama},
            "kota": {"id": kota.id, "nama": kota.nama},
            "provinsi": {"id": kota.provinsi.id, "nama": kota.provinsi.nama},
        },
        "alamat_lengkap_formatted": alamat.formatted(),
        "created_at": alamat.created_at,
        "updated_at": alamat.updated_at,
    }


class AlamatService:

    def __init__(self, session: AsyncSession, buyer_id: uuid.UUID):
        self.session = session
        self.buyer_id = buyer_id

    async def _get(self, alamat_id: uuid.UUID) -> AlamatBuyer:
        # Another buyer's address looks exactly like a missing one
        result = await self.session.execute(
            select(AlamatBuyer).where(
                AlamatBuyer.id == alamat_id,
                AlamatBuyer.buyer_id == self.buyer_id,
                AlamatBuyer.alive(),
            )
        )
        alamat = result.scalar_one_or_none()
        if not alamat:
            raise NotFoundError("alamat tidak ditemukan")
        return alamat

    async def _count(self) -> int:
        result = await self.session.execute(
            select(func.count(AlamatBuyer.id))
            .where(AlamatBuyer.buyer_id == self.buyer_id, AlamatBuyer.alive())
        )
        return result.scalar_one()

    async def _ensure_kelurahan(self, kelurahan_id: uuid.UUID) -> None:
        if not await self.session.get(Kelurahan, kelurahan_id):
            raise NotFoundError("kelurahan tidak ditemukan")

    async def _clear_defaults(self, except_id: Optional[uuid.UUID] = None) -> None:
        stmt = update(AlamatBuyer).where(
            AlamatBuyer.buyer_id == self.buyer_id,
            AlamatBuyer.is_default.is_(True),
            AlamatBuyer.alive(),
        )
        if except_id is not None:
            stmt = stmt.where(AlamatBuyer.id != except_id)
        await self.session.execute(
            stmt.values(is_default=False).execution_options(synchronize_session="fetch")
        )

    async def _reload(self, alamat_id: uuid.UUID) -> Dict[str, Any]:
        alamat = await self._get(alamat_id)
        await self.session.refresh(alamat, ["kelurahan"])
        return alamat_to_dict(alamat)

    async def list(self) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            select(AlamatBuyer)
            .where(AlamatBuyer.buyer_id == self.buyer_id, AlamatBuyer.alive())
            .order_by(AlamatBuyer.is_default.desc(), AlamatBuyer.created_at.desc())
        )
        return [alamat_to_dict(a) for a in result.scalars().all()]

    async def detail(self, alamat_id: uuid.UUID) -> Dict[str, Any]:
        return alamat_to_dict(await self._get(alamat_id))

    async def create(self, data: Dict[str, Any], is_default: bool = False) -> Dict[str, Any]:
        await self._ensure_kelurahan(data["kelurahan_id"])
        if await self._count() == 0:
            is_default = True
        if is_default:
            await self._clear_defaults()

        alamat = AlamatBuyer(
            buyer_id=self.buyer_id,
            is_default=is_default,
            **{k: data.get(k) for k in EDITABLE_FIELDS},
        )
        self.session.add(alamat)
        await self.session.commit()
        logger.info("Alamat created", buyer_id=str(self.buyer_id), alamat_id=str(alamat.id))
        return await self._reload(alamat.id)

    async def update(self, alamat_id: uuid.UUID, data: Dict[str, Any]) -> Dict[str, Any]:
        """Partial update; ``data`` holds only the fields that were sent."""
        alamat = await self._get(alamat_id)
        if data.get("kelurahan_id") and data["kelurahan_id"] != alamat.kelurahan_id:
            await self._ensure_kelurahan(data["kelurahan_id"])
        for field in EDITABLE_FIELDS:
            if field in data and data[field] is not None:
                setattr(alamat, field, data[field])

        if data.get("is_default") is True and not alamat.is_default:
            await self._clear_defaults(except_id=alamat_id)
            alamat.is_default = True
        await self.session.commit()
        return await self._reload(alamat_id)

    async def delete(self, alamat_id: uuid.UUID) -> None:
        alamat = await self._get(alamat_id)
        if alamat.is_default and await self._count() > 1:
            raise AlamatServiceError("tidak dapat menghapus alamat default")
        # Orders keep pointing at the row, so it is only marked deleted
        alamat.deleted_at = datetime.utcnow()
        alamat.is_default = False
        await self.session.commit()
        logger.info("Alamat deleted", buyer_id=str(self.buyer_id), alamat_id=str(alamat_id))

    async def set_default(self, alamat_id: uuid.UUID) -> Dict[str, Any]:
        alamat = await self._get(alamat_id)
        await self._clear_defaults(except_id=alamat_id)
        alamat.is_default = True
        await self.session.commit()
        return alamat_to_dict(alamat)
