"""各实体的 SQLAlchemy 仓储实现"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from parts_billing.models import Invoice, Order, OrderPart, Part, PartClass, SystemConfig
from parts_billing.repositories.base import SqlAlchemyRepository
from parts_billing.repositories.interfaces import (
    InvoiceRepository, LineItemRepository, OrderRepository, WatermarkStore
)

WATERMARK_KEY = "invoice_watermark"


def _with_item_class(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    for row in rows:
        row["item_class"] = row.pop("part_class")
    return rows


class SqlOrderRepository(SqlAlchemyRepository[Order], OrderRepository):
    model = Order

    async def find_by_id(self, order_id: int, fields: Sequence[str]) -> Optional[Dict[str, Any]]:
        return await self.find_one(Order.id == order_id, fields=fields)

    async def add_invoice(self, order_id: int, invoice_id: int) -> None:
        await self.update_one(Order.id == order_id, add_to_set={"invoice_ids": invoice_id})


class SqlInvoiceRepository(SqlAlchemyRepository[Invoice], InvoiceRepository):
    model = Invoice

    async def find_by_order(self, order_id: int, fields: Sequence[str]) -> List[Dict[str, Any]]:
        return await self.find(Invoice.order_id == order_id, fields=fields, order_by=Invoice.id)


class SqlOrderPartRepository(SqlAlchemyRepository[OrderPart], LineItemRepository):
    """现货/配额配件"""
    model = OrderPart

    async def find_unbilled(self, since: datetime) -> List[Dict[str, Any]]:
        rows = await self.find(
            OrderPart.created_at > since,
            OrderPart.fulfillment_completed_at.is_not(None),
            OrderPart.invoice_id.is_(None),
            fields=["id", "order_id", "part_class", "price_before_discount", "created_at"],
        )
        return _with_item_class(rows)

    async def find_earliest_unbilled(self, since: datetime) -> Optional[datetime]:
        return await self.find_min(
            "created_at",
            OrderPart.created_at > since,
            OrderPart.invoice_id.is_(None),
        )

    async def stamp_invoice(self, item_id: int, invoice_id: int) -> None:
        await self.update_one(OrderPart.id == item_id, set_values={"invoice_id": invoice_id})


class SqlRequestPartRepository(SqlAlchemyRepository[Part], LineItemRepository):
    """询价配件"""
    model = Part

    async def find_unbilled(self, since: datetime) -> List[Dict[str, Any]]:
        rows = await self.find(
            Part.order_id.is_not(None),
            Part.created_at > since,
            Part.part_class == PartClass.REQUEST.value,
            Part.priced_at.is_not(None),
            Part.invoice_id.is_(None),
            fields=["id", "order_id", "part_class", "premium_price_before_discount", "created_at"],
        )
        return _with_item_class(rows)

    async def find_earliest_unbilled(self, since: datetime) -> Optional[datetime]:
        return await self.find_min(
            "created_at",
            Part.order_id.is_not(None),
            Part.created_at > since,
            Part.part_class == PartClass.REQUEST.value,
            Part.invoice_id.is_(None),
        )

    async def stamp_invoice(self, item_id: int, invoice_id: int) -> None:
        await self.update_one(Part.id == item_id, set_values={"invoice_id": invoice_id})


class SqlWatermarkStore(SqlAlchemyRepository[SystemConfig], WatermarkStore):
    """开票水位线，存在 system_config 表"""
    model = SystemConfig

    async def get_watermark(self) -> Optional[datetime]:
        row = await self.find_one(SystemConfig.key == WATERMARK_KEY, fields=["value"])
        if not row or not row["value"]:
            return None
        return datetime.fromisoformat(row["value"])

    async def set_watermark(self, value: datetime) -> None:
        matched = await self.update_one(
            SystemConfig.key == WATERMARK_KEY,
            set_values={"value": value.isoformat()},
        )
        if not matched:
            await self.create({"key": WATERMARK_KEY, "value": value.isoformat()})
