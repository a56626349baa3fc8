"""订单查询服务 - 查找待开票配件、读取订单开票字段"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from parts_billing.core.errors import OrderNotFoundError
from parts_billing.repositories.interfaces import LineItemRepository, OrderRepository
from parts_billing.schemas.invoice import LineItem, OrderBilling, line_items_adapter

logger = logging.getLogger(__name__)

ORDER_BILLING_FIELDS = [
    "id", "delivery_fees", "wallet_payment_amount", "discount_amount", "invoice_ids"
]


class OrderService:
    def __init__(
        self,
        order_repo: OrderRepository,
        order_part_repo: LineItemRepository,
        request_part_repo: LineItemRepository,
    ):
        self.order_repo = order_repo
        self.order_part_repo = order_part_repo
        self.request_part_repo = request_part_repo

    async def get_all_parts(self, from_date: datetime) -> List[Dict[str, Any]]:
        """
        获取 from_date 之后创建、尚未开票的全部配件

        现货/配额配件要求履约完成，询价配件要求报价完成，两类并发查询后合并。
        返回原始记录，由调用方按订单分组后再用 parse_line_items 校验，
        一条坏记录只影响它所在的订单。
        """
        order_parts, request_parts = await asyncio.gather(
            self.order_part_repo.find_unbilled(from_date),
            self.request_part_repo.find_unbilled(from_date),
        )
        logger.debug(
            f"待开票配件: 现货/配额 {len(order_parts)} 个, 询价 {len(request_parts)} 个"
        )
        return request_parts + order_parts

    @staticmethod
    def parse_line_items(rows: List[Dict[str, Any]]) -> List[LineItem]:
        """按 item_class 校验为对应配件类型，价格缺失或类型未知时抛 ValidationError"""
        return line_items_adapter.validate_python(rows)

    async def get_earliest_pending_date(self, from_date: datetime) -> Optional[datetime]:
        """from_date 之后创建、仍未开票的配件中最早的创建时间（含未完成履约/报价的）"""
        dates = await asyncio.gather(
            self.order_part_repo.find_earliest_unbilled(from_date),
            self.request_part_repo.find_earliest_unbilled(from_date),
        )
        pending = [d for d in dates if d is not None]
        return min(pending) if pending else None

    async def get_order_by_id(
        self,
        order_id: int,
        fields: Sequence[str] = ORDER_BILLING_FIELDS,
    ) -> OrderBilling:
        row = await self.order_repo.find_by_id(order_id, fields)
        if row is None:
            raise OrderNotFoundError(order_id)
        return OrderBilling.model_validate(
            {key: value for key, value in row.items() if value is not None}
        )
