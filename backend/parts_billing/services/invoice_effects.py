"""
发票创建后的回写

三项更新相互独立、并发执行：
- 订单 invoice_ids 追加发票ID（集合语义，重复执行无副作用）
- 现货/配额配件写入 invoice_id
- 询价配件写入 invoice_id

任一项失败不会回滚发票，已完成的回写也不会撤销。
"""

import asyncio
import logging
from typing import Any, Awaitable, Mapping

from parts_billing.repositories.interfaces import LineItemRepository, OrderRepository

logger = logging.getLogger(__name__)


async def settle(*aws: Awaitable[Any]) -> None:
    """并发执行并等待全部结束，有失败则抛出第一个异常"""
    results = await asyncio.gather(*aws, return_exceptions=True)
    errors = [result for result in results if isinstance(result, BaseException)]
    if errors:
        raise errors[0]


class InvoiceEffects:
    def __init__(
        self,
        order_repo: OrderRepository,
        order_part_repo: LineItemRepository,
        request_part_repo: LineItemRepository,
    ):
        self.order_repo = order_repo
        self.order_part_repo = order_part_repo
        self.request_part_repo = request_part_repo

    async def on_invoice_created(self, invoice: Mapping[str, Any]) -> None:
        effects = [
            self.update_order_by_created_invoice,
            self.update_order_parts,
            self.update_request_parts,
        ]
        await settle(*(effect(invoice) for effect in effects))
        logger.debug(f"发票 {invoice['id']} 已回写订单 {invoice['order_id']}")

    async def update_order_by_created_invoice(self, invoice: Mapping[str, Any]) -> None:
        await self.order_repo.add_invoice(invoice["order_id"], invoice["id"])

    async def update_order_parts(self, invoice: Mapping[str, Any]) -> None:
        await settle(*(
            self.order_part_repo.stamp_invoice(item_id, invoice["id"])
            for item_id in invoice["line_item_ids"]
        ))

    async def update_request_parts(self, invoice: Mapping[str, Any]) -> None:
        await settle(*(
            self.request_part_repo.stamp_invoice(item_id, invoice["id"])
            for item_id in invoice["request_line_item_ids"]
        ))
