"""
开票服务 - 每日定时运行

流程：读取水位线 → 查询待开票配件 → 按订单分组 → 逐个订单：
并发读取订单和历史发票 → 计算金额 → 创建发票 → 回写订单和配件

订单之间顺序执行、互不影响：某个订单失败只记录错误，继续处理下一个订单。
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from parts_billing.core.config import settings
from parts_billing.core.errors import NegativeAmountError
from parts_billing.core.logging_config import report_error
from parts_billing.repositories import (
    SqlInvoiceRepository, SqlOrderPartRepository, SqlOrderRepository,
    SqlRequestPartRepository, SqlWatermarkStore,
)
from parts_billing.repositories.interfaces import InvoiceRepository, WatermarkStore
from parts_billing.schemas.invoice import (
    GroupResult, GroupStatus, InvoiceRunReport, PriorInvoice
)
from parts_billing.services.invoice_calculator import calculate_invoice_amounts
from parts_billing.services.invoice_effects import InvoiceEffects
from parts_billing.services.order_service import ORDER_BILLING_FIELDS, OrderService
from parts_billing.utils.fp import group_by, prop_eq

logger = logging.getLogger(__name__)

PRIOR_INVOICE_FIELDS = ["id", "wallet_payment_amount", "discount_amount", "delivery_fees"]


class CreateInvoiceService:
    def __init__(
        self,
        order_service: OrderService,
        invoice_repo: InvoiceRepository,
        effects: InvoiceEffects,
        watermark_store: WatermarkStore,
        initial_watermark: Optional[datetime] = None,
    ):
        self.order_service = order_service
        self.invoice_repo = invoice_repo
        self.effects = effects
        self.watermark_store = watermark_store
        self.initial_watermark = initial_watermark or settings.INVOICE_INITIAL_WATERMARK

    async def create(self) -> InvoiceRunReport:
        """执行一次开票，返回运行汇总（不抛异常）"""
        started_at = datetime.utcnow()
        try:
            since = await self.watermark_store.get_watermark() or self.initial_watermark
            all_rows = await self.order_service.get_all_parts(since)
        except Exception as e:
            report_error(e)
            return InvoiceRunReport(status="failed", message=f"查询待开票配件失败: {e}")

        groups = group_by(all_rows, "order_id")
        logger.info(f"🧾 开始开票: {len(all_rows)} 个配件, {len(groups)} 个订单, 起点 {since.isoformat()}")

        results: List[GroupResult] = []
        for order_id, rows in groups.items():
            results.append(await self.create_order_invoice(order_id, rows))

        invoice_ids = [
            result.invoice_id
            for result in filter(prop_eq("status", GroupStatus.SUCCESS), results)
        ]
        watermark = await self.advance_watermark(since, started_at)

        message = f"开票完成: 成功 {len(invoice_ids)} 张"
        if len(invoice_ids) < len(results):
            message += f", 失败订单 {len(results) - len(invoice_ids)} 个"
        logger.info(f"✅ {message}")

        return InvoiceRunReport(
            status="success",
            message=message,
            invoice_ids=invoice_ids,
            results=results,
            watermark=watermark,
        )

    async def create_order_invoice(self, order_id: int, rows: List[Dict[str, Any]]) -> GroupResult:
        """为单个订单开票，错误（含配件记录校验失败）只影响本订单"""
        invoice = None
        try:
            order_parts = self.order_service.parse_line_items(rows)
            order, prior_rows = await asyncio.gather(
                self.order_service.get_order_by_id(order_id, ORDER_BILLING_FIELDS),
                self.invoice_repo.find_by_order(order_id, PRIOR_INVOICE_FIELDS),
            )
            prior_invoices = [
                PriorInvoice.model_validate({key: value for key, value in row.items() if value is not None})
                for row in prior_rows
            ]
            amounts = calculate_invoice_amounts(order, order_parts, prior_invoices)

            invoice = await self.invoice_repo.create(amounts.model_dump())
            await self.effects.on_invoice_created(invoice)
        except NegativeAmountError as e:
            report_error(e)
            return GroupResult(order_id=order_id, status=GroupStatus.NEGATIVE_AMOUNT, message=str(e))
        except Exception as e:
            report_error(e)
            # 发票已创建但回写失败时保留发票ID，便于人工补录
            return GroupResult(
                order_id=order_id,
                status=GroupStatus.INFRASTRUCTURE_ERROR,
                invoice_id=invoice["id"] if invoice else None,
                message=str(e),
            )

        logger.info(f"订单 {order_id} 开票成功: 发票 {invoice['id']}, 应付 {amounts.total_amount}")
        return GroupResult(order_id=order_id, status=GroupStatus.SUCCESS, invoice_id=invoice["id"])

    async def advance_watermark(self, since: datetime, started_at: datetime) -> datetime:
        """
        推进水位线

        推进到本次开始时间，但不越过任何仍未开票配件的创建时间
        （失败订单的配件、尚未履约/报价的配件），下次运行仍能查到它们。
        水位线不会后退。
        """
        try:
            earliest = await self.order_service.get_earliest_pending_date(since)
            watermark = started_at
            if earliest is not None:
                watermark = min(started_at, earliest - timedelta(microseconds=1))
            if watermark <= since:
                return since
            await self.watermark_store.set_watermark(watermark)
        except Exception as e:
            report_error(e)
            return since
        return watermark


def build_create_invoice_service(session_factory: async_sessionmaker) -> CreateInvoiceService:
    """用 SQLAlchemy 仓储组装开票服务"""
    order_repo = SqlOrderRepository(session_factory)
    order_part_repo = SqlOrderPartRepository(session_factory)
    request_part_repo = SqlRequestPartRepository(session_factory)
    return CreateInvoiceService(
        order_service=OrderService(order_repo, order_part_repo, request_part_repo),
        invoice_repo=SqlInvoiceRepository(session_factory),
        effects=InvoiceEffects(order_repo, order_part_repo, request_part_repo),
        watermark_store=SqlWatermarkStore(session_factory),
    )
