"""开票相关 Schema"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


# ===== 配件（三种变体，统一按 item_class 区分）=====

class _LineItemBase(BaseModel):
    id: int
    order_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StockPart(_LineItemBase):
    """现货配件"""
    item_class: Literal["StockPart"] = "StockPart"
    price_before_discount: Decimal = Decimal("0")

    @property
    def price(self) -> Decimal:
        return self.price_before_discount


class QuotaPart(_LineItemBase):
    """配额配件"""
    item_class: Literal["QuotaPart"] = "QuotaPart"
    price_before_discount: Decimal = Decimal("0")

    @property
    def price(self) -> Decimal:
        return self.price_before_discount


class RequestPart(_LineItemBase):
    """询价配件"""
    item_class: Literal["RequestPart"] = "RequestPart"
    premium_price_before_discount: Decimal = Decimal("0")

    @property
    def price(self) -> Decimal:
        return self.premium_price_before_discount


LineItem = Annotated[Union[StockPart, QuotaPart, RequestPart], Field(discriminator="item_class")]

line_items_adapter = TypeAdapter(List[LineItem])


# ===== 订单 / 发票 =====

class OrderBilling(BaseModel):
    """订单开票相关字段"""
    id: int
    delivery_fees: Decimal = Decimal("0")
    wallet_payment_amount: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    invoice_ids: List[int] = []

    class Config:
        from_attributes = True


class PriorInvoice(BaseModel):
    """同一订单历史发票（只用到抵扣金额）"""
    id: Optional[int] = None
    delivery_fees: Decimal = Decimal("0")
    wallet_payment_amount: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")

    class Config:
        from_attributes = True


class InvoiceAmounts(BaseModel):
    """发票金额明细（计算结果）"""
    order_id: int
    total_parts_amount: Decimal
    total_amount: Decimal
    delivery_fees: Decimal
    wallet_payment_amount: Decimal
    discount_amount: Decimal
    line_item_ids: List[int]
    request_line_item_ids: List[int]


class InvoiceResponse(BaseModel):
    """发票响应"""
    id: int
    order_id: int
    line_item_ids: List[int]
    request_line_item_ids: List[int]
    total_parts_amount: Decimal
    total_amount: Decimal
    delivery_fees: Decimal
    wallet_payment_amount: Decimal
    discount_amount: Decimal
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# ===== 运行结果 =====

class GroupStatus(str, enum.Enum):
    SUCCESS = "success"
    NEGATIVE_AMOUNT = "negative_amount"
    INFRASTRUCTURE_ERROR = "infrastructure_error"


class GroupResult(BaseModel):
    """单个订单的开票结果"""
    order_id: int
    status: GroupStatus
    invoice_id: Optional[int] = None  # 传播失败时发票已创建
    message: str = ""


class InvoiceRunReport(BaseModel):
    """一次开票运行的汇总"""
    status: str = Field(..., pattern="^(success|failed)$")
    message: str
    invoice_ids: List[int] = []
    results: List[GroupResult] = []
    watermark: Optional[datetime] = None

    @property
    def failed_order_ids(self) -> List[int]:
        return [r.order_id for r in self.results if r.status != GroupStatus.SUCCESS]
