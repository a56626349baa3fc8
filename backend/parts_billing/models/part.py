"""
配件明细模型

两种来源：
- OrderPart: 订单直接下单的配件（现货 StockPart / 配额 QuotaPart），履约完成后可开票
- Part: 询价配件（RequestPart），报价完成后可开票

开票后在 invoice_id 上记录发票ID，不再参与后续开票
"""

import enum
from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, DECIMAL
from parts_billing.db.base import Base


class PartClass(str, enum.Enum):
    STOCK = "StockPart"
    QUOTA = "QuotaPart"
    REQUEST = "RequestPart"


class OrderPart(Base):
    """订单配件 - 现货/配额"""
    __tablename__ = "order_parts"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)

    # StockPart / QuotaPart
    part_class = Column(String(20), nullable=False, comment="配件类型")
    price_before_discount = Column(DECIMAL(12, 2), nullable=False, default=Decimal("0.00"), comment="折前价格")

    fulfillment_completed_at = Column(DateTime, comment="履约完成时间")
    invoice_id = Column(Integer, ForeignKey("invoices.id"), index=True, comment="所属发票ID")

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<OrderPart {self.id} ({self.part_class}) @ {self.price_before_discount}>"


class Part(Base):
    """配件 - 询价配件挂在订单上时参与开票"""
    __tablename__ = "parts"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, comment="所属订单ID（可为空）")

    part_class = Column(String(20), nullable=False, default=PartClass.REQUEST.value, comment="配件类型")
    premium_price_before_discount = Column(DECIMAL(12, 2), comment="报价（折前）")

    priced_at = Column(DateTime, comment="报价完成时间")
    invoice_id = Column(Integer, ForeignKey("invoices.id"), index=True, comment="所属发票ID")

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Part {self.id} ({self.part_class}) @ {self.premium_price_before_discount}>"
