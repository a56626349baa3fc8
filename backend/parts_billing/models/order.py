"""
订单模型 - 开票相关字段

运费、钱包支付、折扣都是下单时确定的订单级金额：
- 运费只在订单的第一张发票上收取
- 钱包支付和折扣可以跨多张发票逐步抵扣，累计不超过原始金额
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, DateTime, DECIMAL, JSON
from parts_billing.db.base import Base


class Order(Base):
    """订单"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)

    delivery_fees = Column(DECIMAL(12, 2), default=Decimal("0.00"), comment="运费（仅首张发票收取）")
    wallet_payment_amount = Column(DECIMAL(12, 2), default=Decimal("0.00"), comment="钱包预付金额")
    discount_amount = Column(DECIMAL(12, 2), default=Decimal("0.00"), comment="折扣金额")

    # 已开发票ID集合（JSON数组，只追加不重复）
    invoice_ids = Column(JSON, nullable=False, default=list, comment="发票ID集合")

    # 审计字段
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Order {self.id} invoices={self.invoice_ids}>"
