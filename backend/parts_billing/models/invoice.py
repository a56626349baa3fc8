"""
发票模型 - 每次运行每个订单最多一张，创建后不再修改
"""

from datetime import datetime
from decimal import Decimal
from sqlalchemy import Column, Integer, DateTime, ForeignKey, DECIMAL, JSON
from parts_billing.db.base import Base


class Invoice(Base):
    """发票"""
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)

    # 本次开票的配件
    line_item_ids = Column(JSON, nullable=False, default=list, comment="现货/配额配件ID")
    request_line_item_ids = Column(JSON, nullable=False, default=list, comment="询价配件ID")

    # 金额
    total_parts_amount = Column(DECIMAL(12, 2), nullable=False, comment="配件原价合计")
    total_amount = Column(DECIMAL(12, 2), nullable=False, comment="应付金额")
    delivery_fees = Column(DECIMAL(12, 2), default=Decimal("0.00"), comment="本张发票收取的运费")
    wallet_payment_amount = Column(DECIMAL(12, 2), default=Decimal("0.00"), comment="本张发票抵扣的钱包金额")
    discount_amount = Column(DECIMAL(12, 2), default=Decimal("0.00"), comment="本张发票抵扣的折扣")

    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Invoice {self.id} order={self.order_id} ¥{self.total_amount}>"
