"""开票业务异常"""

from decimal import Decimal


class InvoicingError(Exception):
    """开票异常基类"""


class NegativeAmountError(InvoicingError):
    """发票应付金额为负，放弃该订单本次开票"""

    def __init__(self, order_id: int, amount: Decimal):
        self.order_id = order_id
        self.amount = amount
        super().__init__(
            f"无法为订单 {order_id} 开票，应付金额为负: {amount}"
        )


class OrderNotFoundError(InvoicingError):
    """订单不存在"""

    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"订单不存在: {order_id}")
