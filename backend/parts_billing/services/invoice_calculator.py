"""
发票金额计算

从配件原价合计出发，依次：
1. 首张发票加收运费
2. 抵扣钱包余额（扣除历史发票已用部分）
3. 抵扣折扣余额（同样扣除历史发票已用部分）

结果不能为负，否则放弃该订单本次开票。纯函数，不访问数据库。
"""

from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from parts_billing.core.config import settings
from parts_billing.core.errors import NegativeAmountError
from parts_billing.schemas.invoice import (
    InvoiceAmounts, LineItem, OrderBilling, PriorInvoice, QuotaPart, RequestPart, StockPart
)
from parts_billing.utils.fp import either, instance_of, prop
from parts_billing.utils.numbers import to_fixed_number

ZERO = Decimal("0")

is_stock_or_quota = either(instance_of(StockPart), instance_of(QuotaPart))
is_request = instance_of(RequestPart)


def get_stock_and_quota_parts(line_items: Iterable[LineItem]) -> List[LineItem]:
    return [item for item in line_items if is_stock_or_quota(item)]


def get_request_parts(line_items: Iterable[LineItem]) -> List[LineItem]:
    return [item for item in line_items if is_request(item)]


def calculate_total_parts_price(line_items: Sequence[LineItem], precision: int = 2) -> Decimal:
    """配件原价合计，求和后统一四舍五入一次"""
    stock_and_quota = sum((item.price for item in get_stock_and_quota_parts(line_items)), ZERO)
    request = sum((item.price for item in get_request_parts(line_items)), ZERO)
    return to_fixed_number(stock_and_quota + request, precision)


def consumable_amount(balance: Decimal, total_amount: Decimal, consumed: Iterable[Decimal]) -> Decimal:
    """
    本张发票可抵扣的金额

    余额依次减去每张历史发票已抵扣的部分（每步不低于0），
    再与当前应付金额取小，结果不低于0。
    """
    remaining = balance
    for amount in consumed:
        remaining = max(ZERO, remaining - (amount or ZERO))
    return max(ZERO, min(remaining, total_amount))


def calculate_invoice_amounts(
    order: OrderBilling,
    line_items: Sequence[LineItem],
    prior_invoices: Sequence[PriorInvoice],
    precision: Optional[int] = None,
) -> InvoiceAmounts:
    if precision is None:
        precision = settings.CURRENCY_PRECISION

    total_parts_amount = calculate_total_parts_price(line_items, precision)
    total_amount = total_parts_amount

    delivery_fees = ZERO
    if order.delivery_fees and len(prior_invoices) == 0:
        delivery_fees = order.delivery_fees
        total_amount += delivery_fees

    wallet_payment_amount = ZERO
    if order.wallet_payment_amount:
        wallet_payment_amount = consumable_amount(
            order.wallet_payment_amount,
            total_amount,
            (invoice.wallet_payment_amount for invoice in prior_invoices),
        )
        total_amount -= wallet_payment_amount

    discount_amount = ZERO
    if order.discount_amount:
        discount_amount = consumable_amount(
            order.discount_amount,
            total_amount,
            (invoice.discount_amount for invoice in prior_invoices),
        )
        total_amount -= discount_amount

    if total_amount < 0:
        raise NegativeAmountError(order.id, total_amount)

    return InvoiceAmounts(
        order_id=order.id,
        total_parts_amount=total_parts_amount,
        total_amount=total_amount,
        delivery_fees=delivery_fees,
        wallet_payment_amount=wallet_payment_amount,
        discount_amount=discount_amount,
        line_item_ids=list(map(prop("id"), get_stock_and_quota_parts(line_items))),
        request_line_item_ids=list(map(prop("id"), get_request_parts(line_items))),
    )
