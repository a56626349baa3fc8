from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """float 先转字符串，避免二进制误差"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_fixed_number(value: Number, precision: int = 2) -> Decimal:
    """四舍五入到指定小数位"""
    quantum = Decimal(1).scaleb(-precision)
    return to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
