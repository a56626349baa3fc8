from datetime import datetime
from decimal import Decimal

import pytest
import pytest_asyncio

from parts_billing.db.init_db import ensure_tables_exist
from parts_billing.db.session import build_engine, build_session_factory
from parts_billing.models import Order, OrderPart, Part, PartClass


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'billing.db'}")
    await ensure_tables_exist(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def seeded(session_factory):
    """
    订单1: 两个现货配件 10.00 + 15.00，运费 5.00
    订单2: 一个询价配件 40.00，钱包 50.00
    另有未履约配件、未报价配件、已开票配件各一个
    """
    created = datetime(2024, 1, 1, 8, 0, 0)
    done = datetime(2024, 1, 2, 8, 0, 0)
    async with session_factory() as session:
        session.add_all([
            Order(id=1, delivery_fees=Decimal("5.00"), invoice_ids=[]),
            Order(id=2, wallet_payment_amount=Decimal("50.00"), invoice_ids=[]),
        ])
        await session.flush()
        session.add_all([
            OrderPart(id=1, order_id=1, part_class=PartClass.STOCK.value,
                      price_before_discount=Decimal("10.00"),
                      fulfillment_completed_at=done, created_at=created),
            OrderPart(id=2, order_id=1, part_class=PartClass.QUOTA.value,
                      price_before_discount=Decimal("15.00"),
                      fulfillment_completed_at=done, created_at=created),
            # 未履约
            OrderPart(id=3, order_id=1, part_class=PartClass.STOCK.value,
                      price_before_discount=Decimal("99.00"), created_at=created),
            Part(id=1, order_id=2, part_class=PartClass.REQUEST.value,
                 premium_price_before_discount=Decimal("40.00"),
                 priced_at=done, created_at=created),
            # 未报价
            Part(id=2, order_id=2, part_class=PartClass.REQUEST.value,
                 premium_price_before_discount=Decimal("70.00"), created_at=created),
            # 未挂订单
            Part(id=3, part_class=PartClass.REQUEST.value,
                 premium_price_before_discount=Decimal("70.00"),
                 priced_at=done, created_at=created),
        ])
        await session.commit()
    return created
