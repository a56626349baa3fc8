from datetime import datetime, timedelta
from decimal import Decimal

from parts_billing.schemas.invoice import GroupStatus

from fakes import BASE_TIME, Harness, order, request_part, stock_part


async def test_end_to_end_first_invoice_with_delivery_fee():
    harness = Harness(
        orders=[order(1, delivery_fees="5.00")],
        order_parts=[stock_part(1, 1, "10.00"), stock_part(2, 1, "15.00")],
    )

    report = await harness.service.create()

    assert report.status == "success"
    assert report.invoice_ids == [1]
    invoice = harness.invoices.by_id(1)
    assert invoice["total_parts_amount"] == Decimal("25.00")
    assert invoice["total_amount"] == Decimal("30.00")
    assert invoice["line_item_ids"] == [1, 2]
    assert harness.orders.orders[1]["invoice_ids"] == [1]
    assert all(item["invoice_id"] == 1 for item in harness.order_parts.items.values())


async def test_end_to_end_wallet_covers_request_part():
    harness = Harness(
        orders=[order(1, wallet="50.00")],
        request_parts=[request_part(1, 1, "40.00")],
    )

    report = await harness.service.create()

    invoice = harness.invoices.by_id(report.invoice_ids[0])
    assert invoice["wallet_payment_amount"] == Decimal("40.00")
    assert invoice["total_amount"] == Decimal("0")
    assert invoice["request_line_item_ids"] == [1]
    assert harness.request_parts.items[1]["invoice_id"] == invoice["id"]


async def test_end_to_end_wallet_and_discount():
    harness = Harness(
        orders=[order(1, wallet="5.00", discount="30.00")],
        order_parts=[stock_part(1, 1, "20.00")],
    )

    report = await harness.service.create()

    invoice = harness.invoices.by_id(report.invoice_ids[0])
    assert invoice["wallet_payment_amount"] == Decimal("5.00")
    assert invoice["discount_amount"] == Decimal("15.00")
    assert invoice["total_amount"] == Decimal("0")


async def test_second_run_skips_billed_parts_and_delivery_fee():
    harness = Harness(
        orders=[order(1, delivery_fees="5.00", wallet="12.00")],
        order_parts=[stock_part(1, 1, "10.00")],
    )
    first = await harness.service.create()

    harness.order_parts.add(stock_part(2, 1, "8.00", created_at=datetime.utcnow() + timedelta(seconds=1)))
    second = await harness.service.create()

    assert first.invoice_ids == [1]
    assert second.invoice_ids == [2]
    first_invoice, second_invoice = harness.invoices.invoices
    # 15.00 - 钱包 12.00
    assert first_invoice["total_amount"] == Decimal("3.00")
    assert second_invoice["delivery_fees"] == Decimal("0")
    assert second_invoice["wallet_payment_amount"] == Decimal("0")
    assert second_invoice["total_amount"] == Decimal("8.00")
    assert second_invoice["line_item_ids"] == [2]
    assert harness.orders.orders[1]["invoice_ids"] == [1, 2]


async def test_run_without_candidates():
    harness = Harness(orders=[order(1)])

    report = await harness.service.create()

    assert report.status == "success"
    assert report.invoice_ids == []
    assert report.results == []


async def test_negative_amount_isolated_to_its_order():
    harness = Harness(
        orders=[order(1), order(2)],
        order_parts=[
            stock_part(1, 1, "-10.00"),
            stock_part(2, 2, "12.00"),
        ],
    )

    report = await harness.service.create()

    assert report.status == "success"
    assert [r.status for r in report.results] == [GroupStatus.NEGATIVE_AMOUNT, GroupStatus.SUCCESS]
    assert report.failed_order_ids == [1]
    assert report.invoice_ids == [1]
    assert [invoice["order_id"] for invoice in harness.invoices.invoices] == [2]
    # 被放弃的订单没有任何回写
    assert harness.order_parts.items[1]["invoice_id"] is None
    assert harness.orders.orders[1]["invoice_ids"] == []


async def test_missing_order_does_not_stop_later_orders():
    harness = Harness(
        orders=[order(2)],
        order_parts=[stock_part(1, 1, "3.00"), stock_part(2, 2, "4.00")],
    )

    report = await harness.service.create()

    assert [(r.order_id, r.status) for r in report.results] == [
        (1, GroupStatus.INFRASTRUCTURE_ERROR),
        (2, GroupStatus.SUCCESS),
    ]
    assert report.results[0].invoice_id is None
    assert report.invoice_ids == [1]


async def test_propagation_failure_keeps_invoice():
    harness = Harness(
        orders=[order(1)],
        order_parts=[stock_part(1, 1, "3.00")],
    )
    harness.orders.fail_on_add = True

    report = await harness.service.create()

    result = report.results[0]
    assert result.status == GroupStatus.INFRASTRUCTURE_ERROR
    assert result.invoice_id == 1
    assert report.invoice_ids == []
    assert len(harness.invoices.invoices) == 1
    assert harness.order_parts.items[1]["invoice_id"] == 1


async def test_fetch_failure_reports_failed_run():
    harness = Harness(order_parts=[stock_part(1, 1, "3.00")])
    harness.request_parts.fail_on_find = True

    report = await harness.service.create()

    assert report.status == "failed"
    assert report.invoice_ids == []
    assert harness.watermarks.value is None


async def test_watermark_advances_after_clean_run():
    harness = Harness(
        orders=[order(1)],
        order_parts=[stock_part(1, 1, "3.00")],
    )
    before = datetime.utcnow()

    report = await harness.service.create()

    assert harness.watermarks.value is not None
    assert harness.watermarks.value >= before
    assert report.watermark == harness.watermarks.value


async def test_watermark_held_before_failed_parts():
    failed_at = BASE_TIME + timedelta(hours=1)
    harness = Harness(
        orders=[order(1), order(2)],
        order_parts=[
            stock_part(1, 1, "-1.00", created_at=failed_at),
            stock_part(2, 2, "1.00", created_at=BASE_TIME),
        ],
    )

    await harness.service.create()

    assert harness.watermarks.value == failed_at - timedelta(microseconds=1)


async def test_watermark_held_before_unfulfilled_parts():
    harness = Harness(
        orders=[order(1)],
        order_parts=[
            stock_part(1, 1, "1.00", created_at=BASE_TIME + timedelta(hours=2)),
            stock_part(2, 1, "1.00", created_at=BASE_TIME, completed=False),
        ],
    )

    await harness.service.create()
    # 之后履约完成，下次运行仍能查到
    harness.order_parts.items[2]["completed"] = True
    report = await harness.service.create()

    assert report.invoice_ids == [2]
    assert harness.invoices.by_id(2)["line_item_ids"] == [2]


async def test_stored_watermark_limits_candidates():
    harness = Harness(
        orders=[order(1)],
        order_parts=[stock_part(1, 1, "1.00", created_at=BASE_TIME)],
        watermark=BASE_TIME,
    )

    report = await harness.service.create()

    assert report.results == []


async def test_invalid_part_row_isolated_to_its_order():
    harness = Harness(
        orders=[order(1), order(2)],
        order_parts=[stock_part(1, 1, "10.00")],
        request_parts=[dict(request_part(1, 2, "0"), premium_price_before_discount=None)],
    )

    first = await harness.service.create()
    second = await harness.service.create()

    assert first.status == "success"
    assert first.invoice_ids == [1]
    assert sorted((r.order_id, r.status) for r in first.results) == [
        (1, GroupStatus.SUCCESS),
        (2, GroupStatus.INFRASTRUCTURE_ERROR),
    ]
    assert first.failed_order_ids == [2]
    assert harness.request_parts.items[1]["invoice_id"] is None
    # 坏记录仍待开票，后续运行照常处理其他订单
    assert second.status == "success"
    assert second.failed_order_ids == [2]
