"""Integration tests for payment history reads."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from services.payments_service.models import PaymentAttemptStatus
from tests.factories import OrderFactory, PaymentAttemptFactory, ProductFactory


async def _attempts(db, user_auth_id, count, **overrides):
    """``count`` attempts for one payer, oldest first."""
    base = datetime(2026, 1, 1, tzinfo=timezone.utc)
    product = ProductFactory.create()
    db.add(product)
    attempts = []
    for i in range(count):
        order = OrderFactory.create(items=[(product, 1)], user_auth_id=user_auth_id)
        attempt = PaymentAttemptFactory.create(
            order=order,
            reference=f"ord_hist_{uuid.uuid4().hex[:8]}",
            created_at=base + timedelta(minutes=i),
            **overrides,
        )
        db.add_all([order, attempt])
        attempts.append(attempt)
    await db.commit()
    return attempts


@pytest.mark.asyncio
@pytest.mark.integration
async def test_my_payments_lists_only_mine_newest_first(
    client, db_session, login_as, customer
):
    mine = await _attempts(db_session, customer.user_id, 2)
    await _attempts(db_session, "auth-other", 1)
    login_as(customer)

    response = await client.get("/payment/my-payments")

    assert response.status_code == 200
    assert [p["reference"] for p in response.json()] == [
        mine[1].reference,
        mine[0].reference,
    ]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_payment_detail_visibility(client, db_session, login_as, customer, admin):
    (theirs,) = await _attempts(db_session, "auth-other", 1)
    (mine,) = await _attempts(db_session, customer.user_id, 1)
    login_as(customer)

    own = await client.get(f"/payment/{mine.id}")
    assert own.status_code == 200
    assert own.json()["reference"] == mine.reference

    hidden = await client.get(f"/payment/{theirs.id}")
    assert hidden.status_code == 404
    assert hidden.json()["code"] == "PAYMENT_NOT_FOUND"

    login_as(admin)
    shown = await client.get(f"/payment/{theirs.id}")
    assert shown.status_code == 200


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unknown_payment_is_not_found(client, login_as, admin):
    login_as(admin)

    response = await client.get(f"/payment/{uuid.uuid4()}")

    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_list_is_paginated(client, db_session, login_as, admin):
    attempts = await _attempts(db_session, "auth-payer", 5)
    login_as(admin)

    response = await client.get(
        "/payment/admin/all", params={"page": 2, "page_size": 2}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 5
    assert body["page"] == 2
    assert body["page_size"] == 2
    assert [p["reference"] for p in body["items"]] == [
        attempts[2].reference,
        attempts[1].reference,
    ]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_list_filters_by_status(client, db_session, login_as, admin):
    await _attempts(db_session, "auth-payer", 2)
    (failed,) = await _attempts(
        db_session, "auth-payer", 1, status=PaymentAttemptStatus.FAILED
    )
    login_as(admin)

    response = await client.get("/payment/admin/all", params={"status": "failed"})

    body = response.json()
    assert body["total"] == 1
    assert body["items"][0]["reference"] == failed.reference


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_list_requires_admin(client, login_as, customer):
    login_as(customer)

    response = await client.get("/payment/admin/all")

    assert response.status_code == 403
