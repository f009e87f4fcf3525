import json
from datetime import datetime, timedelta

from viraweb.domain.billing.stripe_service import stripe_service
from viraweb.domain.billing.subscription_service import SubscriptionService
from viraweb.models import Notification, Subscription
from viraweb.webhook_security import create_stripe_signature

WEBHOOK_SECRET = "whsec_test_secret"


def post_event(client, event: dict, secret: str = WEBHOOK_SECRET):
    payload = json.dumps(event).encode("utf-8")
    return client.post(
        "/api/webhooks/stripe",
        content=payload,
        headers={"Stripe-Signature": create_stripe_signature(secret, payload), "Content-Type": "application/json"},
    )


def checkout_completed(user, plan_type="premium", session_id="cs_test_1", amount_total=14990) -> dict:
    return {
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "customer": "cus_123",
                "subscription": "sub_123",
                "amount_total": amount_total,
                "payment_status": "paid",
                "metadata": {"user_id": str(user.id), "plan_type": plan_type},
            }
        },
    }


def add_subscription(db, user, **values) -> Subscription:
    now = datetime.utcnow()
    subscription = Subscription(
        user_id=user.id,
        plan_type=values.pop("plan_type", "premium"),
        status=values.pop("status", "active"),
        current_period_start=values.pop("current_period_start", now),
        current_period_end=values.pop("current_period_end", now + timedelta(days=30)),
        **values,
    )
    db.add(subscription)
    db.commit()
    db.refresh(subscription)
    return subscription


def test_webhook_rejects_bad_signature(client, user):
    response = post_event(client, checkout_completed(user), secret="whsec_wrong")
    assert response.status_code == 400


def test_webhook_rejects_missing_signature(client):
    response = client.post("/api/webhooks/stripe", content=b"{}")
    assert response.status_code == 400


def test_checkout_completed_activates_plan(client, db, user):
    response = post_event(client, checkout_completed(user))

    assert response.status_code == 200
    assert response.json() == {"received": True}

    subscription = db.query(Subscription).one()
    assert subscription.plan_type == "premium"
    assert subscription.status == "active"
    assert subscription.price == 149.90
    assert subscription.max_patients == 500
    assert subscription.virabot_enabled is True
    assert subscription.stripe_subscription_id == "sub_123"
    db.refresh(user)
    assert user.stripe_customer_id == "cus_123"
    assert db.query(Notification).filter(Notification.title == "Plano Ativado").count() == 1


def test_checkout_completed_is_idempotent(client, db, user):
    post_event(client, checkout_completed(user))
    post_event(client, checkout_completed(user))

    assert db.query(Subscription).count() == 1
    assert db.query(Notification).count() == 1


def test_checkout_with_unknown_user_is_acknowledged(client, db, user):
    event = checkout_completed(user)
    event["data"]["object"]["metadata"]["user_id"] = "9999"

    assert post_event(client, event).status_code == 200
    assert db.query(Subscription).count() == 0


def test_subscription_events(client, db, user):
    subscription = add_subscription(
        db, user, stripe_customer_id="cus_123", stripe_subscription_id="sub_123",
        current_period_end=datetime.utcnow() - timedelta(days=1),
    )

    post_event(client, {"type": "invoice.payment_succeeded", "data": {"object": {"customer": "cus_123"}}})
    db.refresh(subscription)
    assert subscription.current_period_end > datetime.utcnow()

    post_event(
        client,
        {
            "type": "customer.subscription.updated",
            "data": {"object": {"id": "sub_123", "status": "past_due", "cancel_at_period_end": True}},
        },
    )
    db.refresh(subscription)
    assert subscription.status == "expired"
    assert subscription.cancel_at_period_end is True

    post_event(client, {"type": "customer.subscription.deleted", "data": {"object": {"id": "sub_123"}}})
    db.refresh(subscription)
    assert subscription.status == "canceled"


def test_unknown_event_is_ignored(client):
    response = post_event(client, {"type": "charge.refunded", "data": {"object": {}}})
    assert response.status_code == 200


def test_upgrade_to_same_or_lower_plan_is_rejected(client, db, user):
    add_subscription(db, user, plan_type="premium")

    for target in ("premium", "basic"):
        response = client.post("/api/subscription/upgrade", json={"target_plan": target})
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot downgrade or select same plan"


def test_upgrade_creates_checkout(client, monkeypatch):
    captured = {}

    async def fake_checkout(**kwargs):
        captured.update(kwargs)
        return {"id": "cs_new", "url": "https://checkout.stripe.com/c/cs_new"}

    monkeypatch.setattr(stripe_service, "is_available", lambda: True)
    monkeypatch.setattr(stripe_service, "create_checkout_session", fake_checkout)

    response = client.post("/api/subscription/upgrade", json={"target_plan": "master"})

    assert response.status_code == 200
    assert response.json() == {"session_id": "cs_new", "url": "https://checkout.stripe.com/c/cs_new"}
    assert captured["metadata"]["plan_type"] == "master"
    assert captured["product"]["name"] == "Plano Master"


def test_checkout_without_stripe_is_503(client, monkeypatch):
    monkeypatch.setattr(stripe_service, "is_available", lambda: False)
    response = client.post("/api/checkout", json={"plan_type": "premium"})
    assert response.status_code == 503


def test_cancel_then_expire(client, db, user):
    subscription = add_subscription(db, user)

    response = client.post("/api/subscriptions/cancel")
    assert response.status_code == 200
    assert response.json()["status"] == "canceled"
    assert response.json()["cancel_at_period_end"] is True

    service = SubscriptionService(db)
    assert service.expire_subscriptions() == 0
    assert service.expire_subscriptions(now=datetime.utcnow() + timedelta(days=31)) == 1
    db.refresh(subscription)
    assert subscription.status == "expired"


def test_cancel_without_subscription_is_400(client):
    assert client.post("/api/subscriptions/cancel").status_code == 400


def test_plan_and_usage_default_to_basic(client, db, user, patient):
    plan = client.get("/api/subscriptions/plan").json()
    assert plan["plan"] == "basic"
    assert plan["limits"]["patients"] == 75
    assert plan["next_plan"] == "premium"
    assert plan["support"] == ["Email"]
    assert plan["support_hours"] == "Horário comercial"
    assert plan["virabot_enabled"] is False

    usage = client.get("/api/subscriptions/usage").json()
    assert usage["plan"] == "basic"
    assert usage["usage"]["patients"]["current"] == 1
    assert usage["usage"]["patients"]["remaining"] == 74
    assert usage["banners"] == []
