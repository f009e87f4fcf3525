from datetime import date

from viraweb.models import Patient, Subscription
from viraweb.plan_limits import (
    UNLIMITED,
    calculate_percentage,
    can_add_patient,
    get_current_plan,
    get_limit_banners,
    get_next_upgrade_plan,
    get_plan_limit,
    get_usage_stats,
    get_warning_level,
    month_bounds,
    should_show_limit_banner,
)


def test_plan_limits_table():
    assert get_plan_limit("basic", "patients") == 75
    assert get_plan_limit("premium", "professionals") == 50
    assert get_plan_limit("master", "appointments_per_month") is None
    assert get_plan_limit(None, "patients") == 0


def test_percentage_and_warning_levels():
    assert calculate_percentage(60, 75) == 80
    assert calculate_percentage(10, None) == 0
    assert calculate_percentage(5, 0) == 100
    assert get_warning_level(69) == "safe"
    assert get_warning_level(70) == "warning"
    assert get_warning_level(85) == "danger"
    assert get_warning_level(100) == "critical"


def test_banner_threshold():
    assert should_show_limit_banner(60, 75)
    assert not should_show_limit_banner(59, 75)
    assert not should_show_limit_banner(398, 500)
    assert should_show_limit_banner(400, 500)
    assert not should_show_limit_banner(10_000, None)


def test_banners_skip_unlimited_resources():
    usage = {
        "patients": {"current": 75, "limit": 75, "percentage": 100},
        "professionals": {"current": 3, "limit": UNLIMITED, "percentage": 0},
    }
    banners = get_limit_banners(usage)
    assert len(banners) == 1
    assert banners[0]["resource"] == "patients"
    assert banners[0]["label"] == "pacientes"
    assert banners[0]["at_limit"] is True


def test_upgrade_path():
    assert get_next_upgrade_plan("basic") == "premium"
    assert get_next_upgrade_plan("premium") == "master"
    assert get_next_upgrade_plan("master") is None


def test_month_bounds_wraps_december():
    assert month_bounds(date(2026, 12, 15)) == (date(2026, 12, 1), date(2027, 1, 1))


def test_users_without_subscription_are_basic(db, user):
    assert get_current_plan(db, user) == "basic"

    db.add(Subscription(user_id=user.id, plan_type="premium", status="active"))
    db.commit()
    assert get_current_plan(db, user) == "premium"


def test_patient_quota_blocks_at_limit(db, user):
    db.add_all([Patient(user_id=user.id, name=f"Cliente {i}") for i in range(75)])
    db.commit()

    allowed, message = can_add_patient(db, user)
    assert not allowed
    assert "75" in message

    stats = get_usage_stats(db, user)
    assert stats["usage"]["patients"]["remaining"] == 0
    assert stats["banners"][0]["resource"] == "patients"
    assert stats["next_plan"] == "premium"
