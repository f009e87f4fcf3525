import csv
from datetime import date, datetime, time, timedelta
from io import StringIO

import pytest
from fastapi import HTTPException

from viraweb.domain.financial.schemas import PaymentCreate
from viraweb.domain.financial.service import EXPORT_COLUMNS, FinancialService, period_start
from viraweb.models import Appointment, Attendance, FinancialSession, Goal, Notification, Patient, Payment


def add_payment(db, user, patient, **values) -> Payment:
    payment = Payment(user_id=user.id, patient_id=patient.id, **values)
    db.add(payment)
    db.commit()
    db.refresh(payment)
    return payment


def test_discount_cannot_exceed_amount():
    with pytest.raises(ValueError):
        PaymentCreate(patient_id=1, amount=100, discount=150)
    with pytest.raises(ValueError):
        PaymentCreate(patient_id=1, amount=0)


def test_record_payment_starts_pending(client, patient):
    response = client.post("/api/financial/payments", json={"patient_id": patient.id, "amount": 120})

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["payment_date"] is None
    assert data["currency"] == "BRL"


def test_record_payment_for_foreign_patient_is_404(client, db, other_user):
    foreign = Patient(user_id=other_user.id, name="Outro")
    db.add(foreign)
    db.commit()

    response = client.post("/api/financial/payments", json={"patient_id": foreign.id, "amount": 50})
    assert response.status_code == 404


def test_record_payment_for_foreign_appointment_or_attendance_is_404(client, db, other_user, patient):
    foreign = Patient(user_id=other_user.id, name="Outro")
    db.add(foreign)
    db.commit()
    appointment = Appointment(
        user_id=other_user.id, patient_id=foreign.id, appointment_date=date(2026, 10, 19), appointment_time=time(9, 0)
    )
    attendance = Attendance(user_id=other_user.id, patient_id=foreign.id, session_date=date(2026, 10, 19), status="present")
    db.add_all([appointment, attendance])
    db.commit()

    response = client.post(
        "/api/financial/payments", json={"patient_id": patient.id, "amount": 50, "appointment_id": appointment.id}
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Agendamento não encontrado"

    response = client.post(
        "/api/financial/payments", json={"patient_id": patient.id, "amount": 50, "attendance_id": attendance.id}
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Presença não encontrada"
    assert db.query(Payment).count() == 0


def test_update_payment_rejects_null_amount_or_discount(client, db, user, patient):
    payment = add_payment(db, user, patient, amount=100, discount=10, status="pending")

    for body in ({"amount": None, "discount": 5}, {"discount": None}):
        response = client.patch(f"/api/financial/payments/{payment.id}", json=body)
        assert response.status_code == 422

    response = client.patch(f"/api/financial/payments/{payment.id}", json={"discount": 5, "notes": "Ajuste"})
    assert response.status_code == 200
    assert response.json()["amount"] == 100
    assert response.json()["discount"] == 5


def test_mark_paid_updates_patient_goal_and_notifies(client, db, user, patient):
    db.add(Goal(user_id=user.id, title="Faturamento", target_value=1000, category="financeiro"))
    db.commit()
    payment = add_payment(db, user, patient, amount=200, discount=20, status="pending")

    response = client.post(f"/api/financial/payments/{payment.id}/pay")

    assert response.status_code == 200
    assert response.json()["status"] == "paid"
    assert response.json()["payment_date"] is not None

    db.refresh(patient)
    assert patient.payment_status == "paid"
    assert patient.last_payment_date is not None
    assert db.query(Goal).one().current_value == 180
    notification = db.query(Notification).one()
    assert notification.title == "Pagamento Recebido"
    assert "180.00" in notification.message


def test_paying_twice_is_rejected(client, db, user, patient):
    payment = add_payment(db, user, patient, amount=50, status="paid", payment_date=datetime.utcnow())

    response = client.post(f"/api/financial/payments/{payment.id}/pay")
    assert response.status_code == 400
    assert response.json()["detail"] == "Pagamento já está quitado"


def test_recording_a_paid_payment_goes_through_mark_paid(client, db, patient):
    response = client.post(
        "/api/financial/payments", json={"patient_id": patient.id, "amount": 80, "status": "paid"}
    )

    assert response.json()["status"] == "paid"
    db.refresh(patient)
    assert patient.payment_status == "paid"


def test_mark_overdue_flips_pending_past_due(db, user, patient):
    today = date(2026, 10, 19)
    late = add_payment(db, user, patient, amount=90, status="pending", due_date=today - timedelta(days=1))
    on_time = add_payment(db, user, patient, amount=90, status="pending", due_date=today)

    marked = FinancialService(db).mark_overdue_payments(user, today=today)

    assert marked == 1
    db.refresh(late)
    db.refresh(on_time)
    db.refresh(patient)
    assert late.status == "overdue"
    assert on_time.status == "pending"
    assert patient.payment_status == "overdue"
    assert patient.payment_due_date == today - timedelta(days=1)


def test_summary_totals(db, user, patient):
    now = datetime.utcnow()
    add_payment(db, user, patient, amount=100, discount=10, status="paid", payment_date=now)
    add_payment(db, user, patient, amount=50, discount=5, status="pending")
    add_payment(db, user, patient, amount=70, status="paid", payment_date=now - timedelta(days=60))

    summary = FinancialService(db).get_financial_summary(user, "monthly")

    assert summary["total_received"] == 100
    assert summary["total_discounts"] == 15
    assert summary["total_pending"] == 45
    assert summary["payment_count"] == 2


def test_invalid_period_is_400():
    with pytest.raises(HTTPException) as exc:
        period_start("decade")
    assert exc.value.status_code == 400


def test_series_is_zero_filled(db, user, patient):
    today = date.today()
    add_payment(
        db, user, patient, amount=100, discount=0, status="paid",
        payment_date=datetime.combine(today, datetime.min.time()) + timedelta(hours=10),
    )

    series = FinancialService(db).get_financial_series(user, days=7, today=today)

    assert len(series) == 7
    assert series[0]["date"] == today - timedelta(days=6)
    assert series[-1] == {"date": today, "value": 100.0}
    assert sum(point["value"] for point in series) == 100.0


def test_metrics_use_payment_and_due_dates(db, user, patient):
    now = datetime(2026, 10, 19, 15, 0)
    add_payment(db, user, patient, amount=100, status="paid", payment_date=datetime(2026, 10, 10, 9, 0))
    add_payment(db, user, patient, amount=40, status="overdue", due_date=date(2026, 10, 12))

    metrics = FinancialService(db).get_financial_metrics(user, "month", now=now)

    assert metrics == [
        {"date": date(2026, 10, 10), "income": 100.0, "expenses": 0.0, "default_rate": 0.0},
        {"date": date(2026, 10, 12), "income": 0.0, "expenses": 0.0, "default_rate": 40.0},
    ]


def test_export_csv(client, db, user, patient):
    add_payment(
        db, user, patient, amount=150, discount=15, status="paid",
        payment_date=datetime.utcnow() - timedelta(days=1), notes="Pix",
    )

    response = client.get("/api/financial/export?period=month")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "attachment; filename=financeiro_month_" in response.headers["content-disposition"]
    rows = list(csv.DictReader(StringIO(response.text)))
    assert list(rows[0].keys()) == EXPORT_COLUMNS
    assert rows[0]["paciente"] == "Maria Souza"
    assert rows[0]["valor"] == "150.00"
    assert rows[0]["status"] == "Pago"
    assert rows[0]["observacoes"] == "Pix"


def test_patient_summary_and_outstanding(client, db, user, patient):
    db.add_all(
        [
            FinancialSession(user_id=user.id, patient_id=patient.id, session_date=date(2026, 10, 1), unit_price=100, discount=0, paid=True),
            FinancialSession(user_id=user.id, patient_id=patient.id, session_date=date(2026, 10, 8), unit_price=100, discount=10, paid=False),
            FinancialSession(user_id=user.id, patient_id=patient.id, session_date=date(2026, 10, 15), unit_price=100, discount=0, paid=False),
        ]
    )
    db.commit()

    summary = client.get(f"/api/financial/patients/{patient.id}/summary").json()
    assert summary["total_sessions"] == 3
    assert summary["paid_sessions"] == 1
    assert summary["unpaid_sessions"] == 2
    assert summary["paid"] == 100
    assert summary["due"] == 190
    assert summary["discounts"] == 10

    outstanding = client.get("/api/financial/outstanding").json()
    assert outstanding == [
        {"id": patient.id, "name": "Maria Souza", "phone": None, "unpaid_sessions": 2, "outstanding": 190.0}
    ]
