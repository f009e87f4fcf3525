from datetime import date, time, timedelta

import pytest
from fastapi import HTTPException

from viraweb.config import DEFAULT_SESSION_PRICE
from viraweb.domain.appointments.service import period_bounds
from viraweb.plan_limits import count_resource, month_bounds
from viraweb.models import Appointment, FinancialSession, Goal, Notification, Patient


def add_appointment(db, user, patient, professional=None, **values) -> Appointment:
    appointment = Appointment(
        user_id=user.id,
        patient_id=patient.id,
        professional_id=professional.id if professional else None,
        appointment_date=values.pop("appointment_date", date(2026, 10, 20)),
        appointment_time=values.pop("appointment_time", time(9, 0)),
        **values,
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return appointment


def test_period_bounds():
    wednesday = date(2026, 10, 21)
    assert period_bounds("day", wednesday) == (wednesday, wednesday)
    assert period_bounds("week", wednesday) == (date(2026, 10, 19), date(2026, 10, 25))
    assert period_bounds("month", date(2026, 2, 10)) == (date(2026, 2, 1), date(2026, 2, 28))
    with pytest.raises(HTTPException):
        period_bounds("year", wednesday)


def fill_month(db, user, patient, day, count=50):
    db.add_all(
        Appointment(user_id=user.id, patient_id=patient.id, appointment_date=day, appointment_time=time(9, 0))
        for _ in range(count)
    )
    db.commit()


def test_monthly_quota_counts_from_the_first_of_the_month(db, user, patient):
    add_appointment(db, user, patient, appointment_date=date(2026, 9, 30))
    add_appointment(db, user, patient, appointment_date=date(2026, 10, 1))
    add_appointment(db, user, patient, appointment_date=date(2026, 10, 31))

    assert count_resource(db, user.id, "appointments_per_month", today=date(2026, 10, 19)) == 2


def test_basic_plan_monthly_quota_blocks_creation(client, db, user, patient):
    today = date.today()
    fill_month(db, user, patient, today)

    response = client.post(
        "/api/appointments",
        json={"patient_id": patient.id, "appointment_date": today.isoformat(), "appointment_time": "10:00:00"},
    )

    assert response.status_code == 403
    assert "50 agendamentos mensais" in response.json()["detail"]
    assert db.query(Appointment).count() == 50


def test_previous_month_appointments_do_not_use_the_quota(client, db, user, patient):
    start, _ = month_bounds()
    fill_month(db, user, patient, start - timedelta(days=1))

    response = client.post(
        "/api/appointments",
        json={"patient_id": patient.id, "appointment_date": start.isoformat(), "appointment_time": "10:00:00"},
    )

    assert response.status_code == 201


def test_create_sends_confirmation_and_advances_goal(client, db, user, patient, professional, sent_emails):
    db.add(Goal(user_id=user.id, title="Agenda cheia", target_value=10, category="agendamentos"))
    db.commit()

    response = client.post(
        "/api/appointments",
        json={
            "patient_id": patient.id,
            "professional_id": professional.id,
            "appointment_date": "2026-10-20",
            "appointment_time": "14:30:00",
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "scheduled"
    assert data["patient_name"] == "Maria Souza"
    assert data["professional_name"] == "Dr. João"
    assert db.query(Goal).one().current_value == 1

    sent_emails.assert_awaited_once()
    kwargs = sent_emails.await_args.kwargs
    assert kwargs["to"] == "maria@example.com"
    assert kwargs["subject"] == "Confirmação de Agendamento - ViraWeb"


def test_create_for_patient_without_email_skips_confirmation(client, db, user, sent_emails):
    patient = Patient(user_id=user.id, name="Sem Email")
    db.add(patient)
    db.commit()

    response = client.post(
        "/api/appointments",
        json={"patient_id": patient.id, "appointment_date": "2026-10-20", "appointment_time": "10:00:00"},
    )

    assert response.status_code == 201
    sent_emails.assert_not_awaited()


def test_create_with_foreign_patient_is_404(client, db, other_user):
    foreign = Patient(user_id=other_user.id, name="Outro")
    db.add(foreign)
    db.commit()

    response = client.post(
        "/api/appointments",
        json={"patient_id": foreign.id, "appointment_date": "2026-10-20", "appointment_time": "10:00:00"},
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Cliente não encontrado"


def test_completing_bills_one_session(client, db, user, patient):
    appointment = add_appointment(db, user, patient)

    first = client.put(f"/api/appointments/{appointment.id}/status", json={"status": "completed"})
    assert first.status_code == 200
    assert first.json()["status"] == "completed"

    sessions = db.query(FinancialSession).all()
    assert len(sessions) == 1
    assert sessions[0].appointment_id == appointment.id
    assert sessions[0].unit_price == DEFAULT_SESSION_PRICE
    assert sessions[0].paid is False
    assert db.query(Notification).filter(Notification.title == "Sessão Registrada").count() == 1

    # Back to scheduled and completed again: still one session
    client.put(f"/api/appointments/{appointment.id}/status", json={"status": "scheduled"})
    client.patch(f"/api/appointments/{appointment.id}", json={"status": "completed"})
    assert db.query(FinancialSession).count() == 1


def test_list_filters_by_date_range(client, db, user, patient):
    add_appointment(db, user, patient, appointment_date=date(2026, 10, 1))
    add_appointment(db, user, patient, appointment_date=date(2026, 10, 15))

    response = client.get("/api/appointments?start_date=2026-10-10&end_date=2026-10-31")
    assert [a["appointment_date"] for a in response.json()] == ["2026-10-15"]

    bad = client.get("/api/appointments?start_date=2026-10-31&end_date=2026-10-01")
    assert bad.status_code == 400


def test_counts_by_professional(client, db, user, patient, professional):
    add_appointment(db, user, patient, professional, appointment_date=date(2026, 10, 20))
    add_appointment(db, user, patient, professional, appointment_date=date(2026, 10, 22))
    add_appointment(db, user, patient, appointment_date=date(2026, 10, 21))
    add_appointment(db, user, patient, professional, appointment_date=date(2026, 11, 2))

    response = client.get("/api/appointments/counts-by-professional?period=week&reference_date=2026-10-21")

    data = response.json()
    assert data["start_date"] == "2026-10-19"
    assert data["end_date"] == "2026-10-25"
    assert data["counts"] == [
        {"professional_id": professional.id, "professional_name": "Dr. João", "count": 2},
        {"professional_id": None, "professional_name": "Sem profissional", "count": 1},
    ]


def test_delete(client, db, user, patient):
    appointment = add_appointment(db, user, patient)
    assert client.delete(f"/api/appointments/{appointment.id}").status_code == 200
    assert client.get(f"/api/appointments/{appointment.id}").status_code == 404
