from datetime import date, datetime, time, timedelta

from viraweb.domain.dashboard.service import DashboardService, days_ago_label
from viraweb.models import Appointment, Patient, Professional


def add_appointment(db, user, patient, day, status="scheduled", at=time(9, 0)):
    db.add(Appointment(user_id=user.id, patient_id=patient.id, appointment_date=day, appointment_time=at, status=status))
    db.commit()


def test_days_ago_label():
    now = datetime(2026, 10, 19, 12, 0)
    assert days_ago_label(now - timedelta(hours=3), now) == "Hoje"
    assert days_ago_label(now - timedelta(days=1), now) == "Ontem"
    assert days_ago_label(now - timedelta(days=5), now) == "5 dias atrás"
    assert days_ago_label(None, now) == "Hoje"


def test_stats(db, user, patient):
    today = date(2026, 10, 19)
    add_appointment(db, user, patient, today, status="completed")
    add_appointment(db, user, patient, today)
    add_appointment(db, user, patient, date(2026, 10, 5), status="completed")
    add_appointment(db, user, patient, date(2026, 10, 28))
    add_appointment(db, user, patient, date(2026, 9, 10))
    add_appointment(db, user, patient, date(2026, 9, 20))

    stats = DashboardService(db).get_stats(user, today=today)

    assert stats == {
        "appointments_today": 2,
        "active_patients": 1,
        "completion_rate": 50,
        "growth_rate": 100,
    }


def test_stats_without_history_are_zero(db, user):
    stats = DashboardService(db).get_stats(user, today=date(2026, 10, 19))
    assert stats["completion_rate"] == 0
    assert stats["growth_rate"] == 0


def test_upcoming_appointments_are_ordered(client, db, user, patient):
    today = date.today()
    add_appointment(db, user, patient, today + timedelta(days=1), at=time(8, 0))
    add_appointment(db, user, patient, today, at=time(16, 30))
    add_appointment(db, user, patient, today - timedelta(days=1))

    upcoming = client.get("/api/dashboard/upcoming-appointments").json()

    assert [a["time"] for a in upcoming] == ["16:30", "08:00"]
    assert upcoming[0]["patient"] == "Maria Souza"
    assert upcoming[0]["professional"] == "Profissional desconhecido"


def test_birthdays_include_patients_and_professionals(db, user):
    today = date(2026, 10, 19)
    db.add_all(
        [
            Patient(user_id=user.id, name="Aniversariante", birthday=date(1990, 10, 19)),
            Patient(user_id=user.id, name="Outro dia", birthday=date(1990, 10, 20)),
            Professional(user_id=user.id, name="Dr. Festa", birthday=date(1985, 10, 19)),
        ]
    )
    db.commit()

    birthdays = DashboardService(db).get_today_birthdays(user, today=today)

    assert [(b["name"], b["type"]) for b in birthdays] == [("Aniversariante", "client"), ("Dr. Festa", "professional")]
