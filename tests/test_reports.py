from datetime import date, datetime, time

from viraweb.domain.reports.service import ReportService, recent_months
from viraweb.models import Appointment, Patient


def test_recent_months_oldest_first():
    assert recent_months(date(2026, 2, 14)) == [
        date(2025, 9, 1),
        date(2025, 10, 1),
        date(2025, 11, 1),
        date(2025, 12, 1),
        date(2026, 1, 1),
        date(2026, 2, 1),
    ]


def test_appointments_by_month_is_zero_filled(db, user, patient):
    for day, status in [
        (date(2026, 10, 3), "completed"),
        (date(2026, 10, 9), "cancelled"),
        (date(2026, 8, 20), "scheduled"),
        (date(2026, 3, 1), "completed"),
    ]:
        db.add(Appointment(user_id=user.id, patient_id=patient.id, appointment_date=day, appointment_time=time(9, 0), status=status))
    db.commit()

    series = ReportService(db).get_appointments_by_month(user, today=date(2026, 10, 19))

    assert [m["month"] for m in series] == ["2026-05", "2026-06", "2026-07", "2026-08", "2026-09", "2026-10"]
    assert series[-1] == {"month": "2026-10", "label": "Out", "appointments": 2, "completed": 1, "cancelled": 1}
    assert series[3]["appointments"] == 1
    assert sum(m["appointments"] for m in series) == 3


def test_patient_growth_is_cumulative(db, user):
    db.add_all(
        [
            Patient(user_id=user.id, name="Antigo", created_at=datetime(2025, 12, 1)),
            Patient(user_id=user.id, name="Agosto", created_at=datetime(2026, 8, 5)),
            Patient(user_id=user.id, name="Outubro 1", created_at=datetime(2026, 10, 2)),
            Patient(user_id=user.id, name="Outubro 2", created_at=datetime(2026, 10, 10)),
        ]
    )
    db.commit()

    growth = ReportService(db).get_patient_growth(user, today=date(2026, 10, 19))

    assert [g["total_patients"] for g in growth] == [1, 1, 1, 2, 2, 4]
    assert growth[-1]["new_patients"] == 2


def test_saved_reports(client):
    created = client.post(
        "/api/reports",
        json={"title": "Outubro", "report_type": "financial", "data": {"total": 1200}},
    )
    assert created.status_code == 201
    assert created.json()["data"] == {"total": 1200}

    report_id = created.json()["id"]
    assert client.patch(f"/api/reports/{report_id}", json={"title": "Out/26"}).json()["title"] == "Out/26"
    assert client.delete(f"/api/reports/{report_id}").status_code == 200
    assert client.get("/api/reports").json() == []


def test_report_range_must_be_ordered(client):
    response = client.post(
        "/api/reports",
        json={"title": "X", "report_type": "custom", "date_range_start": "2026-10-31", "date_range_end": "2026-10-01"},
    )
    assert response.status_code == 422


def test_report_stats(client, db, user, patient):
    db.add_all(
        [
            Appointment(user_id=user.id, patient_id=patient.id, appointment_date=date(2026, 10, 1), appointment_time=time(9, 0), status="completed"),
            Appointment(user_id=user.id, patient_id=patient.id, appointment_date=date(2026, 10, 2), appointment_time=time(9, 0), status="scheduled"),
            Appointment(user_id=user.id, patient_id=patient.id, appointment_date=date(2026, 10, 3), appointment_time=time(9, 0), status="scheduled"),
        ]
    )
    db.commit()

    assert client.get("/api/reports/stats").json() == {
        "total_appointments": 3,
        "active_patients": 1,
        "completion_rate": 33,
    }
