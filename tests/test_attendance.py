from viraweb.models import Attendance, Patient, Payment


def test_second_write_for_the_same_day_overwrites(client, db, patient):
    first = client.put(
        "/api/attendance",
        json={"patient_id": patient.id, "session_date": "2026-10-19", "status": "absent"},
    )
    second = client.put(
        "/api/attendance",
        json={"patient_id": patient.id, "session_date": "2026-10-19", "status": "present", "notes": "Chegou"},
    )

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json()["id"] == first.json()["id"]
    assert second.json()["status"] == "present"
    assert db.query(Attendance).count() == 1


def test_stats(client, db, user, patient):
    payment = Payment(user_id=user.id, patient_id=patient.id, amount=100, status="paid")
    db.add(payment)
    db.commit()

    for day, status in [("2026-10-01", "present"), ("2026-10-08", "present"), ("2026-10-15", "absent"), ("2026-10-22", "late")]:
        body = {"patient_id": patient.id, "session_date": day, "status": status}
        if day == "2026-10-01":
            body["payment_id"] = payment.id
        client.put("/api/attendance", json=body)

    stats = client.get(f"/api/attendance/patients/{patient.id}/stats").json()
    assert stats == {
        "total": 4,
        "present": 2,
        "absent": 1,
        "late": 1,
        "cancelled": 0,
        "paid": 1,
        "attendance_rate": 50.0,
    }

    history = client.get(f"/api/attendance/patients/{patient.id}").json()
    assert [r["session_date"] for r in history] == ["2026-10-22", "2026-10-15", "2026-10-08", "2026-10-01"]


def test_unknown_payment_is_404(client, patient):
    response = client.put(
        "/api/attendance",
        json={"patient_id": patient.id, "session_date": "2026-10-19", "status": "present", "payment_id": 999},
    )
    assert response.status_code == 404


def test_foreign_patient_is_404(client, db, other_user):
    foreign = Patient(user_id=other_user.id, name="Outro")
    db.add(foreign)
    db.commit()

    response = client.put(
        "/api/attendance",
        json={"patient_id": foreign.id, "session_date": "2026-10-19", "status": "present"},
    )
    assert response.status_code == 404
    assert client.get(f"/api/attendance/patients/{foreign.id}").status_code == 404


def test_empty_history_has_zero_rate(client, patient):
    stats = client.get(f"/api/attendance/patients/{patient.id}/stats").json()
    assert stats["total"] == 0
    assert stats["attendance_rate"] == 0.0


def test_status_only_rewrite_keeps_payment_and_notes(client, db, user, patient):
    payment = Payment(user_id=user.id, patient_id=patient.id, amount=100, status="paid")
    db.add(payment)
    db.commit()

    client.put(
        "/api/attendance",
        json={
            "patient_id": patient.id,
            "session_date": "2026-10-19",
            "status": "present",
            "payment_id": payment.id,
            "notes": "Pagou em dinheiro",
        },
    )
    response = client.put(
        "/api/attendance",
        json={"patient_id": patient.id, "session_date": "2026-10-19", "status": "late"},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "late"
    assert response.json()["payment_id"] == payment.id
    assert response.json()["notes"] == "Pagou em dinheiro"
    assert client.get(f"/api/attendance/patients/{patient.id}/stats").json()["paid"] == 1
