from datetime import date, timedelta

from viraweb.error_messages import CPF_ERROR
from viraweb.models import Goal, Notification, Patient


def test_create_patient_sets_active_and_notifies(client, db, user):
    response = client.post(
        "/api/patients",
        json={"name": "Carlos Lima", "cpf": "52998224725", "phone": "(11) 98765-4321"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "active"
    assert data["cpf"] == "529.982.247-25"
    assert data["phone"] == "11987654321"

    notification = db.query(Notification).filter(Notification.user_id == user.id).one()
    assert notification.title == "Cliente Adicionado"
    assert notification.message == "Carlos Lima foi adicionado com sucesso."
    assert notification.type == "success"


def test_create_patient_advances_client_goal(client, db, user):
    db.add(Goal(user_id=user.id, title="Novos clientes", target_value=1, category="clientes"))
    db.commit()

    client.post("/api/patients", json={"name": "Carlos Lima"})

    goal = db.query(Goal).one()
    assert goal.current_value == 1
    assert goal.status == "concluida"


def test_duplicate_cpf_returns_friendly_message(client):
    first = client.post("/api/patients", json={"name": "A", "cpf": "52998224725"})
    second = client.post("/api/patients", json={"name": "B", "cpf": "529.982.247-25"})

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["detail"] == CPF_ERROR


def test_blank_cpfs_do_not_collide(client):
    assert client.post("/api/patients", json={"name": "A", "cpf": ""}).status_code == 201
    assert client.post("/api/patients", json={"name": "B", "cpf": ""}).status_code == 201


def test_invalid_cpf_is_a_validation_error(client):
    response = client.post("/api/patients", json={"name": "A", "cpf": "12345678900"})
    assert response.status_code == 422


def test_patient_limit_returns_403(client, db, user):
    db.add_all([Patient(user_id=user.id, name=f"Cliente {i}") for i in range(75)])
    db.commit()

    response = client.post("/api/patients", json={"name": "Mais um"})
    assert response.status_code == 403
    assert "75" in response.json()["detail"]


def test_patients_of_other_tenants_are_invisible(client, db, other_user):
    foreign = Patient(user_id=other_user.id, name="Outro")
    db.add(foreign)
    db.commit()

    assert client.get("/api/patients").json() == []
    assert client.get(f"/api/patients/{foreign.id}").status_code == 404
    assert client.delete(f"/api/patients/{foreign.id}").status_code == 404


def test_update_and_delete(client, db, patient):
    response = client.patch(f"/api/patients/{patient.id}", json={"address": "Rua A, 10"})
    assert response.status_code == 200
    assert response.json()["address"] == "Rua A, 10"

    response = client.delete(f"/api/patients/{patient.id}")
    assert response.status_code == 200
    assert db.query(Patient).count() == 0
    titles = [n.title for n in db.query(Notification).all()]
    assert titles == ["Cliente Atualizado", "Cliente Removido"]


def test_partial_updates(client, patient):
    assert client.put(f"/api/patients/{patient.id}/notes", json={"notes": "Alergia"}).json()["notes"] == "Alergia"
    photo = client.put(f"/api/patients/{patient.id}/photo", json={"profile_photo_url": "https://cdn/p.png"})
    assert photo.json()["profile_photo_url"] == "https://cdn/p.png"
    assert client.put(f"/api/patients/{patient.id}/status", json={"status": "inactive"}).json()["status"] == "inactive"


def test_check_overdue_notifies_each_patient(client, db, patient):
    patient.payment_status = "overdue"
    patient.payment_due_date = date.today() - timedelta(days=3)
    db.commit()

    response = client.post("/api/patients/check-overdue")

    assert response.json() == {"notified": 1}
    notification = db.query(Notification).one()
    assert notification.title == "Pagamento Atrasado"
    assert notification.type == "warning"
