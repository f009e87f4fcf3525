from viraweb.models import Goal, Notification, Professional


def test_create_normalizes_work_days_and_advances_goal(client, db, user):
    db.add(Goal(user_id=user.id, title="Equipe", target_value=2, category="profissionais"))
    db.commit()

    response = client.post(
        "/api/professionals",
        json={"name": " Dra. Paula ", "specialty": "Psicologia", "work_days": ["Sexta", "segunda", "sexta"]},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Dra. Paula"
    assert data["status"] == "active"
    assert data["work_days"] == ["segunda", "sexta"]
    assert db.query(Goal).one().current_value == 1
    assert db.query(Notification).one().title == "Profissional Adicionado"


def test_invalid_work_day_is_rejected(client):
    response = client.post("/api/professionals", json={"name": "Dr. X", "work_days": ["feriado"]})
    assert response.status_code == 422


def test_professional_limit(client, db, user):
    db.add_all([Professional(user_id=user.id, name=f"Prof {i}") for i in range(7)])
    db.commit()

    response = client.post("/api/professionals", json={"name": "Oitavo"})
    assert response.status_code == 403


def test_status_update_and_delete(client, db, professional):
    response = client.put(f"/api/professionals/{professional.id}/status", json={"status": "inactive"})
    assert response.json()["status"] == "inactive"

    assert client.delete(f"/api/professionals/{professional.id}").status_code == 200
    missing = client.get(f"/api/professionals/{professional.id}")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Profissional não encontrado"


def test_other_tenants_professionals_are_hidden(client, db, other_user):
    db.add(Professional(user_id=other_user.id, name="Alheio"))
    db.commit()
    assert client.get("/api/professionals").json() == []
