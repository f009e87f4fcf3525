from viraweb.models import UserNote


def test_note_crud(client):
    created = client.post("/api/notes", json={"title": " Fornecedores ", "content": "Ligar na segunda"})
    assert created.status_code == 201
    note = created.json()
    assert note["title"] == "Fornecedores"

    updated = client.patch(f"/api/notes/{note['id']}", json={"content": "Ligar na terça"})
    assert updated.json()["content"] == "Ligar na terça"
    assert updated.json()["title"] == "Fornecedores"

    assert client.delete(f"/api/notes/{note['id']}").status_code == 200
    assert client.get(f"/api/notes/{note['id']}").status_code == 404


def test_notes_are_scoped_to_the_tenant(client, db, other_user):
    db.add(UserNote(user_id=other_user.id, title="Privada"))
    db.commit()

    assert client.get("/api/notes").json() == []
