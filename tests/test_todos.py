def test_todo_lifecycle(client):
    created = client.post("/api/todos", json={"title": "  Ligar para fornecedor ", "due_date": "2026-10-25"})
    assert created.status_code == 201
    todo = created.json()
    assert todo["title"] == "Ligar para fornecedor"
    assert todo["completed"] is False

    assert client.post(f"/api/todos/{todo['id']}/toggle").json()["completed"] is True
    assert client.post(f"/api/todos/{todo['id']}/toggle").json()["completed"] is False

    updated = client.patch(f"/api/todos/{todo['id']}", json={"description": "Orçamento de luvas"})
    assert updated.json()["description"] == "Orçamento de luvas"

    assert client.delete(f"/api/todos/{todo['id']}").status_code == 200
    assert client.get("/api/todos").json() == []


def test_blank_title_is_rejected(client):
    assert client.post("/api/todos", json={"title": "   "}).status_code == 422


def test_unknown_todo_is_404(client):
    assert client.post("/api/todos/999/toggle").status_code == 404
