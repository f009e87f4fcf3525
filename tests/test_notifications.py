from viraweb.domain.notifications.service import NotificationService


def test_unread_count_and_mark_read(client, db, user):
    service = NotificationService(db)
    first = service.notify(user.id, "Um", "primeira")
    service.notify(user.id, "Dois", "segunda", "warning")

    assert client.get("/api/notifications/unread-count").json() == {"unread_count": 2}

    response = client.post(f"/api/notifications/{first.id}/read")
    assert response.json()["read"] is True
    assert client.get("/api/notifications/unread-count").json() == {"unread_count": 1}

    assert client.post("/api/notifications/read-all").json() == {"updated": 1}
    assert client.get("/api/notifications/unread-count").json() == {"unread_count": 0}


def test_create_list_and_delete(client):
    created = client.post("/api/notifications", json={"title": "Aviso", "message": "Olá"})
    assert created.status_code == 201
    assert created.json()["type"] == "info"

    assert [n["title"] for n in client.get("/api/notifications").json()] == ["Aviso"]
    assert client.delete(f"/api/notifications/{created.json()['id']}").status_code == 200
    assert client.get("/api/notifications").json() == []


def test_foreign_notification_is_404(client, db, other_user):
    foreign = NotificationService(db).notify(other_user.id, "Privado", "x")
    response = client.post(f"/api/notifications/{foreign.id}/read")
    assert response.status_code == 404
    assert response.json()["detail"] == "Notificação não encontrada"


def test_notify_publishes_realtime_event(db, user, fake_redis):
    NotificationService(db).notify(user.id, "Evento", "x")
    channel = fake_redis.publish.call_args.args[0]
    assert channel.endswith(str(user.id))
