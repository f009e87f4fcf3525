from viraweb import email_service


def test_ticket_is_opened_and_support_is_emailed(client, user, monkeypatch, sent_emails):
    monkeypatch.setattr(email_service, "DEV_SUPPORT_EMAIL", "suporte@viraweb.online")

    response = client.post(
        "/api/support/tickets",
        json={"subject": "Erro no agendamento", "message": "Não consigo salvar", "priority": "high"},
    )

    assert response.status_code == 201
    ticket = response.json()
    assert ticket["status"] == "open"
    assert ticket["priority"] == "high"
    sent_emails.assert_awaited_once()
    assert sent_emails.await_args.kwargs["to"] == "suporte@viraweb.online"
    assert sent_emails.await_args.kwargs["subject"] == f"[Suporte #{ticket['id']}] Erro no agendamento"


def test_support_email_skipped_without_inbox(client, monkeypatch, sent_emails):
    monkeypatch.setattr(email_service, "DEV_SUPPORT_EMAIL", None)

    response = client.post("/api/support/tickets", json={"subject": "Dúvida", "message": "Como exportar?"})

    assert response.status_code == 201
    assert response.json()["priority"] == "medium"
    sent_emails.assert_not_awaited()


def test_conversation_and_status(client):
    ticket = client.post("/api/support/tickets", json={"subject": "Dúvida", "message": "Olá"}).json()

    reply = client.post(f"/api/support/tickets/{ticket['id']}/messages", json={"message": " Mais detalhes "})
    assert reply.status_code == 201
    assert reply.json()["message"] == "Mais detalhes"
    assert reply.json()["is_staff"] is False

    messages = client.get(f"/api/support/tickets/{ticket['id']}/messages").json()
    assert [m["message"] for m in messages] == ["Mais detalhes"]

    closed = client.put(f"/api/support/tickets/{ticket['id']}/status", json={"status": "resolved"})
    assert closed.json()["status"] == "resolved"


def test_unknown_ticket_is_404(client):
    response = client.get("/api/support/tickets/999/messages")
    assert response.status_code == 404
    assert response.json()["detail"] == "Chamado não encontrado"
