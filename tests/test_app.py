from viraweb.security_headers import get_csp_policy


def test_health_is_exempt_from_security_headers(anonymous_client):
    response = anonymous_client.get("/health")
    assert response.json() == {"status": "healthy"}
    assert "X-Frame-Options" not in response.headers


def test_api_responses_carry_security_headers(client):
    response = client.get("/api/todos")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
    assert response.headers["Cache-Control"].startswith("no-store")
    assert "Content-Security-Policy" in response.headers


def test_csp_allows_stripe_checkout():
    policy = get_csp_policy()
    assert "https://js.stripe.com" in policy
    assert "frame-ancestors 'self'" in policy
