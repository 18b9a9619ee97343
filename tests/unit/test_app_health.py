def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "api"}


def test_unknown_route_is_404(client):
    assert client.get("/api/nowhere").status_code == 404
