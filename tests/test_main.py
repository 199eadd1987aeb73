def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root(client):
    body = client.get("/").json()
    assert body["docs"] == "/docs"
    assert body["version"]


def test_validation_errors_are_bad_request(client):
    response = client.post("/api/auth/login", json={"email": "someone@example.com"})
    assert response.status_code == 400
    assert isinstance(response.json()["detail"], list)
