def test_get(client):
    resp = client.get("/api/test")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Test API working"}


def test_post_echoes_body(client):
    resp = client.post("/api/test", json={"email": "new@user.com", "nested": [1, 2]})
    assert resp.status_code == 200
    assert resp.json() == {
        "message": "Test POST working",
        "received": {"email": "new@user.com", "nested": [1, 2]},
    }


def test_post_rejects_invalid_json(client):
    resp = client.post("/api/test", content=b"nope", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Invalid request format."}


def test_env_with_key(client, monkeypatch):
    monkeypatch.setenv("MAILERLITE_API_KEY", "abcdefghijklmnopqrstuvwxyz")
    resp = client.get("/api/test-env")
    assert resp.json() == {
        "hasApiKey": True,
        "apiKeyLength": 26,
        "apiKeyStart": "abcdefghij...",
    }


def test_env_without_key(client, monkeypatch):
    monkeypatch.delenv("MAILERLITE_API_KEY", raising=False)
    resp = client.get("/api/test-env")
    assert resp.json() == {"hasApiKey": False, "apiKeyLength": 0, "apiKeyStart": "none"}
