from app.config import settings


def test_update_profile_merges_social_links(client, make_user):
    user_id, headers = make_user(name="Dana")
    resp = client.put(
        "/api/user",
        json={"bio": "Backend dev", "skills": "Python, Go", "social": {"github": "https://github.com/dana"}},
        headers=headers,
    )
    assert resp.status_code == 200
    profile = resp.json()
    assert profile["id"] == user_id
    assert profile["name"] == "Dana"
    assert profile["bio"] == "Backend dev"
    assert profile["social"]["github"] == "https://github.com/dana"

    resp = client.put("/api/user", json={"social": {"twitter": "https://x.com/dana"}}, headers=headers)
    social = resp.json()["social"]
    assert social["github"] == "https://github.com/dana"
    assert social["twitter"] == "https://x.com/dana"


def test_get_user_by_id_hides_roles(client, make_user):
    user_id, _ = make_user(name="Eve")
    _, viewer = make_user()
    resp = client.get(f"/api/user/{user_id}", headers=viewer)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Eve"
    assert resp.json()["roles"] == []

    resp = client.get("/api/user/9999", headers=viewer)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "User not found"


def test_admin_updates_other_profile(client, make_user, admin_headers):
    user_id, headers = make_user(name="Frank")
    resp = client.put(f"/api/user/{user_id}", json={"name": "Francis"}, headers=headers)
    assert resp.status_code == 403

    resp = client.put(f"/api/user/{user_id}", json={"name": "Francis"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["name"] == "Francis"
    assert client.put("/api/user/9999", json={"name": "x"}, headers=admin_headers).status_code == 404


def test_search_users(client, make_user):
    _, searcher = make_user(name="Searcher")
    python_id, python_dev = make_user(name="Zed")
    client.put("/api/user", json={"skills": "Python, FastAPI"}, headers=python_dev)
    make_user(name="Yara")
    client.post("/api/auth/signup", json={"username": "noname", "email": "noname@example.com", "password": "pw"})

    body = client.get("/api/user/search", params={"search": "PYTHON"}, headers=searcher).json()
    assert [u["id"] for u in body["items"]] == [python_id]
    assert body["pagination"]["total_items"] == 1

    body = client.get("/api/user/search", headers=searcher).json()
    names = [u["name"] for u in body["items"]]
    # sorted by name, excludes the searcher and accounts without a name
    assert names == ["Admin", "Yara", "Zed"]


def test_search_pagination(client, make_user):
    _, searcher = make_user(name="Searcher")
    for name in ("Ann", "Ben", "Cid"):
        make_user(name=name)
    body = client.get("/api/user/search", params={"page": 2, "limit": 2}, headers=searcher).json()
    assert [u["name"] for u in body["items"]] == ["Ben", "Cid"]
    assert body["pagination"] == {"current_page": 2, "total_pages": 2, "total_items": 4, "has_more": False}


def test_upload_avatar_stores_locally(client, make_user):
    user_id, headers = make_user()
    resp = client.post(
        "/api/user/avatar",
        files={"image": ("me.png", b"\x89PNG fake", "image/png")},
        headers=headers,
    )
    assert resp.status_code == 200
    avatar = resp.json()["avatar"]
    assert avatar.startswith(f"/static/uploads/{settings.OSS_PREFIX}/avatars/{user_id}/")
    assert avatar.endswith(".png")

    served = client.get(avatar)
    assert served.status_code == 200
    assert served.content == b"\x89PNG fake"


def test_generic_upload(client, make_user):
    _, headers = make_user()
    resp = client.post("/api/upload", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "No file uploaded"

    resp = client.post("/api/upload", files={"image": ("doc.jpg", b"jpeg", "image/jpeg")}, headers=headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Image uploaded successfully"
    assert body["url"].startswith("/static/uploads/")


def test_search_treats_wildcards_literally(client, make_user):
    _, searcher = make_user(name="Carol")
    make_user(name="Alice")
    make_user(name="Bob")
    percent_id, percent_user = make_user(name="Dee")
    client.put("/api/user", json={"bio": "100% remote"}, headers=percent_user)

    body = client.get("/api/user/search", params={"search": "%"}, headers=searcher).json()
    assert [u["id"] for u in body["items"]] == [percent_id]

    body = client.get("/api/user/search", params={"search": "_"}, headers=searcher).json()
    assert body["items"] == []
    assert body["pagination"]["total_items"] == 0
