def _post(client, headers, content="post"):
    return client.post("/api/posts", json={"content": content}, headers=headers).json()


def test_dashboard_requires_admin(client, make_user):
    _, headers = make_user()
    resp = client.get("/api/admin/dashboard", headers=headers)
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Require Admin Role!"
    assert client.get("/api/admin/dashboard").status_code == 403


def test_dashboard_overview_and_rankings(client, make_user, admin_headers):
    _, alice = make_user(name="Alice")
    _, bob = make_user(name="Bob")
    liked = _post(client, alice, "liked")
    discussed = _post(client, alice, "discussed")
    client.post(f"/api/posts/{liked['id']}/like", headers=bob)
    client.post("/api/comment", json={"post_id": discussed["id"], "content": "hm"}, headers=bob)

    resp = client.get("/api/admin/dashboard", headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    # the seeded admin profile counts as a user
    assert body["overview"] == {
        "total_users": 3,
        "total_posts": 2,
        "total_comments": 1,
        "new_users": 3,
        "new_posts": 2,
        "new_comments": 1,
    }
    activity = body["recent_activity"]
    assert [p["id"] for p in activity["posts"]] == [discussed["id"], liked["id"]]
    assert activity["most_liked_posts"][0]["id"] == liked["id"]
    assert activity["most_commented_posts"][0]["id"] == discussed["id"]
    assert [u["name"] for u in activity["users"]] == ["Bob", "Alice", "Admin"]


def test_history(client, make_user, admin_headers):
    _, alice = make_user()
    make_user(roles=[101, 102])
    _post(client, alice)

    resp = client.get("/api/admin/history", headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert sum(day["count"] for day in body["users_over_time"]) == 3
    assert sum(day["count"] for day in body["posts_over_time"]) == 1
    assert body["comments_over_time"] == []
    roles = {item["role"]: item["count"] for item in body["role_distribution"]}
    assert roles == {"admin": 1, "moderator": 1, "user": 2}
