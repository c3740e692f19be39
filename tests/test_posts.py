import app.services.post_writer as post_writer
from app.config import settings


def _create(client, headers, content="hello world", **extra):
    resp = client.post("/api/posts", json={"content": content, **extra}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_post_returns_enriched_view(client, make_user):
    user_id, headers = make_user(name="Alice")
    post = _create(client, headers, doc_uri="/static/uploads/x.png")
    assert post["content"] == "hello world"
    assert post["doc_uri"] == "/static/uploads/x.png"
    assert post["likes"] == []
    assert post["likes_count"] == 0
    assert post["comments_count"] == 0
    assert post["user"] == {"id": user_id, "name": "Alice", "avatar": ""}
    assert post["created_at"] is not None


def test_create_post_validation(client, make_user):
    _, headers = make_user()
    assert client.post("/api/posts", json={"content": ""}, headers=headers).status_code == 422
    assert client.post("/api/posts", json={"content": "x"}).status_code == 403


def test_list_posts_is_public_and_newest_first(client, make_user):
    _, headers = make_user()
    first = _create(client, headers, "first")
    second = _create(client, headers, "second")
    resp = client.get("/api/posts")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == [second["id"], first["id"]]


def test_feed_excludes_own_posts_and_paginates(client, make_user):
    _, alice = make_user()
    _, bob = make_user()
    _create(client, alice, "mine")
    bob_posts = [_create(client, bob, f"bob {i}") for i in range(3)]

    resp = client.get("/api/posts/feed", params={"page": 1, "limit": 2}, headers=alice)
    assert resp.status_code == 200
    body = resp.json()
    assert [p["id"] for p in body["items"]] == [bob_posts[2]["id"], bob_posts[1]["id"]]
    assert body["pagination"] == {"current_page": 1, "total_pages": 2, "total_items": 3, "has_more": True}

    resp = client.get("/api/posts/feed", params={"page": 2, "limit": 2}, headers=alice)
    body = resp.json()
    assert [p["id"] for p in body["items"]] == [bob_posts[0]["id"]]
    assert body["pagination"]["has_more"] is False


def test_feed_page_past_the_end(client, make_user):
    _, alice = make_user()
    _, bob = make_user()
    _create(client, bob)
    body = client.get("/api/posts/feed", params={"page": 5}, headers=alice).json()
    assert body["items"] == []
    assert body["pagination"] == {"current_page": 5, "total_pages": 1, "total_items": 1, "has_more": False}


def test_feed_rejects_bad_pagination(client, make_user):
    _, headers = make_user()
    assert client.get("/api/posts/feed", params={"page": 0}, headers=headers).status_code == 422
    assert client.get("/api/posts/feed", params={"limit": 101}, headers=headers).status_code == 422


def test_feed_sort_by_likes(client, make_user):
    _, alice = make_user()
    _, bob = make_user()
    _, carol = make_user()
    quiet = _create(client, bob, "quiet")
    popular = _create(client, bob, "popular")
    liked_once = _create(client, bob, "liked once")
    client.post(f"/api/posts/{popular['id']}/like", headers=alice)
    client.post(f"/api/posts/{popular['id']}/like", headers=carol)
    client.post(f"/api/posts/{liked_once['id']}/like", headers=alice)

    body = client.get("/api/posts/feed", params={"sort_by": "likes"}, headers=alice).json()
    assert [p["id"] for p in body["items"]] == [popular["id"], liked_once["id"], quiet["id"]]
    assert body["items"][0]["likes_count"] == 2


def test_feed_sort_by_comments(client, make_user):
    _, alice = make_user()
    _, bob = make_user()
    plain = _create(client, bob, "plain")
    discussed = _create(client, bob, "discussed")
    plain_newer = _create(client, bob, "plain newer")
    for text in ("one", "two"):
        client.post("/api/comment", json={"post_id": discussed["id"], "content": text}, headers=alice)

    body = client.get("/api/posts/feed", params={"sort_by": "comments"}, headers=alice).json()
    assert [p["id"] for p in body["items"]] == [discussed["id"], plain_newer["id"], plain["id"]]
    assert body["items"][0]["comments_count"] == 2


def test_my_posts_and_user_posts(client, make_user):
    alice_id, alice = make_user()
    _, bob = make_user()
    mine = _create(client, alice, "mine")
    _create(client, bob, "theirs")

    body = client.get("/api/posts/user/me", headers=alice).json()
    assert [p["id"] for p in body["items"]] == [mine["id"]]

    body = client.get(f"/api/posts/user/{alice_id}", headers=bob).json()
    assert [p["id"] for p in body["items"]] == [mine["id"]]
    assert body["pagination"]["total_items"] == 1


def test_get_post_and_not_found(client, make_user):
    _, headers = make_user()
    post = _create(client, headers)
    assert client.get(f"/api/posts/{post['id']}", headers=headers).json()["id"] == post["id"]
    resp = client.get("/api/posts/9999", headers=headers)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Post not found"


def test_update_post_owner_admin_and_stranger(client, make_user, admin_headers):
    _, owner = make_user()
    _, stranger = make_user()
    post = _create(client, owner, "draft")

    resp = client.put(f"/api/posts/{post['id']}", json={"content": "edited"}, headers=owner)
    assert resp.status_code == 200
    assert resp.json()["content"] == "edited"

    resp = client.put(f"/api/posts/{post['id']}", json={"content": "hijack"}, headers=stranger)
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Not authorized to update this post"

    resp = client.put(f"/api/posts/{post['id']}", json={"doc_uri": "https://cdn/x.png"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["content"] == "edited"
    assert resp.json()["doc_uri"] == "https://cdn/x.png"


def test_update_post_keeps_doc_uri_when_blank(client, make_user):
    _, owner = make_user()
    post = _create(client, owner, "with file", doc_uri="/static/uploads/doc.png")
    resp = client.put(f"/api/posts/{post['id']}", json={"content": "y", "doc_uri": ""}, headers=owner)
    assert resp.status_code == 200
    assert resp.json()["content"] == "y"
    assert resp.json()["doc_uri"] == "/static/uploads/doc.png"


def test_delete_post_removes_comments_and_likes(client, make_user):
    _, owner = make_user()
    _, other = make_user()
    post = _create(client, owner)
    client.post(f"/api/posts/{post['id']}/like", headers=other)
    comment = client.post("/api/comment", json={"post_id": post["id"], "content": "hi"}, headers=other).json()

    resp = client.delete(f"/api/posts/{post['id']}", headers=other)
    assert resp.status_code == 403
    assert resp.json()["detail"] == "Not authorized to delete this post"

    resp = client.delete(f"/api/posts/{post['id']}", headers=owner)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Post deleted successfully"}
    assert client.get(f"/api/posts/{post['id']}", headers=owner).status_code == 404
    assert client.get(f"/api/comment/{comment['id']}", headers=owner).status_code == 404
    assert client.delete(f"/api/posts/{post['id']}", headers=owner).status_code == 404


def test_like_toggles(client, make_user):
    _, owner = make_user()
    fan_id, fan = make_user()
    post = _create(client, owner)

    liked = client.post(f"/api/posts/{post['id']}/like", headers=fan).json()
    assert liked["likes"] == [fan_id]
    assert liked["likes_count"] == 1

    unliked = client.post(f"/api/posts/{post['id']}/like", headers=fan).json()
    assert unliked["likes"] == []
    assert unliked["likes_count"] == 0

    assert client.post("/api/posts/9999/like", headers=fan).status_code == 404


def test_generate_post_unconfigured(client, make_user, monkeypatch):
    monkeypatch.setattr(settings, "RAPIDAPI_KEY", "")
    _, headers = make_user()
    resp = client.post("/api/posts/generate", json={"message": "python tips"}, headers=headers)
    assert resp.status_code == 503
    assert resp.json()["detail"] == "Post generation is not configured"


def test_generate_post_returns_cleaned_content(client, make_user, monkeypatch):
    async def fake_generate(message):
        return post_writer.clean_generated_content(f"```html\n<p>{message}</p>\n```")

    monkeypatch.setattr("app.api.posts.write_post", fake_generate)
    _, headers = make_user()
    resp = client.post("/api/posts/generate", json={"message": "python tips"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"content": "<p>python tips</p>"}


def test_generate_post_upstream_failure(client, make_user, monkeypatch):
    async def failing(message):
        raise post_writer.PostWriterError("Failed to generate social media post")

    monkeypatch.setattr("app.api.posts.write_post", failing)
    _, headers = make_user()
    resp = client.post("/api/posts/generate", json={"message": "x"}, headers=headers)
    assert resp.status_code == 502
    assert resp.json()["detail"] == "Failed to generate social media post"


def test_clean_generated_content():
    assert post_writer.clean_generated_content("```html\n<p>a</p>\n```") == "<p>a</p>"
    assert post_writer.clean_generated_content("  <p>b</p>  ") == "<p>b</p>"
    assert post_writer.clean_generated_content(None) == ""
