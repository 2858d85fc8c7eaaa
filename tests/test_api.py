"""End-to-end tests for the REST API through FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from devhub.config import Settings
from devhub.notifications import LogMailer
from web.backend.app.main import create_app

ADMIN_EMAIL = "admin@devhub.io"


class SwitchableMailer(LogMailer):
    def __init__(self):
        super().__init__()
        self.fail = False

    def send(self, mail):
        if self.fail:
            raise ConnectionRefusedError("relay down")
        return super().send(mail)


@pytest.fixture
def mailer():
    return SwitchableMailer()


@pytest.fixture
def app(tmp_path, mailer):
    settings = Settings(
        data_dir=tmp_path,
        jwt_secret="test-secret",
        admin_emails=[ADMIN_EMAIL],
        admin_mail="inbox@devhub.io",
    )
    app = create_app(settings, mailer=mailer)
    yield app
    app.state.services.close()


@pytest.fixture
def client(app):
    return TestClient(app)


def _register(client, username, email=None, password="Passw0rd!"):
    resp = client.post(
        "/api/auth/register",
        json={"username": username, "email": email or f"{username}@x.com", "password": password},
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return body["user"], {"Authorization": f"Bearer {body['token']}"}


# ── Meta ─────────────────────────────────────────────────────────────


def test_root_and_health(client):
    assert client.get("/").json()["name"] == "DevHub API"
    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["timestamp"]


# ── Auth ─────────────────────────────────────────────────────────────


def test_register_conflict_and_login(client):
    user, _ = _register(client, "alice", "alice@x.com")
    assert user["username"] == "alice"
    assert user["role"] == "member"
    assert "password" not in str(user).lower()

    dup = client.post(
        "/api/auth/register",
        json={"username": "alice_two", "email": "alice@x.com", "password": "x"},
    )
    assert dup.status_code == 409

    ok = client.post("/api/auth/login", json={"identifier": "alice@x.com", "password": "Passw0rd!"})
    assert ok.status_code == 200
    assert ok.json()["token"]
    assert ok.json()["user"]["lastLogin"]

    bad = client.post("/api/auth/login", json={"identifier": "alice@x.com", "password": "wrong"})
    assert bad.status_code == 401
    assert bad.json()["message"] == "Invalid credentials"


def test_register_validation_errors(client):
    resp = client.post("/api/auth/register", json={"username": "a!", "email": "nope", "password": ""})
    assert resp.status_code == 400
    fields = {e["field"] for e in resp.json()["errors"]}
    assert {"username", "email", "password"} <= fields


def test_profile_verify_logout(client):
    user, headers = _register(client, "alice")
    assert client.get("/api/auth/profile", headers=headers).json()["user"]["id"] == user["id"]
    verify = client.get("/api/auth/verify", headers=headers).json()
    assert verify == {"valid": True, "user": {"id": user["id"], "username": "alice", "email": "alice@x.com"}}

    assert client.post("/api/auth/logout", headers=headers).status_code == 200
    assert client.get("/api/auth/verify", headers=headers).status_code == 401


def test_missing_and_bad_tokens(client):
    missing = client.get("/api/auth/profile")
    assert missing.status_code == 401
    assert missing.headers["www-authenticate"] == "Bearer"
    bad = client.get("/api/auth/profile", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401


# ── Blog ─────────────────────────────────────────────────────────────


def test_blog_update_authorization(client):
    _, alice = _register(client, "alice")
    _, bob = _register(client, "bob")

    created = client.post("/api/blog", json={"title": "Hi", "content": "World"}, headers=alice)
    assert created.status_code == 201
    post = created.json()["post"]
    assert post["isPublished"] is True
    assert post["author"]["username"] == "alice"

    forbidden = client.put(f"/api/blog/{post['id']}", json={"title": "Hacked", "content": "World"}, headers=bob)
    assert forbidden.status_code == 403

    updated = client.put(f"/api/blog/{post['id']}", json={"title": "Hi2", "content": "World"}, headers=alice)
    assert updated.status_code == 200
    assert updated.json()["post"]["title"] == "Hi2"
    assert client.get(f"/api/blog/{post['id']}").json()["post"]["title"] == "Hi2"


def test_blog_list_get_and_views(client):
    _, alice = _register(client, "alice")
    for i in range(3):
        client.post("/api/blog", json={"title": f"Post {i}", "content": "body"}, headers=alice)
    draft = client.post(
        "/api/blog",
        json={"title": "Draft", "content": "body", "isPublished": False},
        headers=alice,
    ).json()["post"]

    listing = client.get("/api/blog", params={"page": "1", "limit": "2"}).json()
    assert len(listing["posts"]) == 2
    assert listing["pagination"] == {
        "currentPage": 1,
        "totalPages": 2,
        "totalPosts": 3,
        "hasNext": True,
        "hasPrev": False,
    }
    assert client.get("/api/blog", params={"page": "x", "limit": "y"}).json()["pagination"]["currentPage"] == 1

    assert client.get(f"/api/blog/{draft['id']}").status_code == 404
    post_id = listing["posts"][0]["id"]
    client.get(f"/api/blog/{post_id}")
    assert client.get(f"/api/blog/{post_id}").json()["post"]["views"] == 2


def test_blog_validation_and_delete(client):
    _, alice = _register(client, "alice")
    bad = client.post("/api/blog", json={"title": "", "content": "body", "image": "not a url"}, headers=alice)
    assert bad.status_code == 400
    assert {"title", "image"} <= {e["field"] for e in bad.json()["errors"]}

    post = client.post("/api/blog", json={"title": "Hi", "content": "World"}, headers=alice).json()["post"]
    assert client.delete(f"/api/blog/{post['id']}", headers=alice).status_code == 200
    assert client.get(f"/api/blog/{post['id']}").status_code == 404


def test_comments_dual_author_removal(client, app, mailer):
    _, alice = _register(client, "alice")
    _, bob = _register(client, "bob")
    _, carol = _register(client, "carol")
    post = client.post("/api/blog", json={"title": "Hi", "content": "World"}, headers=alice).json()["post"]

    resp = client.post(f"/api/blog/{post['id']}/comments", json={"text": "nice"}, headers=bob)
    assert resp.status_code == 201
    comment = resp.json()["comment"]
    assert comment["author"]["username"] == "bob"

    app.state.services.dispatcher.drain(timeout=5)
    assert [m.to for m in mailer.sent] == ["alice@x.com"]

    url = f"/api/blog/{post['id']}/comments/{comment['id']}"
    assert client.delete(url, headers=carol).status_code == 403
    assert client.delete(url, headers=alice).status_code == 200
    assert client.delete(url, headers=alice).status_code == 404

    too_long = client.post(f"/api/blog/{post['id']}/comments", json={"text": "x" * 1001}, headers=bob)
    assert too_long.status_code == 400


# ── Forum ────────────────────────────────────────────────────────────


def test_forum_category_and_filters(client):
    _, alice = _register(client, "alice")
    thread = client.post("/api/forum", json={"title": "T", "content": "body"}, headers=alice).json()["thread"]
    assert thread["category"] == "General"
    client.post("/api/forum", json={"title": "U", "content": "body", "category": "react"}, headers=alice)

    general = client.get("/api/forum", params={"category": "General"}).json()
    assert [t["id"] for t in general["threads"]] == [thread["id"]]
    assert general["pagination"]["totalThreads"] == 1
    assert client.get("/api/forum", params={"category": "python"}).json()["threads"] == []
    assert len(client.get("/api/forum", params={"category": "all"}).json()["threads"]) == 2
    assert client.get("/api/forum/categories/list").json() == {"categories": ["General", "react"]}


def test_forum_lock_moderation(client):
    _, admin = _register(client, "admin", ADMIN_EMAIL)
    _, alice = _register(client, "alice")
    _, bob = _register(client, "bob")
    thread = client.post("/api/forum", json={"title": "T", "content": "body"}, headers=alice).json()["thread"]
    reply = client.post(f"/api/forum/{thread['id']}/replies", json={"text": "hi"}, headers=bob).json()["reply"]

    moderation = f"/api/forum/{thread['id']}/moderation"
    assert client.patch(moderation, json={"isLocked": True}, headers=alice).status_code == 403
    locked = client.patch(moderation, json={"isLocked": True, "isPinned": True}, headers=admin)
    assert locked.status_code == 200
    assert locked.json()["thread"]["isLocked"] is True

    edit = client.put(f"/api/forum/{thread['id']}", json={"title": "T2", "content": "body"}, headers=alice)
    assert edit.status_code == 403
    assert client.post(f"/api/forum/{thread['id']}/replies", json={"text": "late"}, headers=bob).status_code == 403
    assert client.delete(f"/api/forum/{thread['id']}", headers=alice).status_code == 403
    assert client.delete(f"/api/forum/{thread['id']}/replies/{reply['id']}", headers=bob).status_code == 200

    client.patch(moderation, json={"isLocked": False}, headers=admin)
    edit = client.put(f"/api/forum/{thread['id']}", json={"title": "T2", "content": "body"}, headers=alice)
    assert edit.status_code == 200
    assert edit.json()["thread"]["isPinned"] is True


# ── Users ────────────────────────────────────────────────────────────


def test_public_profile_and_listings(client):
    alice_user, alice = _register(client, "alice")
    _, bob = _register(client, "bob")
    post = client.post("/api/blog", json={"title": "Hi", "content": "World"}, headers=alice).json()["post"]
    client.post("/api/forum", json={"title": "T", "content": "body"}, headers=alice)
    client.post(f"/api/blog/{post['id']}/comments", json={"text": "self"}, headers=alice)
    client.post(f"/api/blog/{post['id']}/comments", json={"text": "other"}, headers=bob)

    profile = client.get(f"/api/user/{alice_user['id']}").json()["user"]
    assert "email" not in profile
    assert profile["stats"] == {"blogPosts": 1, "forumThreads": 1, "comments": 1}

    posts = client.get(f"/api/user/{alice_user['id']}/posts").json()
    assert posts["pagination"]["totalPosts"] == 1
    threads = client.get(f"/api/user/{alice_user['id']}/threads").json()
    assert threads["pagination"]["totalThreads"] == 1
    assert client.get("/api/user/missing").status_code == 404


def test_profile_password_and_deactivation(client):
    user, headers = _register(client, "alice", password="Old1pw!")

    resp = client.put(
        "/api/user/profile",
        json={"bio": "  Frontend dev  ", "avatar": "https://img.devhub.io/a.png"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["user"]["bio"] == "Frontend dev"
    assert resp.json()["user"]["avatar"] == "https://img.devhub.io/a.png"

    weak = client.put("/api/user/password", json={"currentPassword": "Old1pw!", "newPassword": "weak"}, headers=headers)
    assert weak.status_code == 400
    wrong = client.put("/api/user/password", json={"currentPassword": "nope", "newPassword": "New1pw!"}, headers=headers)
    assert wrong.status_code == 400
    assert wrong.json()["errors"][0]["field"] == "currentPassword"
    ok = client.put("/api/user/password", json={"currentPassword": "Old1pw!", "newPassword": "New1pw!"}, headers=headers)
    assert ok.status_code == 200

    post = client.post("/api/blog", json={"title": "Hi", "content": "World"}, headers=headers).json()["post"]
    assert client.delete("/api/user/account", headers=headers).status_code == 200
    assert client.get("/api/auth/profile", headers=headers).status_code == 401
    assert client.get(f"/api/user/{user['id']}").status_code == 404
    assert client.get(f"/api/blog/{post['id']}").status_code == 200
    login = client.post("/api/auth/login", json={"identifier": "alice", "password": "New1pw!"})
    assert login.status_code == 401


# ── Contact ──────────────────────────────────────────────────────────

CONTACT = {
    "name": "Jane Doe",
    "email": "jane@devhub.io",
    "subject": "Question about the API",
    "message": "How do I paginate the forum list?",
}


def test_contact_lifecycle(client, app, mailer):
    _, admin = _register(client, "admin", ADMIN_EMAIL)
    _, alice = _register(client, "alice")

    submitted = client.post("/api/contact", json=CONTACT, headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
    assert submitted.status_code == 201
    contact_id = submitted.json()["contact"]["id"]
    app.state.services.dispatcher.drain(timeout=5)
    assert sorted(m.to for m in mailer.sent) == ["inbox@devhub.io", "jane@devhub.io"]

    assert client.get("/api/contact").status_code == 401
    assert client.get("/api/contact", headers=alice).status_code == 403

    listing = client.get("/api/contact", headers=admin).json()
    assert listing["contacts"][0]["status"] == "pending"
    assert listing["pagination"]["totalContacts"] == 1

    fetched = client.get(f"/api/contact/{contact_id}", headers=admin).json()["contact"]
    assert fetched["status"] == "read"
    assert fetched["ipAddress"] == "203.0.113.7"

    mailer.fail = True
    failed = client.post(f"/api/contact/{contact_id}/reply", json={"replyMessage": "thanks, see the docs"}, headers=admin)
    assert failed.status_code == 502
    assert client.get(f"/api/contact/{contact_id}", headers=admin).json()["contact"]["status"] == "read"

    mailer.fail = False
    replied = client.post(f"/api/contact/{contact_id}/reply", json={"replyMessage": "thanks, see the docs"}, headers=admin)
    assert replied.status_code == 200
    contact = replied.json()["contact"]
    assert contact["status"] == "replied"
    assert contact["replied"] is True
    assert contact["repliedAt"]

    stats = client.get("/api/contact/stats/summary", headers=admin).json()
    assert stats == {"total": 1, "pending": 0, "read": 0, "replied": 1, "recentWeek": 1}

    status = client.patch(f"/api/contact/{contact_id}/status", json={"status": "pending"}, headers=admin)
    assert status.json()["contact"]["status"] == "pending"
    bad_status = client.patch(f"/api/contact/{contact_id}/status", json={"status": "archived"}, headers=admin)
    assert bad_status.status_code == 400

    assert client.delete(f"/api/contact/{contact_id}", headers=admin).status_code == 200
    assert client.get(f"/api/contact/{contact_id}", headers=admin).status_code == 404


def test_contact_validation(client):
    resp = client.post("/api/contact", json={**CONTACT, "subject": "Hey", "message": "short"})
    assert resp.status_code == 400
    assert {"subject", "message"} <= {e["field"] for e in resp.json()["errors"]}


def test_blog_draft_publish_cycle(client):
    _, alice = _register(client, "alice")
    draft = client.post(
        "/api/blog",
        json={"title": "Draft", "content": "body", "isPublished": False},
        headers=alice,
    ).json()["post"]
    assert draft["isPublished"] is False

    published = client.put(
        f"/api/blog/{draft['id']}",
        json={"title": "Draft", "content": "body", "isPublished": True},
        headers=alice,
    )
    assert published.status_code == 200
    assert published.json()["post"]["isPublished"] is True
    assert client.get(f"/api/blog/{draft['id']}").status_code == 200

    kept = client.put(f"/api/blog/{draft['id']}", json={"title": "Draft", "content": "edited"}, headers=alice)
    assert kept.json()["post"]["isPublished"] is True

    client.put(
        f"/api/blog/{draft['id']}",
        json={"title": "Draft", "content": "edited", "isPublished": False},
        headers=alice,
    )
    assert client.get(f"/api/blog/{draft['id']}").status_code == 404


def test_urls_are_stored_as_sent(client):
    _, alice = _register(client, "alice")
    post = client.post(
        "/api/blog",
        json={"title": "Hi", "content": "World", "image": "https://x.com"},
        headers=alice,
    ).json()["post"]
    assert post["image"] == "https://x.com"

    profile = client.put("/api/user/profile", json={"avatar": "https://img.devhub.io"}, headers=alice)
    assert profile.json()["user"]["avatar"] == "https://img.devhub.io"

    bad = client.put("/api/user/profile", json={"avatar": "ftp://img.devhub.io/a.png"}, headers=alice)
    assert bad.status_code == 400
    assert bad.json()["errors"][0]["field"] == "avatar"


def test_contact_reply_runs_off_the_event_loop():
    import inspect

    from web.backend.app.routers.contact import reply_contact

    assert not inspect.iscoroutinefunction(reply_contact)
