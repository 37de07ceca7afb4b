import mongomock
from fastapi.testclient import TestClient

from database import USERS, get_db
from main import app


def test_register_hides_credentials(client):
    res = client.post("/users/register", json={
        "username": "NewUser", "email": "new@example.com", "fullName": "New User", "password": "s3cret!!",
    })
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["username"] == "newuser"
    assert "password" not in data
    assert data["watchHistory"] == []

    res = client.post("/users/register", json={
        "username": "newuser", "email": "other@example.com", "fullName": "Copy", "password": "s3cret!!",
    })
    assert res.status_code == 400


def test_register_validates_email(client):
    res = client.post("/users/register", json={
        "username": "someone", "email": "not-an-email", "fullName": "X", "password": "s3cret!!",
    })
    assert res.status_code == 400
    assert res.json()["errors"][0]["field"] == "email"


def test_channel_profile(client, make_user, as_user):
    channel = make_user("channel")
    fan = make_user("fan")
    client.post(f"/subscriptions/channel/{channel}", headers=as_user(fan))

    data = client.get("/users/channel/channel", headers=as_user(fan)).json()["data"]
    assert data["subscribersCount"] == 1
    assert data["channelsSubscribedToCount"] == 0
    assert data["isSubscribed"] is True
    assert "watchHistory" not in data

    assert client.get("/users/channel/nobody", headers=as_user(fan)).status_code == 404


def test_current_user_and_history(client, make_user, make_video, as_user):
    user = make_user("me")
    vid = make_video(user, title="seen")
    client.get(f"/videos/watch/{vid}", headers=as_user(user))

    me = client.get("/users/current", headers=as_user(user)).json()["data"]
    assert me["username"] == "me"
    assert me["watchHistory"] == [str(vid)]

    history = client.get("/users/history", headers=as_user(user)).json()["data"]
    assert [v["title"] for v in history] == ["seen"]


def test_health(client):
    assert client.get("/").status_code == 200
    assert client.get("/test").json()["database_connected"] is True


def test_update_account_details(client, db, make_user, as_user):
    user = make_user("me")
    res = client.patch("/users/updateAccount", json={"fullName": "Me Myself", "email": "me2@example.com"},
                       headers=as_user(user))
    assert res.status_code == 200
    data = res.json()["data"]
    assert (data["fullName"], data["email"]) == ("Me Myself", "me2@example.com")
    assert "password" not in data
    assert db[USERS].find_one({"_id": user})["email"] == "me2@example.com"

    # keeping one's own email is not a conflict
    res = client.patch("/users/updateAccount", json={"email": "me2@example.com"}, headers=as_user(user))
    assert res.status_code == 200


def test_update_account_rejects_taken_email_and_empty_body(client, make_user, as_user):
    make_user("taken")
    user = make_user("me")
    res = client.patch("/users/updateAccount", json={"email": "taken@example.com"}, headers=as_user(user))
    assert res.status_code == 400
    assert res.json()["message"] == "Email is already in use"

    assert client.patch("/users/updateAccount", json={}, headers=as_user(user)).status_code == 400
    assert client.patch("/users/updateAccount", json={"email": "nope"}, headers=as_user(user)).status_code == 400


def test_update_avatar_and_cover_image(client, db, make_user, as_user):
    user = make_user("me")
    res = client.patch("/users/avatar", json={"url": "https://img.example.com/new.png"}, headers=as_user(user))
    assert res.status_code == 200
    assert res.json()["data"]["avatar"] == "https://img.example.com/new.png"

    res = client.patch("/users/coverImage", json={"url": "https://img.example.com/cover.png"},
                       headers=as_user(user))
    assert res.status_code == 200
    stored = db[USERS].find_one({"_id": user})
    assert stored["coverImage"] == "https://img.example.com/cover.png"
    assert stored["avatar"] == "https://img.example.com/new.png"

    assert client.patch("/users/avatar", json={"url": "  "}, headers=as_user(user)).status_code == 400
    assert client.patch("/users/coverImage", json={"url": "https://img.example.com/x.png"}).status_code == 401


def test_startup_creates_indexes(monkeypatch):
    fresh = mongomock.MongoClient().videotube_startup
    monkeypatch.setitem(app.dependency_overrides, get_db, lambda: fresh)
    with TestClient(app):
        pass
    indexes = fresh[USERS].index_information()
    assert indexes["email_1"]["unique"] is True
