from datetime import timedelta

from bson import ObjectId

from database import COMMENTS


def test_comment_thread_is_paginated_newest_first(client, db, make_user, make_video, as_user, fixed_now):
    owner = make_user("owner")
    fan = make_user("fan")
    vid = make_video(owner)
    elsewhere = make_video(owner, title="elsewhere")
    for i in range(3):
        db[COMMENTS].insert_one({"content": f"c{i}", "video": vid, "owner": fan,
                                 "createdAt": fixed_now + timedelta(minutes=i)})
    db[COMMENTS].insert_one({"content": "other", "video": elsewhere, "owner": fan, "createdAt": fixed_now})

    res = client.get(f"/comments/{vid}", params={"page": 1, "limit": 2}, headers=as_user(owner))
    data = res.json()["data"]
    assert [c["content"] for c in data["comments"]] == ["c2", "c1"]
    assert data["totalDocs"] == 3
    assert data["hasNextPage"] is True
    assert data["comments"][0]["owner"] == {
        "id": str(fan), "avatar": "https://img.example.com/fan.png", "username": "fan",
    }


def test_add_comment(client, make_user, make_video, as_user):
    user = make_user()
    vid = make_video(user)
    res = client.post(f"/comments/{vid}", json={"content": "  great video  "}, headers=as_user(user))
    assert res.status_code == 201
    assert res.json()["data"]["content"] == "great video"

    assert client.post(f"/comments/{vid}", json={"content": ""}, headers=as_user(user)).status_code == 400
    assert client.post(f"/comments/{ObjectId()}", json={"content": "hi"}, headers=as_user(user)).status_code == 404
    assert client.post("/comments/123", json={"content": "hi"}, headers=as_user(user)).status_code == 400


def test_only_the_author_edits_a_comment(client, make_user, make_video, as_user):
    author = make_user("author")
    other = make_user("other")
    vid = make_video(author)
    cid = client.post(f"/comments/{vid}", json={"content": "first"}, headers=as_user(author)).json()["data"]["id"]

    assert client.patch(f"/comments/{cid}", json={"content": "x"}, headers=as_user(other)).status_code == 403
    assert client.delete(f"/comments/{cid}", headers=as_user(other)).status_code == 403

    res = client.patch(f"/comments/{cid}", json={"content": "edited"}, headers=as_user(author))
    assert res.json()["data"]["content"] == "edited"
    assert client.delete(f"/comments/{cid}", headers=as_user(author)).status_code == 200
    assert client.delete(f"/comments/{cid}", headers=as_user(author)).status_code == 404


def test_tweets(client, make_user, as_user):
    author = make_user("author")
    other = make_user("other")
    tid = client.post("/tweets", json={"content": "hello"}, headers=as_user(author)).json()["data"]["id"]

    res = client.get(f"/tweets/user/{author}", headers=as_user(other))
    tweets = res.json()["data"]
    assert [t["content"] for t in tweets] == ["hello"]
    assert tweets[0]["tweetBy"]["username"] == "author"

    assert client.patch(f"/tweets/{tid}", json={"content": "mine"}, headers=as_user(other)).status_code == 403
    res = client.patch(f"/tweets/{tid}", json={"content": "hello again"}, headers=as_user(author))
    assert res.json()["data"]["content"] == "hello again"

    res = client.post(f"/likes/tweet/{tid}", headers=as_user(other))
    assert res.json()["data"]["isLiked"] is True

    assert client.delete(f"/tweets/{tid}", headers=as_user(author)).status_code == 200
    assert client.get(f"/tweets/user/{author}", headers=as_user(other)).json()["data"] == []
    assert client.get(f"/tweets/user/{ObjectId()}", headers=as_user(other)).status_code == 404
