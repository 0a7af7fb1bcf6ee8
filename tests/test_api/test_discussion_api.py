# tests/test_api/test_discussion_api.py

from tests.utils import login

def test_forum_hides_flagged_and_anonymous_authors(client, alice, bob, admin):
    login(client, "alice@example.com")
    post = client.post("/forum/posts", json={"content": "Who has read Dune?", "is_anonymous": True}).json()
    assert post["author_id"] is None
    assert post["author_name"] is None

    login(client, "bob@example.com")
    client.post("/forum/replies", json={"post_id": post["id"], "content": "Me, twice!"})
    client.post("/forum/replies", json={"post_id": post["id"], "content": "spoilerbomb incoming"})
    client.post("/forum/posts", json={"content": "spoilerbomb post"})

    posts = client.get("/forum/posts").json()
    assert [p["id"] for p in posts] == [post["id"]]
    assert posts[0]["author_name"] is None
    assert [r["content"] for r in posts[0]["replies"]] == ["Me, twice!"]
    assert posts[0]["replies"][0]["author_name"] == "Bob"

    login(client, "admin@example.com")
    flagged = client.get("/forum/flagged").json()
    assert len(flagged["posts"]) == 1
    assert len(flagged["replies"]) == 1

    reply_id = flagged["replies"][0]["id"]
    assert client.post(f"/forum/reply/{reply_id}/flag", json={"flagged": False}).json()["is_flagged"] is False
    assert len(client.get("/forum/posts").json()[0]["replies"]) == 2

def test_forum_content_validation(client, alice):
    login(client, "alice@example.com")
    assert client.post("/forum/posts", json={"content": "hi"}).status_code == 400

def test_chat_messages(client, sample_book, alice, bob):
    assert client.post("/chat/messages", params={"bookId": sample_book.id}, json={"message": "hi"}).status_code == 401

    login(client, "alice@example.com")
    first = client.post("/chat/messages", params={"bookId": sample_book.id}, json={"message": "Still available?"}).json()
    login(client, "bob@example.com")
    second = client.post("/chat/messages", params={"bookId": sample_book.id}, json={"message": "Yes"}).json()
    assert second["id"] > first["id"]
    assert second["display_name"] == "Bob"

    messages = client.get("/chat/messages", params={"bookId": sample_book.id}).json()
    assert [m["id"] for m in messages] == [first["id"], second["id"]]
    newer = client.get("/chat/messages", params={"bookId": sample_book.id, "afterId": first["id"]}).json()
    assert [m["id"] for m in newer] == [second["id"]]

def test_reports(client, sample_book, alice, bob, admin):
    login(client, "bob@example.com")
    exchange_id = client.post("/exchange", json={"book_id": sample_book.id}).json()["id"]
    assert client.post("/reports", json={"exchange_id": exchange_id, "reason": "OTHER"}).status_code == 400

    login(client, "alice@example.com")
    client.post(f"/exchange/{exchange_id}/approve")
    client.post(f"/exchange/{exchange_id}/complete")

    login(client, "bob@example.com")
    report = client.post("/reports", json={"exchange_id": exchange_id, "reason": "MISSING_PAGES"})
    assert report.status_code == 201
    assert [r["id"] for r in client.get("/reports/mine").json()] == [report.json()["id"]]

    login(client, "admin@example.com")
    updated = client.put(f"/reports/{report.json()['id']}", json={"status": "UNDER_REVIEW"}).json()
    assert updated["status"] == "UNDER_REVIEW"
    assert len(client.get("/reports", params={"status": "UNDER_REVIEW"}).json()) == 1
