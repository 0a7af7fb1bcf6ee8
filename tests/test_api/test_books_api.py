# tests/test_api/test_books_api.py

from tests.utils import login

BOOK = {"title": "Dune", "author": "Frank Herbert", "location": "Lahore", "condition": "GOOD", "points_cost": 25}

def test_add_book_requires_login(client):
    assert client.post("/books", json=BOOK).status_code == 401

def test_add_and_get_book(client, alice):
    login(client, "alice@example.com")
    created = client.post("/books", json={**BOOK, "chapters": ["Part I", ""]})
    assert created.status_code == 201
    book = created.json()
    assert book["points_cost"] == 25
    assert book["chapters"] == ["Part I"]
    assert book["current_owner"]["name"] == "Alice"

    detail = client.get(f"/book/{book['id']}").json()
    assert detail["wishlist_count"] == 0
    assert detail["is_wishlisted"] is False

def test_add_book_missing_title(client, alice):
    login(client, "alice@example.com")
    response = client.post("/books", json={**BOOK, "title": "  "})
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"

def test_list_books_filters(client, make_book, alice, bob):
    make_book(alice, "Dune", "Frank Herbert")
    make_book(bob, "Emma", "Jane Austen", is_available=False)
    make_book(bob, "Hidden", "Someone", is_deleted=True)

    body = client.get("/books").json()
    assert body["total"] == 2
    assert client.get("/books", params={"available_only": True}).json()["total"] == 1
    assert [b["title"] for b in client.get("/books", params={"search": "austen"}).json()["items"]] == ["Emma"]

def test_soft_delete_flow(client, sample_book, alice, bob):
    login(client, "bob@example.com")
    assert client.post(f"/book/{sample_book.id}/delete").status_code == 403

    login(client, "alice@example.com")
    assert client.post(f"/book/{sample_book.id}/delete").json()["is_deleted"] is True
    assert client.get("/books").json()["total"] == 0
    assert client.get(f"/book/{sample_book.id}").status_code == 200
    assert len(client.get("/books/mine", params={"include_deleted": True}).json()) == 1
    assert client.get("/books/mine").json() == []

    login(client, "bob@example.com")
    assert client.get(f"/book/{sample_book.id}").status_code == 404

    login(client, "alice@example.com")
    assert client.post(f"/book/{sample_book.id}/restore").json()["is_deleted"] is False

def test_availability(client, sample_book, alice):
    login(client, "alice@example.com")
    response = client.post(f"/book/{sample_book.id}/availability", json={"is_available": False})
    assert response.json()["is_available"] is False

def test_purge_is_admin_only(client, sample_book, alice, admin):
    login(client, "alice@example.com")
    assert client.delete(f"/book/{sample_book.id}").status_code == 403
    login(client, "admin@example.com")
    assert client.delete(f"/book/{sample_book.id}").json() == {"id": sample_book.id, "deleted": True}
    assert client.get(f"/book/{sample_book.id}").status_code == 404

def test_wishlist_toggle(client, sample_book, bob):
    login(client, "bob@example.com")
    first = client.post(f"/book/{sample_book.id}/wishlist").json()
    assert first == {"book_id": sample_book.id, "wishlisted": True, "wishlist_count": 1}
    assert [b["id"] for b in client.get("/wishlist").json()] == [sample_book.id]
    assert client.get(f"/book/{sample_book.id}").json()["is_wishlisted"] is True

    second = client.post(f"/book/{sample_book.id}/wishlist").json()
    assert second["wishlisted"] is False
    assert second["wishlist_count"] == 0
    assert client.post("/book/missing/wishlist").status_code == 404
