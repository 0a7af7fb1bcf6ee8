# tests/test_services/test_discussion_service.py

import pytest
from core.errors import ErrorKind
from core.services.discussion_service import ChatService, ForumService, merge_messages
from tests.utils import FakeModerationClient, as_current

@pytest.fixture
def forum(db_session, fake_moderation):
    return ForumService(db_session, moderation=fake_moderation)

@pytest.fixture
def chat(db_session):
    return ChatService(db_session)

def test_create_post_trims_content(forum, bob, sample_book):
    post = forum.create_post(as_current(bob), "   Loved the ending   ", book_id=sample_book.id).value
    assert post.content == "Loved the ending"
    assert post.book_id == sample_book.id
    assert post.author_id == bob.id
    assert not post.is_flagged

@pytest.mark.parametrize("content", ["", "  ab  ", "x" * 10001])
def test_create_post_length_limits(forum, bob, content):
    assert forum.create_post(as_current(bob), content).kind is ErrorKind.VALIDATION

def test_create_post_unknown_book(forum, bob):
    assert forum.create_post(as_current(bob), "Hello there", book_id="missing").kind is ErrorKind.NOT_FOUND

def test_flagged_content_hidden_from_listing(forum, bob):
    user = as_current(bob)
    visible = forum.create_post(user, "A thoughtful review").value
    hidden = forum.create_post(user, "SPOILERBOMB everywhere").value
    assert hidden.is_flagged

    forum.create_reply(user, visible.id, "Agreed, lovely")
    forum.create_reply(user, visible.id, "spoilerbomb reply")

    posts = forum.list_posts().value
    assert [p.id for p in posts] == [visible.id]

def test_moderation_fails_open(db_session, bob):
    forum = ForumService(db_session, moderation=FakeModerationClient(fail=True))
    post = forum.create_post(as_current(bob), "spoilerbomb while moderation is down").value
    assert not post.is_flagged

def test_create_reply_unknown_post(forum, bob):
    assert forum.create_reply(as_current(bob), "missing", "Hello there").kind is ErrorKind.NOT_FOUND

def test_list_posts_by_book(forum, bob, sample_book):
    user = as_current(bob)
    on_book = forum.create_post(user, "About this book", book_id=sample_book.id).value
    forum.create_post(user, "General chatter")
    assert [p.id for p in forum.list_posts(sample_book.id).value] == [on_book.id]
    assert len(forum.list_posts().value) == 2

def test_flag_queue_and_set_flag(forum, bob, admin):
    post = forum.create_post(as_current(bob), "spoilerbomb").value
    assert forum.list_flagged(as_current(bob)).kind is ErrorKind.FORBIDDEN

    flagged = forum.list_flagged(as_current(admin)).value
    assert [p.id for p in flagged["posts"]] == [post.id]

    assert forum.set_flag(as_current(admin), "post", post.id, False).value.is_flagged is False
    assert [p.id for p in forum.list_posts().value] == [post.id]
    assert forum.set_flag(as_current(admin), "thread", post.id, True).kind is ErrorKind.VALIDATION
    assert forum.set_flag(as_current(admin), "reply", "missing", True).kind is ErrorKind.NOT_FOUND

def test_chat_messages_ascending_with_snapshot(chat, sample_book, alice, carol):
    first = chat.post_message(as_current(alice), sample_book.id, " hi ").value
    second = chat.post_message(as_current(carol), sample_book.id, "hello").value
    assert second.id > first.id
    assert first.message == "hi"
    assert first.display_name == "Alice"
    assert second.display_name == "carol@example.com"

    assert [m.id for m in chat.list_messages(sample_book.id).value] == [first.id, second.id]
    assert [m.id for m in chat.list_messages(sample_book.id, after_id=first.id).value] == [second.id]

def test_chat_history_window_keeps_newest(chat, sample_book, alice):
    ids = [chat.post_message(as_current(alice), sample_book.id, f"msg {i}").value.id for i in range(5)]
    assert [m.id for m in chat.chat.list_for_book(sample_book.id, limit=3)] == ids[2:]
    assert [m.id for m in chat.chat.list_for_book(sample_book.id, after_id=ids[0], limit=2)] == ids[1:3]

def test_chat_validation(chat, sample_book, alice):
    assert chat.post_message(as_current(alice), sample_book.id, "   ").kind is ErrorKind.VALIDATION
    assert chat.post_message(as_current(alice), "missing", "hi").kind is ErrorKind.NOT_FOUND
    assert chat.list_messages("missing").kind is ErrorKind.NOT_FOUND

def test_merge_messages_dedupes_by_id():
    existing = [{"id": 1, "message": "a"}, {"id": 3, "message": "c"}]
    incoming = [{"id": 2, "message": "b"}, {"id": 3, "message": "c"}]
    assert [m["id"] for m in merge_messages(existing, incoming)] == [1, 2, 3]
    assert merge_messages([], []) == []
