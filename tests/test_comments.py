"""
Tests for the comment lifecycle.
"""
from tests.conftest import auth, create_dream


def _comments_count(client, dream_id: int) -> int:
    return client.get(f"/dreams/{dream_id}").json()["dream"]["comments_count"]


def _comment(client, user, dream_id: int, content: str = "Nice dream") -> int:
    r = client.post(f"/dreams/{dream_id}/comments", json={"content": content}, headers=auth(user))
    assert r.status_code == 201, r.text
    return r.json()["comment_id"]


class TestCommentLifecycle:
    def test_create_comment_then_delete_restores_count(self, client, alice, bob):
        dream_id = create_dream(client, alice)
        assert _comments_count(client, dream_id) == 0

        comment_id = _comment(client, bob, dream_id)
        assert comment_id > 0
        assert _comments_count(client, dream_id) == 1

        r = client.delete(f"/comments/{comment_id}", headers=auth(bob))
        assert r.status_code == 200
        assert r.json() == {"success": True}
        assert _comments_count(client, dream_id) == 0

    def test_list_newest_first_with_author(self, client, alice, bob):
        dream_id = create_dream(client, alice)
        first = _comment(client, alice, dream_id, "first")
        second = _comment(client, bob, dream_id, "second")

        items = client.get(f"/dreams/{dream_id}/comments").json()["items"]
        assert [c["id"] for c in items] == [second, first]
        assert items[0]["content"] == "second"
        assert items[0]["author"] == {"id": bob.id, "name": "Bob"}
        assert items[1]["author"]["id"] == alice.id

    def test_list_pagination(self, client, alice):
        dream_id = create_dream(client, alice)
        ids = [_comment(client, alice, dream_id, f"c{i}") for i in range(4)]
        page = client.get(f"/dreams/{dream_id}/comments?limit=2&offset=2").json()["items"]
        assert [c["id"] for c in page] == [ids[1], ids[0]]

    def test_list_only_returns_comments_of_that_dream(self, client, alice):
        d1 = create_dream(client, alice)
        d2 = create_dream(client, alice)
        _comment(client, alice, d1)
        assert client.get(f"/dreams/{d2}/comments").json()["items"] == []

    def test_comments_from_many_users_count_up(self, client, make_user, alice):
        dream_id = create_dream(client, alice)
        for i in range(3):
            _comment(client, make_user(f"reader{i}"), dream_id)
        assert _comments_count(client, dream_id) == 3


class TestCommentErrors:
    def test_empty_content_rejected(self, client, alice):
        dream_id = create_dream(client, alice)
        r = client.post(f"/dreams/{dream_id}/comments", json={"content": "   "}, headers=auth(alice))
        assert r.status_code == 422
        assert _comments_count(client, dream_id) == 0

    def test_comment_on_missing_dream_is_404(self, client, alice):
        r = client.post("/dreams/999/comments", json={"content": "hi"}, headers=auth(alice))
        assert r.status_code == 404
        assert r.json()["code"] == "NOT_FOUND"

    def test_delete_missing_comment_is_404(self, client, alice):
        r = client.delete("/comments/999", headers=auth(alice))
        assert r.status_code == 404
        assert r.json()["details"]["comment_id"] == 999

    def test_delete_someone_elses_comment_is_403(self, client, alice, bob):
        dream_id = create_dream(client, alice)
        comment_id = _comment(client, bob, dream_id)
        # Even the dream owner cannot delete another user's comment
        r = client.delete(f"/comments/{comment_id}", headers=auth(alice))
        assert r.status_code == 403
        assert r.json()["code"] == "FORBIDDEN"
        assert _comments_count(client, dream_id) == 1
        assert len(client.get(f"/dreams/{dream_id}/comments").json()["items"]) == 1

    def test_delete_twice_is_404_and_count_stays_at_zero(self, client, alice):
        dream_id = create_dream(client, alice)
        comment_id = _comment(client, alice, dream_id)
        client.delete(f"/comments/{comment_id}", headers=auth(alice))
        r = client.delete(f"/comments/{comment_id}", headers=auth(alice))
        assert r.status_code == 404
        assert _comments_count(client, dream_id) == 0
