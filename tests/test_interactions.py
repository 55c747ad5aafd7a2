"""
Tests for like / favorite toggles and counter consistency.

Covered:
  - toggle on -> toggle off returns to the original state (involution)
  - counters track the join tables after mixed sequences
  - the unique index keeps one row per (user, dream)
  - favorites listing
"""
from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from app.models.comment import Comment
from app.models.favorite import Favorite
from app.models.like import Like
from app.services.interactions import toggle_like
from tests.conftest import auth, create_dream


def _dream(client, dream_id: int) -> dict:
    return client.get(f"/dreams/{dream_id}").json()["dream"]


class TestLikeToggle:
    def test_like(self, client, alice, bob):
        dream_id = create_dream(client, alice)
        r = client.post(f"/dreams/{dream_id}/like", headers=auth(bob))
        assert r.status_code == 200
        assert r.json() == {"liked": True, "likes_count": 1}
        assert _dream(client, dream_id)["likes_count"] == 1

    def test_toggle_twice_restores_state(self, client, alice, bob):
        dream_id = create_dream(client, alice)
        before = _dream(client, dream_id)["likes_count"]
        client.post(f"/dreams/{dream_id}/like", headers=auth(bob))
        r = client.post(f"/dreams/{dream_id}/like", headers=auth(bob))
        assert r.json() == {"liked": False, "likes_count": before}
        assert _dream(client, dream_id)["likes_count"] == before
        assert client.get(f"/dreams/{dream_id}/like", headers=auth(bob)).json() == {"liked": False}

    def test_likes_from_several_users_add_up(self, client, make_user, alice):
        dream_id = create_dream(client, alice)
        users = [make_user(f"fan{i}") for i in range(3)]
        for u in users:
            client.post(f"/dreams/{dream_id}/like", headers=auth(u))
        assert _dream(client, dream_id)["likes_count"] == 3
        r = client.post(f"/dreams/{dream_id}/like", headers=auth(users[0]))
        assert r.json() == {"liked": False, "likes_count": 2}

    def test_like_check(self, client, alice, bob):
        dream_id = create_dream(client, alice)
        assert client.get(f"/dreams/{dream_id}/like", headers=auth(bob)).json()["liked"] is False
        client.post(f"/dreams/{dream_id}/like", headers=auth(bob))
        assert client.get(f"/dreams/{dream_id}/like", headers=auth(bob)).json()["liked"] is True

    def test_like_missing_dream_is_404(self, client, bob):
        r = client.post("/dreams/999/like", headers=auth(bob))
        assert r.status_code == 404
        assert r.json()["code"] == "NOT_FOUND"

    def test_like_requires_principal(self, client, alice):
        dream_id = create_dream(client, alice)
        assert client.post(f"/dreams/{dream_id}/like").status_code == 401

    def test_unique_index_rejects_duplicate_like(self, client, db, alice, bob):
        dream_id = create_dream(client, alice)
        db.add(Like(user_id=bob.id, dream_id=dream_id))
        db.commit()
        db.add(Like(user_id=bob.id, dream_id=dream_id))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_service_returns_count(self, client, db, alice, bob):
        dream_id = create_dream(client, alice)
        result = toggle_like(db, bob.id, dream_id)
        assert result.active is True
        assert result.count == 1


class TestFavoriteToggle:
    def test_favorite_and_unfavorite(self, client, alice, bob):
        dream_id = create_dream(client, alice)
        r = client.post(f"/dreams/{dream_id}/favorite", headers=auth(bob))
        assert r.json() == {"favorited": True, "favorites_count": 1}
        r = client.post(f"/dreams/{dream_id}/favorite", headers=auth(bob))
        assert r.json() == {"favorited": False, "favorites_count": 0}

    def test_favorite_check(self, client, alice, bob):
        dream_id = create_dream(client, alice)
        client.post(f"/dreams/{dream_id}/favorite", headers=auth(bob))
        assert client.get(f"/dreams/{dream_id}/favorite", headers=auth(bob)).json() == {"favorited": True}
        assert client.get(f"/dreams/{dream_id}/favorite", headers=auth(alice)).json() == {"favorited": False}

    def test_likes_and_favorites_are_independent(self, client, alice, bob):
        dream_id = create_dream(client, alice)
        client.post(f"/dreams/{dream_id}/favorite", headers=auth(bob))
        dream = _dream(client, dream_id)
        assert dream["favorites_count"] == 1
        assert dream["likes_count"] == 0


class TestFavoritesList:
    def test_lists_favorites_newest_first(self, client, alice, bob):
        a = create_dream(client, alice, title="a")
        b = create_dream(client, alice, title="b")
        create_dream(client, alice, title="not favorited")
        client.post(f"/dreams/{a}/favorite", headers=auth(bob))
        client.post(f"/dreams/{b}/favorite", headers=auth(bob))

        items = client.get("/favorites", headers=auth(bob)).json()["items"]
        assert [i["id"] for i in items] == [b, a]
        assert all(i["is_favorited"] for i in items)
        assert items[0]["author"]["name"] == "Alice"

    def test_unfavorited_dream_leaves_the_list(self, client, alice, bob):
        a = create_dream(client, alice)
        client.post(f"/dreams/{a}/favorite", headers=auth(bob))
        client.post(f"/dreams/{a}/favorite", headers=auth(bob))
        assert client.get("/favorites", headers=auth(bob)).json()["items"] == []

    def test_empty_for_new_user(self, client, bob):
        assert client.get("/favorites", headers=auth(bob)).json()["items"] == []


class TestCounterConsistency:
    def test_counters_match_child_rows_after_mixed_sequence(self, client, db, make_user, alice):
        dreams = [create_dream(client, alice, title=f"d{i}") for i in range(3)]
        users = [make_user(f"u{i}") for i in range(4)]

        comment_ids = []
        for step in range(24):
            user = users[step % len(users)]
            dream_id = dreams[step % len(dreams)]
            if step % 3 == 0:
                client.post(f"/dreams/{dream_id}/like", headers=auth(user))
            elif step % 3 == 1:
                client.post(f"/dreams/{dream_id}/favorite", headers=auth(user))
            else:
                r = client.post(
                    f"/dreams/{dream_id}/comments",
                    json={"content": f"step {step}"},
                    headers=auth(user),
                )
                comment_ids.append((r.json()["comment_id"], user))
        for comment_id, user in comment_ids[::2]:
            client.delete(f"/comments/{comment_id}", headers=auth(user))

        for dream_id in dreams:
            dream = _dream(client, dream_id)
            assert dream["likes_count"] == db.query(Like).filter(Like.dream_id == dream_id).count()
            assert dream["favorites_count"] == db.query(Favorite).filter(Favorite.dream_id == dream_id).count()
            assert dream["comments_count"] == db.query(Comment).filter(Comment.dream_id == dream_id).count()
