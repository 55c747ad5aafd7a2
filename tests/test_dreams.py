"""
Tests for dream CRUD, ownership and the feed.
"""
from app.models.comment import Comment
from app.models.dream import Dream
from app.models.dream_analysis import DreamAnalysis
from app.models.favorite import Favorite
from app.models.like import Like
from app.models.rating import Rating
from app.services.dreams import Counter, decrement_counter, increment_counter
from tests.conftest import auth, create_dream

DREAM_DATE = 1760832000000


class TestCreateAndRead:
    def test_create_returns_id(self, client, alice):
        dream_id = create_dream(client, alice)
        assert dream_id > 0

    def test_get_by_id_with_author(self, client, alice):
        dream_id = create_dream(
            client, alice, title="Teeth", content="They fell out",
            image_url="https://img/1.png", image_key="dreams/1.png",
        )
        r = client.get(f"/dreams/{dream_id}")
        assert r.status_code == 200
        body = r.json()
        dream = body["dream"]
        assert dream["title"] == "Teeth"
        assert dream["content"] == "They fell out"
        assert dream["dream_date"] == DREAM_DATE
        assert dream["image_url"] == "https://img/1.png"
        assert dream["image_key"] == "dreams/1.png"
        assert dream["user_id"] == alice.id
        for counter in ("likes_count", "comments_count", "favorites_count", "average_rating", "rating_count"):
            assert dream[counter] == 0
        assert body["author"] == {"id": alice.id, "name": "Alice"}

    def test_title_and_content_are_stripped(self, client, alice):
        dream_id = create_dream(client, alice, title="  Falling  ", content=" down \n")
        dream = client.get(f"/dreams/{dream_id}").json()["dream"]
        assert dream["title"] == "Falling"
        assert dream["content"] == "down"


class TestListing:
    def test_feed_is_newest_first(self, client, alice, bob):
        first = create_dream(client, alice, title="first")
        second = create_dream(client, bob, title="second")
        third = create_dream(client, alice, title="third")
        items = client.get("/dreams").json()["items"]
        assert [i["id"] for i in items] == [third, second, first]

    def test_feed_pagination(self, client, alice):
        ids = [create_dream(client, alice, title=f"d{i}") for i in range(5)]
        page = client.get("/dreams?limit=2&offset=1").json()["items"]
        assert [i["id"] for i in page] == [ids[3], ids[2]]

    def test_feed_carries_author(self, client, alice):
        create_dream(client, alice)
        item = client.get("/dreams").json()["items"][0]
        assert item["author"]["name"] == "Alice"

    def test_anonymous_feed_flags_are_false(self, client, alice):
        dream_id = create_dream(client, alice)
        client.post(f"/dreams/{dream_id}/like", headers=auth(alice))
        item = client.get("/dreams").json()["items"][0]
        assert item["is_liked"] is False
        assert item["is_favorited"] is False

    def test_viewer_flags(self, client, alice, bob):
        liked = create_dream(client, alice, title="liked")
        favorited = create_dream(client, alice, title="favorited")
        client.post(f"/dreams/{liked}/like", headers=auth(bob))
        client.post(f"/dreams/{favorited}/favorite", headers=auth(bob))

        items = {i["id"]: i for i in client.get("/dreams", headers=auth(bob)).json()["items"]}
        assert items[liked]["is_liked"] is True
        assert items[liked]["is_favorited"] is False
        assert items[favorited]["is_liked"] is False
        assert items[favorited]["is_favorited"] is True

        # Flags belong to the viewer, not the author
        items = {i["id"]: i for i in client.get("/dreams", headers=auth(alice)).json()["items"]}
        assert items[liked]["is_liked"] is False

    def test_mine_lists_only_own_dreams(self, client, alice, bob):
        own = create_dream(client, alice)
        create_dream(client, bob)
        items = client.get("/dreams/mine", headers=auth(alice)).json()["items"]
        assert [i["id"] for i in items] == [own]

    def test_mine_requires_principal(self, client):
        assert client.get("/dreams/mine").status_code == 401


class TestUpdate:
    def test_partial_update_changes_only_supplied_fields(self, client, alice):
        dream_id = create_dream(client, alice, title="Old", content="Same")
        r = client.patch(f"/dreams/{dream_id}", json={"title": "New"}, headers=auth(alice))
        assert r.status_code == 200
        assert r.json()["title"] == "New"
        assert r.json()["content"] == "Same"
        assert r.json()["dream_date"] == DREAM_DATE

    def test_update_dream_date_and_image(self, client, alice):
        dream_id = create_dream(client, alice)
        r = client.patch(
            f"/dreams/{dream_id}",
            json={"dream_date": 1700000000000, "image_url": "https://img/2.png"},
            headers=auth(alice),
        )
        body = r.json()
        assert body["dream_date"] == 1700000000000
        assert body["image_url"] == "https://img/2.png"

    def test_null_title_rejected(self, client, alice):
        dream_id = create_dream(client, alice)
        r = client.patch(f"/dreams/{dream_id}", json={"title": None}, headers=auth(alice))
        assert r.status_code == 422

    def test_non_owner_update_leaves_dream_unchanged(self, client, alice, bob):
        dream_id = create_dream(client, alice, title="Original")
        r = client.patch(f"/dreams/{dream_id}", json={"title": "Hijacked"}, headers=auth(bob))
        assert r.status_code == 403
        assert r.json()["code"] == "FORBIDDEN"
        assert client.get(f"/dreams/{dream_id}").json()["dream"]["title"] == "Original"

    def test_update_missing_dream_is_404(self, client, alice):
        r = client.patch("/dreams/999", json={"title": "x"}, headers=auth(alice))
        assert r.status_code == 404


class TestDelete:
    def test_owner_can_delete(self, client, alice):
        dream_id = create_dream(client, alice)
        r = client.delete(f"/dreams/{dream_id}", headers=auth(alice))
        assert r.status_code == 200
        assert r.json() == {"success": True}
        assert client.get(f"/dreams/{dream_id}").status_code == 404

    def test_non_owner_delete_is_forbidden(self, client, alice, bob):
        dream_id = create_dream(client, alice)
        r = client.delete(f"/dreams/{dream_id}", headers=auth(bob))
        assert r.status_code == 403
        assert client.get(f"/dreams/{dream_id}").status_code == 200

    def test_delete_missing_dream_is_404(self, client, alice):
        assert client.delete("/dreams/999", headers=auth(alice)).status_code == 404

    def test_delete_cascades_to_child_rows(self, client, db, alice, bob, fake_ai):
        dream_id = create_dream(client, alice)
        other_id = create_dream(client, alice, title="kept")
        client.post(f"/dreams/{dream_id}/like", headers=auth(bob))
        client.post(f"/dreams/{dream_id}/favorite", headers=auth(bob))
        client.post(f"/dreams/{dream_id}/comments", json={"content": "wow"}, headers=auth(bob))
        client.put(f"/dreams/{dream_id}/rating", json={"rating": 4}, headers=auth(bob))
        client.post(f"/dreams/{dream_id}/analysis", headers=auth(alice))
        client.post(f"/dreams/{other_id}/like", headers=auth(bob))

        client.delete(f"/dreams/{dream_id}", headers=auth(alice))

        for model in (Like, Favorite, Comment, Rating, DreamAnalysis):
            assert db.query(model).filter(model.dream_id == dream_id).count() == 0
        # Other dreams keep their rows
        assert db.query(Like).filter(Like.dream_id == other_id).count() == 1


class TestCounters:
    def test_decrement_is_floored_at_zero(self, client, db, alice):
        dream_id = create_dream(client, alice)
        decrement_counter(db, dream_id, Counter.likes)
        decrement_counter(db, dream_id, Counter.comments)
        db.commit()
        dream = db.get(Dream, dream_id)
        db.refresh(dream)
        assert dream.likes_count == 0
        assert dream.comments_count == 0

    def test_increment_then_decrement(self, client, db, alice):
        dream_id = create_dream(client, alice)
        increment_counter(db, dream_id, Counter.favorites)
        increment_counter(db, dream_id, Counter.favorites)
        decrement_counter(db, dream_id, Counter.favorites)
        db.commit()
        dream = db.get(Dream, dream_id)
        db.refresh(dream)
        assert dream.favorites_count == 1
