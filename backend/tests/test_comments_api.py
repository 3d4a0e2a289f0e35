"""Comment endpoints: listing by species, author stamping and author-only writes."""
from datetime import datetime, timedelta

from catalog.models import Comment

from tests.factories import auth_headers, make_species


def add_comment(client, user, species_id, text="Spotted two near the river."):
    resp = client.post(
        "/comments",
        json={"species_id": species_id, "other_sugs": text},
        headers=auth_headers(user),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_comment_stamps_author_and_time(client, bob, guinea_pig):
    body = add_comment(client, bob, guinea_pig.id, "  lovely animals  ")

    assert body["author"] == bob.id
    assert body["species_id"] == guinea_pig.id
    assert body["other_sugs"] == "lovely animals"
    assert body["time_made"] is not None


def test_whitespace_only_comment_is_stored_empty(client, bob, guinea_pig):
    body = add_comment(client, bob, guinea_pig.id, "   ")
    assert body["other_sugs"] == ""


def test_create_comment_for_missing_species_is_404(client, bob):
    resp = client.post(
        "/comments",
        json={"species_id": 4242, "other_sugs": "hello"},
        headers=auth_headers(bob),
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Species not found"


def test_create_comment_requires_login(client, guinea_pig):
    resp = client.post("/comments", json={"species_id": guinea_pig.id, "other_sugs": "hi"})
    assert resp.status_code == 401


def test_list_comments_is_scoped_to_species_newest_first(client, db_session, alice, bob, guinea_pig):
    other = make_species(db_session, alice, scientific_name="Zea mays", kingdom="Plantae")
    now = datetime(2024, 5, 1, 12, 0, 0)
    db_session.add_all([
        Comment(species_id=guinea_pig.id, other_sugs="old", author=bob.id, time_made=now - timedelta(days=2)),
        Comment(species_id=guinea_pig.id, other_sugs="new", author=alice.id, time_made=now),
        Comment(species_id=other.id, other_sugs="corn", author=bob.id, time_made=now),
    ])
    db_session.commit()

    resp = client.get("/comments", params={"species_id": guinea_pig.id})

    assert resp.status_code == 200
    assert [c["other_sugs"] for c in resp.json()] == ["new", "old"]


def test_list_comments_requires_species_id(client):
    assert client.get("/comments").status_code == 422


def test_author_can_edit_comment(client, bob, guinea_pig):
    comment = add_comment(client, bob, guinea_pig.id)

    resp = client.patch(
        f"/comments/{comment['commentid']}",
        json={"other_sugs": "  edited  "},
        headers=auth_headers(bob),
    )

    assert resp.status_code == 200
    assert resp.json()["other_sugs"] == "edited"
    assert client.get(f"/comments/{comment['commentid']}").json()["other_sugs"] == "edited"


def test_non_author_cannot_edit_or_delete_comment(client, alice, bob, guinea_pig):
    # alice owns the species but not the comment
    comment = add_comment(client, bob, guinea_pig.id)
    url = f"/comments/{comment['commentid']}"

    edit = client.patch(url, json={"other_sugs": "hijacked"}, headers=auth_headers(alice))
    delete = client.delete(url, headers=auth_headers(alice))

    assert edit.status_code == 403
    assert edit.json()["detail"] == "Only the author can modify this comment"
    assert delete.status_code == 403
    assert client.get(url).json()["other_sugs"] == comment["other_sugs"]


def test_author_can_delete_comment(client, bob, guinea_pig):
    comment = add_comment(client, bob, guinea_pig.id)
    url = f"/comments/{comment['commentid']}"

    assert client.delete(url, headers=auth_headers(bob)).status_code == 204
    assert client.get(url).status_code == 404


def test_comment_mutations_show_in_species_history(client, bob, guinea_pig):
    comment = add_comment(client, bob, guinea_pig.id)
    client.delete(f"/comments/{comment['commentid']}", headers=auth_headers(bob))

    entries = client.get(f"/species/{guinea_pig.id}/history").json()

    assert [(e["entity_type"], e["action"]) for e in entries] == [("comment", "DELETE"), ("comment", "CREATE")]
    assert entries[0]["entity_id"] == comment["commentid"]
