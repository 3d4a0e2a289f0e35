"""Species endpoints: CRUD, author-only writes, cascade and history."""
from catalog.models import AuditLog, Comment

from tests.factories import auth_headers, make_species

NEW_SPECIES = {
    "scientific_name": "  Panthera leo ",
    "common_name": "",
    "kingdom": "Animalia",
    "total_population": 23000,
    "image": "https://example.org/lion.jpg",
    "description": "  Large cat of the genus Panthera.  ",
}


def test_list_species_is_public_and_ordered_by_id(client, db_session, alice):
    make_species(db_session, alice, scientific_name="Zea mays", kingdom="Plantae")
    make_species(db_session, alice, scientific_name="Amanita muscaria", kingdom="Fungi")

    resp = client.get("/species")

    assert resp.status_code == 200
    names = [s["scientific_name"] for s in resp.json()]
    assert names == ["Zea mays", "Amanita muscaria"]


def test_create_species_normalizes_and_stamps_author(client, alice):
    resp = client.post("/species", json=NEW_SPECIES, headers=auth_headers(alice))

    assert resp.status_code == 201
    body = resp.json()
    assert body["scientific_name"] == "Panthera leo"
    assert body["common_name"] is None
    assert body["description"] == "Large cat of the genus Panthera."
    assert body["author"] == alice.id
    assert client.get(f"/species/{body['id']}").json() == body


def test_create_species_ignores_client_supplied_author(client, alice, bob):
    payload = dict(NEW_SPECIES, author=bob.id)
    resp = client.post("/species", json=payload, headers=auth_headers(alice))
    assert resp.json()["author"] == alice.id


def test_create_species_requires_login(client):
    resp = client.post("/species", json=NEW_SPECIES)
    assert resp.status_code == 401


def test_create_species_rejects_invalid_fields(client, alice):
    payload = dict(NEW_SPECIES, scientific_name="   ", total_population=0)
    resp = client.post("/species", json=payload, headers=auth_headers(alice))

    assert resp.status_code == 422
    fields = {tuple(e["loc"])[-1] for e in resp.json()["detail"]}
    assert fields == {"scientific_name", "total_population"}


def test_get_missing_species_is_404(client):
    resp = client.get("/species/999")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Species not found"


def test_author_can_update_species(client, alice, guinea_pig):
    resp = client.patch(
        f"/species/{guinea_pig.id}",
        json={"common_name": "  Cavy ", "total_population": None},
        headers=auth_headers(alice),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["common_name"] == "Cavy"
    assert body["total_population"] is None
    assert body["scientific_name"] == "Cavia porcellus"


def test_non_author_cannot_update_species(client, bob, guinea_pig):
    resp = client.patch(
        f"/species/{guinea_pig.id}",
        json={"common_name": "Mine now"},
        headers=auth_headers(bob),
    )

    assert resp.status_code == 403
    assert resp.json()["detail"] == "Only the author can modify this species"
    assert client.get(f"/species/{guinea_pig.id}").json()["common_name"] == "Guinea pig"


def test_update_cannot_blank_required_fields(client, alice, guinea_pig):
    resp = client.patch(
        f"/species/{guinea_pig.id}",
        json={"scientific_name": " "},
        headers=auth_headers(alice),
    )
    assert resp.status_code == 422


def test_non_author_cannot_delete_species(client, bob, guinea_pig):
    resp = client.delete(f"/species/{guinea_pig.id}", headers=auth_headers(bob))
    assert resp.status_code == 403
    assert client.get(f"/species/{guinea_pig.id}").status_code == 200


def test_delete_species_cascades_to_comments(client, db_session, alice, bob, guinea_pig):
    species_id = guinea_pig.id
    db_session.add_all([
        Comment(species_id=species_id, other_sugs="first", author=alice.id),
        Comment(species_id=species_id, other_sugs="second", author=bob.id),
    ])
    db_session.commit()

    resp = client.delete(f"/species/{species_id}", headers=auth_headers(alice))

    assert resp.status_code == 204
    assert client.get(f"/species/{species_id}").status_code == 404
    assert client.get("/comments", params={"species_id": species_id}).json() == []


def test_delete_missing_species_is_404(client, alice):
    resp = client.delete("/species/12345", headers=auth_headers(alice))
    assert resp.status_code == 404


def test_history_records_every_mutation(client, db_session, alice):
    created = client.post("/species", json=NEW_SPECIES, headers=auth_headers(alice)).json()
    species_id = created["id"]
    client.patch(f"/species/{species_id}", json={"common_name": "Lion"}, headers=auth_headers(alice))
    client.delete(f"/species/{species_id}", headers=auth_headers(alice))

    resp = client.get(f"/species/{species_id}/history")

    assert resp.status_code == 200
    entries = resp.json()
    assert [e["action"] for e in entries] == ["DELETE", "UPDATE", "CREATE"]
    assert all(e["user_email"] == "alice@catalog.io" for e in entries)
    update = entries[1]["diff_json"]
    assert update["before"]["common_name"] is None
    assert update["after"]["common_name"] == "Lion"
    assert update["after"]["kingdom"] == "Animalia"
    assert db_session.query(AuditLog).count() == 3
