"""Gateway round trips against the in-process API."""
import httpx
import pytest

from catalog.client import CommentGateway, GatewayResult, SpeciesGateway, create_client
from catalog.client.config import ClientSettings
from catalog.main import app
from catalog.schemas import SpeciesCreate

NEW_SPECIES = {
    "scientific_name": "Ursus arctos",
    "common_name": "Brown bear",
    "kingdom": "Animalia",
    "total_population": 200000,
    "image": None,
    "description": None,
}


@pytest.mark.asyncio
async def test_create_read_update_delete_species(alice_session):
    gateway = alice_session.species

    created = await gateway.create(NEW_SPECIES)
    assert created.ok
    species_id = created.data["id"]
    assert created.data["author"] == alice_session.context.user_id

    read = await gateway.read_by_id(species_id)
    assert read.data == created.data

    updated = await gateway.update_by_id(species_id, {"common_name": "Grizzly"})
    assert updated.ok
    assert updated.data["common_name"] == "Grizzly"

    deleted = await gateway.delete_by_id(species_id)
    assert deleted == GatewayResult()

    gone = await gateway.read_by_id(species_id)
    assert gone.ok
    assert gone.data is None


@pytest.mark.asyncio
async def test_create_accepts_validated_models(alice_session):
    model = SpeciesCreate.model_validate(dict(NEW_SPECIES, common_name="   "))
    created = await alice_session.species.create(model)
    assert created.ok
    assert created.data["common_name"] is None
    assert created.data["kingdom"] == "Animalia"


@pytest.mark.asyncio
async def test_forbidden_update_surfaces_store_message(bob_session, guinea_pig):
    result = await bob_session.species.update_by_id(guinea_pig.id, {"common_name": "Mine"})

    assert result.data is None
    assert result.error.status_code == 403
    assert result.error.message == "Only the author can modify this species"


@pytest.mark.asyncio
async def test_validation_errors_are_flattened(alice_session):
    result = await alice_session.species.create(dict(NEW_SPECIES, total_population=0))

    assert result.error.status_code == 422
    assert result.error.message.startswith("total_population: ")


@pytest.mark.asyncio
async def test_anonymous_writes_are_rejected():
    http = create_client(
        ClientSettings(api_base_url="http://testserver"),
        transport=httpx.ASGITransport(app=app),
    )
    async with http:
        result = await SpeciesGateway(http).create(NEW_SPECIES)
    assert result.error.status_code == 401
    assert result.error.message == "Not authenticated"


@pytest.mark.asyncio
async def test_list_comments_by_foreign_key(alice_session, bob_session, guinea_pig):
    first = await bob_session.comments.create({"species_id": guinea_pig.id, "other_sugs": "first"})
    second = await alice_session.comments.create({"species_id": guinea_pig.id, "other_sugs": "second"})
    assert first.ok and second.ok

    listed = await alice_session.comments.list_by_foreign_key(guinea_pig.id)

    ids = [c["commentid"] for c in listed.data]
    assert set(ids) == {first.data["commentid"], second.data["commentid"]}
    assert (await alice_session.comments.list_by_foreign_key(9999)).data == []


@pytest.mark.asyncio
async def test_transport_failures_become_gateway_errors():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    http = create_client(
        ClientSettings(api_base_url="http://catalog.invalid"),
        transport=httpx.MockTransport(refuse),
    )
    async with http:
        result = await CommentGateway(http).read_by_id(1)

    assert result.data is None
    assert result.error.status_code is None
    assert "connection refused" in result.error.message


@pytest.mark.asyncio
async def test_non_json_error_bodies_keep_their_text():
    http = create_client(
        ClientSettings(api_base_url="http://catalog.test"),
        transport=httpx.MockTransport(lambda request: httpx.Response(502, text="Bad gateway upstream")),
    )
    async with http:
        result = await SpeciesGateway(http).list_all()

    assert result.error.status_code == 502
    assert result.error.message == "Bad gateway upstream"
