# tests/persistence/test_opening_store.py
import json

import pytest

from repertoire_trainer.config.settings import StoreSettings
from repertoire_trainer.core.opening_defaults import ensure_opening_defaults
from repertoire_trainer.exceptions import OpeningNotFoundError, OpeningStoreError
from repertoire_trainer.persistence.opening_store import JsonOpeningStore
from repertoire_trainer.persistence.seed_data import OPENING_SEED_DATA
from repertoire_trainer.types import Annotation, Side


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "data" / "openings.json"


@pytest.fixture
def store(store_path):
    return JsonOpeningStore(StoreSettings(json_filepath=str(store_path)))


@pytest.mark.asyncio
async def test_missing_file_is_seeded(store, store_path):
    openings = await store.load_all()

    assert store_path.exists()
    assert len(openings) == len(OPENING_SEED_DATA)
    # Newest first.
    assert openings[0].name == "Scotch Game"
    assert openings[-1].name == "Italian Game"
    assert {o.name for o in openings if o.side is Side.BLACK} == {"Scandinavian Opening", "Sicilian Defense"}


@pytest.mark.asyncio
async def test_seeded_ids_are_stable_across_loads(store):
    first = await store.load_all()
    second = await store.load_all()

    assert [o.id for o in first] == [o.id for o in second]


@pytest.mark.asyncio
async def test_missing_file_without_seeding_is_empty(store_path):
    store = JsonOpeningStore(StoreSettings(json_filepath=str(store_path), seed_when_missing=False))

    assert await store.load_all() == []
    assert not store_path.exists()


@pytest.mark.asyncio
async def test_upsert_inserts_and_replaces(store):
    await store.save_all([])
    opening = ensure_opening_defaults({"id": "mine", "name": "London System", "created": "May 2, 2024"})

    await store.upsert(opening)
    opening.summary = "Solid setup."
    await store.upsert(opening)

    stored = await store.load_all()
    assert len(stored) == 1
    assert stored[0].summary == "Solid setup."
    assert (await store.get("mine")).name == "London System"


@pytest.mark.asyncio
async def test_find_by_name_with_underscores(store):
    await store.load_all()

    found = await store.find_by_name("Sicilian_Defense")

    assert found.name == "Sicilian Defense"
    assert found.metadata.variation == "Najdorf"


@pytest.mark.asyncio
async def test_delete(store):
    openings = await store.load_all()

    await store.delete(openings[0].id)

    assert len(await store.load_all()) == len(openings) - 1
    with pytest.raises(OpeningNotFoundError):
        await store.delete(openings[0].id)


@pytest.mark.asyncio
async def test_update_annotations(store):
    opening = (await store.load_all())[0]
    annotations = [Annotation(id="n1", path=("e4",), comment="Start here", label="Intro")]

    updated = await store.update_annotations(opening.id, annotations)

    assert updated.annotations == annotations
    assert (await store.get(opening.id)).annotations == annotations


@pytest.mark.asyncio
async def test_unknown_id_raises(store):
    await store.load_all()

    with pytest.raises(OpeningNotFoundError):
        await store.get("nope")
    with pytest.raises(OpeningNotFoundError):
        await store.update_annotations("nope", [])


@pytest.mark.asyncio
async def test_records_missing_fields_get_defaults(store, store_path):
    store_path.parent.mkdir(parents=True)
    store_path.write_text(json.dumps([{"name": "Legacy", "pgn": "1. d4", "colorGroup": "black"}]))

    (opening,) = await store.load_all()

    assert opening.name == "Legacy"
    assert opening.color_group is Side.BLACK
    assert opening.difficulty == 2


@pytest.mark.asyncio
async def test_corrupt_file_raises_store_error(store, store_path):
    store_path.parent.mkdir(parents=True)
    store_path.write_text("{not json")

    with pytest.raises(OpeningStoreError):
        await store.load_all()
