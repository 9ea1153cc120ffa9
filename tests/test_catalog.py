import json

import pytest

from prediction_provisioner.catalog import CATALOGS, DAY, get_catalog, load_catalog, validate_catalog
from prediction_provisioner.errors import PreconditionError
from prediction_provisioner.models import EventSpec
from prediction_provisioner.profiles import PROFILES


def test_builtin_catalogs_are_valid():
    for name, catalog in CATALOGS.items():
        assert validate_catalog(catalog) == catalog, name


def test_launch_catalog_durations():
    assert [s.duration_seconds for s in get_catalog("launch")] == [90 * DAY, 60 * DAY, 30 * DAY]


def test_simple_profile_seeds_hash_based_wording():
    catalog = get_catalog(PROFILES["simple"].catalog)

    assert [s.duration_seconds for s in catalog] == [90 * DAY, 60 * DAY, 30 * DAY]
    assert "cryptographic hashing" in catalog[2].description
    assert not any("encrypt" in s.description for s in catalog)


def test_unknown_catalog():
    with pytest.raises(PreconditionError):
        get_catalog("nope")


def test_load_catalog_list(tmp_path):
    path = tmp_path / "events.json"
    path.write_text(json.dumps([
        {"title": "Election", "description": "Who wins?", "duration_seconds": 3600},
        {"title": "Oscars", "description": "Best picture", "duration": 7200},
    ]))

    assert load_catalog(path) == (
        EventSpec("Election", "Who wins?", 3600),
        EventSpec("Oscars", "Best picture", 7200),
    )


def test_load_catalog_object(tmp_path):
    path = tmp_path / "events.json"
    path.write_text(json.dumps({"events": [{"title": "A", "description": "B", "duration_seconds": 1}]}))

    assert len(load_catalog(path)) == 1


@pytest.mark.parametrize("content", [
    "not json",
    json.dumps({"items": []}),
    json.dumps(["string entry"]),
    json.dumps([{"title": "A", "description": "B"}]),
    json.dumps([{"title": "A", "description": "B", "duration_seconds": 0}]),
    json.dumps([{"title": "A", "description": "B", "duration_seconds": "3600"}]),
])
def test_bad_catalog_files(tmp_path, content):
    path = tmp_path / "events.json"
    path.write_text(content)
    with pytest.raises(PreconditionError):
        load_catalog(path)


def test_missing_catalog_file(tmp_path):
    with pytest.raises(PreconditionError):
        load_catalog(tmp_path / "missing.json")
