import json

import pytest

from errors import StorageError
from link_store import STORAGE_KEY, LinkStore
from storage import LocalStorage
from tests.conftest import make_link


class BrokenStorage:
    """Storage that fails every read and write, like a disabled localStorage."""

    def get_item(self, key):
        raise StorageError("storage disabled")

    def set_item(self, key, value):
        raise StorageError("storage disabled")


def _write_raw(storage, records):
    storage.set_item(STORAGE_KEY, records if isinstance(records, str) else json.dumps(records))


@pytest.fixture
def links():
    return [
        make_link(id="n", short_code="new001", original_url="https://new.test", clicks=2),
        make_link(id="m", short_code="mid001", original_url="https://mid.test", tags=None,
                  ai_summary=None, category=None),
        make_link(id="o", short_code="old001", original_url="https://old.test", clicks=9),
    ]


# --- load / save ---

def test_load_missing_key_is_empty(store):
    assert store.load() == []
    assert store.loaded


def test_save_then_load_round_trips(store, storage_path, links):
    store.load()
    assert store.save(links) is True

    reloaded = LinkStore(LocalStorage(storage_path)).load()
    assert reloaded == links
    assert [l.id for l in reloaded] == ["n", "m", "o"]


def test_saved_blob_uses_camel_case_and_omits_unset_fields(store, storage, links):
    store.load()
    store.save(links)

    records = json.loads(storage.get_item(STORAGE_KEY))
    assert records[0] == {
        "id": "n",
        "originalUrl": "https://new.test",
        "shortCode": "new001",
        "createdAt": 1_700_000_000_000,
        "clicks": 2,
        "tags": ["Dev", "Testing", "Docs"],
        "aiSummary": "A site used for tests",
        "category": "Tech",
    }
    assert set(records[1]) == {"id", "originalUrl", "shortCode", "createdAt", "clicks"}


def test_load_accepts_records_written_by_the_browser_app(store, storage):
    _write_raw(storage, [{
        "id": "0b7c", "originalUrl": "https://example.com", "shortCode": "k3j9zq",
        "createdAt": 1718000000000, "clicks": 3,
        "tags": ["Example"], "aiSummary": "Example domain for docs", "category": "Reference",
    }])
    [link] = store.load()
    assert link.short_code == "k3j9zq"
    assert link.ai_summary == "Example domain for docs"


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        json.dumps({"id": "x"}),
        json.dumps([{"id": "x", "originalUrl": "https://x.test", "createdAt": 1, "clicks": 0}]),
        json.dumps([{"id": "x", "originalUrl": "https://x.test", "shortCode": "a", "createdAt": 1, "clicks": "5"}]),
        json.dumps([{"id": "x", "originalUrl": "https://x.test", "shortCode": "a", "createdAt": 1, "clicks": -1}]),
        json.dumps([{"id": "x", "originalUrl": "https://x.test", "shortCode": "a", "createdAt": 1, "clicks": 0,
                     "tags": "not-a-list"}]),
    ],
    ids=["bad-json", "not-a-list", "missing-field", "string-clicks", "negative-clicks", "bad-tags"],
)
def test_malformed_blob_loads_as_empty(store, storage, raw, capsys):
    _write_raw(storage, raw)
    assert store.load() == []
    assert "[LinkStore]" in capsys.readouterr().out


def test_one_bad_record_empties_the_whole_load(store, storage, links):
    good = [l.to_dict() for l in links]
    _write_raw(storage, good + [{"id": "bad"}])
    assert store.load() == []


def test_duplicate_ids_load_as_empty(store, storage, links):
    records = [l.to_dict() for l in links]
    records[1]["id"] = records[0]["id"]
    _write_raw(storage, records)
    assert store.load() == []


def test_load_swallows_storage_errors(capsys):
    store = LinkStore(BrokenStorage())
    assert store.load() == []
    assert "Failed to read links" in capsys.readouterr().out


def test_save_before_load_is_refused(store, links):
    with pytest.raises(RuntimeError):
        store.save(links)


def test_save_failure_is_swallowed(links, capsys):
    store = LinkStore(BrokenStorage())
    store.load()
    assert store.save(links) is False
    assert "Failed to save 3 links" in capsys.readouterr().out


def test_save_over_quota_loses_the_write(storage_path, links):
    store = LinkStore(LocalStorage(storage_path, quota_bytes=100))
    store.load()
    assert store.save(links) is False
    assert store.load() == []


def test_save_with_unencodable_text_loses_the_write(store, links, capsys):
    store.load()
    store.save(links)

    assert store.save([make_link(original_url="https://a.com/\ud800")]) is False
    assert "Failed to save 1 links" in capsys.readouterr().out
    assert store.load() == links


# --- try_resolve ---

def test_try_resolve_hit_increments_and_persists(store, storage_path):
    store.load()
    store.save([make_link(short_code="ab12cd", original_url="https://foo.test", clicks=5)])

    outcome = store.try_resolve("ab12cd", store.load())

    assert outcome.should_redirect
    assert outcome.target_url == "https://foo.test"
    assert outcome.links[0].clicks == 6
    assert LinkStore(LocalStorage(storage_path)).load()[0].clicks == 6


def test_try_resolve_leaves_other_records_alone(store, links):
    store.load()
    store.save(links)

    outcome = store.try_resolve("mid001", store.load())

    assert [l.clicks for l in outcome.links] == [2, 1, 9]
    assert outcome.links[0] == links[0]
    assert outcome.links[2] == links[2]


@pytest.mark.parametrize("code", ["zzzzzz", "", None])
def test_try_resolve_miss_changes_nothing(store, storage, links, code):
    store.load()
    store.save(links)
    before = storage.get_item(STORAGE_KEY)

    outcome = store.try_resolve(code, links)

    assert not outcome.should_redirect
    assert outcome.target_url is None
    assert outcome.links is links
    assert [l.clicks for l in links] == [2, 0, 9]
    assert storage.get_item(STORAGE_KEY) == before


def test_try_resolve_duplicate_codes_pick_the_newest(store):
    store.load()
    newer = make_link(id="newer", short_code="dupdup", original_url="https://newer.test")
    older = make_link(id="older", short_code="dupdup", original_url="https://older.test")

    outcome = store.try_resolve("dupdup", [newer, older])

    assert outcome.target_url == "https://newer.test"
    assert [l.clicks for l in outcome.links] == [1, 0]


def test_try_resolve_redirects_even_if_the_write_fails():
    store = LinkStore(BrokenStorage())
    outcome = store.try_resolve("ab12cd", [make_link(clicks=5)])
    assert outcome.target_url == "https://foo.test"
    assert outcome.links[0].clicks == 6


# --- collection operations ---

def test_add_link_prepends_without_mutating(links):
    new = make_link(id="z", short_code="zzz001")
    result = LinkStore.add_link(links, new)
    assert [l.id for l in result] == ["z", "n", "m", "o"]
    assert len(links) == 3


def test_remove_link(links):
    assert [l.id for l in LinkStore.remove_link(links, "m")] == ["n", "o"]


def test_remove_unknown_id_is_a_no_op(links):
    assert LinkStore.remove_link(links, "missing") == links


def test_record_visit_increments_one_record(links):
    result = LinkStore.record_visit(links, "o")
    assert [l.clicks for l in result] == [2, 0, 10]
    assert links[2].clicks == 9


def test_record_visit_unknown_id_is_a_no_op(links):
    assert LinkStore.record_visit(links, "missing") == links


def test_find(links):
    assert LinkStore.find(links, "m").short_code == "mid001"
    assert LinkStore.find(links, "missing") is None
