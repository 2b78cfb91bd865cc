"""
Link Store -- persistence and resolution for the link collection.

The whole collection (newest first) is stored as one JSON array under a
single key. It is read entirely on load and written entirely on every
committed mutation.

Mutation helpers never change the list they are given; they return a new
list, and the caller persists it with save().

Usage:
    store = LinkStore(LocalStorage("data/swiftlink.json"))
    links = store.load()

    outcome = store.try_resolve(request.query_params.get("u"), links)
    if outcome.should_redirect:
        return RedirectResponse(outcome.target_url)

    links = store.add_link(links, link)
    store.save(links)
"""

import json
from dataclasses import dataclass, field
from typing import Optional

from pydantic import TypeAdapter, ValidationError as SchemaError

from errors import StorageError
from models import ShortenedLink

STORAGE_KEY = "swiftlink_data"

_collection_adapter = TypeAdapter(list[ShortenedLink])


@dataclass(frozen=True)
class RedirectOutcome:
    """Result of the per-page-load resolve check: Redirect(url) or Continue."""

    target_url: Optional[str] = None
    links: list = field(default_factory=list)

    @property
    def should_redirect(self) -> bool:
        return self.target_url is not None

    @classmethod
    def redirect(cls, url: str, links: list) -> "RedirectOutcome":
        return cls(target_url=url, links=links)

    @classmethod
    def proceed(cls, links: list) -> "RedirectOutcome":
        return cls(target_url=None, links=links)


class LinkStore:
    """Owns the persisted link collection for one storage backend."""

    def __init__(self, storage, key: str = STORAGE_KEY):
        self.storage = storage
        self.key = key
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    # --------------------------------------------------------
    # Persistence
    # --------------------------------------------------------

    def load(self) -> list[ShortenedLink]:
        """Read the collection. Missing, unreadable or corrupt data loads as []."""
        links = self._read()
        self._loaded = True
        return links

    def _read(self) -> list[ShortenedLink]:
        try:
            raw = self.storage.get_item(self.key)
        except StorageError as e:
            print(f"[LinkStore] Failed to read links: {e}")
            return []

        if raw is None:
            return []

        try:
            links = _collection_adapter.validate_json(raw)
        except SchemaError as e:
            print(f"[LinkStore] Stored links are malformed, starting empty: {e.error_count()} error(s)")
            return []

        ids = [link.id for link in links]
        if len(set(ids)) != len(ids):
            print("[LinkStore] Stored links contain duplicate ids, starting empty")
            return []
        return links

    def save(self, links: list[ShortenedLink]) -> bool:
        """
        Persist the full collection, replacing what was stored.

        Returns False when the write failed; the update is lost but the
        caller keeps running.
        """
        if not self._loaded:
            raise RuntimeError("LinkStore.save() called before load(); refusing to overwrite stored links")
        return self._write(links)

    def _write(self, links: list[ShortenedLink]) -> bool:
        payload = json.dumps([link.to_dict() for link in links], ensure_ascii=False)
        try:
            self.storage.set_item(self.key, payload)
        except StorageError as e:
            print(f"[LinkStore] Failed to save {len(links)} links: {e}")
            return False
        return True

    # --------------------------------------------------------
    # Resolution
    # --------------------------------------------------------

    def try_resolve(self, requested_code: Optional[str],
                    links: list[ShortenedLink]) -> RedirectOutcome:
        """
        Match a requested short code against a freshly loaded collection.

        On a hit the record's clicks go up by one and the collection is
        written straight away, before the redirect is issued. Duplicate
        codes resolve to the first match in collection order (newest).
        """
        if not requested_code:
            return RedirectOutcome.proceed(links)

        target = next((l for l in links if l.short_code == requested_code), None)
        if target is None:
            return RedirectOutcome.proceed(links)

        updated = _increment_clicks(links, target.id)
        self._write(updated)
        return RedirectOutcome.redirect(target.original_url, updated)

    # --------------------------------------------------------
    # Collection operations
    # --------------------------------------------------------

    @staticmethod
    def add_link(links: list[ShortenedLink], new_link: ShortenedLink) -> list[ShortenedLink]:
        return [new_link, *links]

    @staticmethod
    def remove_link(links: list[ShortenedLink], link_id: str) -> list[ShortenedLink]:
        return [l for l in links if l.id != link_id]

    @staticmethod
    def record_visit(links: list[ShortenedLink], link_id: str) -> list[ShortenedLink]:
        return _increment_clicks(links, link_id)

    @staticmethod
    def find(links: list[ShortenedLink], link_id: str) -> Optional[ShortenedLink]:
        return next((l for l in links if l.id == link_id), None)


def _increment_clicks(links: list[ShortenedLink], link_id: str) -> list[ShortenedLink]:
    return [
        l.model_copy(update={"clicks": l.clicks + 1}) if l.id == link_id else l
        for l in links
    ]
