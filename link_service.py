"""
Link operations as the web layer sees them.

Every mutation runs load -> mutate -> save under one asyncio.Lock, so two
requests never interleave their read-modify-write. The annotation call
happens before the lock is taken; the collection is re-loaded after it
returns, so nothing written meanwhile is overwritten.
"""

import asyncio
from typing import Optional

from errors import DuplicateSubmissionError
from link_store import LinkStore, RedirectOutcome
from models import ShortenedLink, AnalysisOutcome
from shortener import normalize_url, new_link


class LinkService:

    def __init__(self, store: LinkStore, annotator):
        self.store = store
        self.annotator = annotator
        self._lock = asyncio.Lock()
        self._pending: set[str] = set()

    def list_links(self) -> list[ShortenedLink]:
        return self.store.load()

    async def resolve(self, code: Optional[str]) -> RedirectOutcome:
        """Resolve check for one page load."""
        async with self._lock:
            links = self.store.load()
            return self.store.try_resolve(code, links)

    async def shorten(self, raw_url: str) -> tuple[ShortenedLink, AnalysisOutcome]:
        """
        Normalize, annotate and store a new link.

        Raises ValidationError for unusable input and
        DuplicateSubmissionError while the same URL is still in flight.
        """
        url = normalize_url(raw_url)
        if url in self._pending:
            raise DuplicateSubmissionError(url)

        self._pending.add(url)
        try:
            outcome = await self.annotator.analyze_outcome(url)
            async with self._lock:
                links = self.store.load()
                link = new_link(url, outcome.annotation, (l.short_code for l in links))
                self.store.save(self.store.add_link(links, link))
        finally:
            self._pending.discard(url)

        print(f"[LinkService] Shortened {url} -> {link.short_code}"
              f"{' (fallback annotation)' if outcome.fallback else ''}")
        return link, outcome

    async def delete(self, link_id: str) -> None:
        async with self._lock:
            links = self.store.load()
            self.store.save(self.store.remove_link(links, link_id))

    async def visit(self, link_id: str) -> Optional[ShortenedLink]:
        """Count an explicit visit. Returns the updated link, or None if unknown."""
        async with self._lock:
            links = self.store.load()
            if self.store.find(links, link_id) is None:
                return None
            links = self.store.record_visit(links, link_id)
            self.store.save(links)
            return self.store.find(links, link_id)
