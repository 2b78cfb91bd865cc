"""
SwiftLink routes -- history page, shorten form, and the JSON API.

Usage in main.py:
    from routes import register_link_routes
    register_link_routes(app, service)
"""

from typing import Optional
from urllib.parse import urlencode

from fastapi import HTTPException, Request, Response
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import BaseModel

from config import PUBLIC_ORIGIN
from errors import ValidationError, DuplicateSubmissionError
from link_service import LinkService
from pages import render_home
from shortener import build_short_url

FALLBACK_NOTICE = "AI analysis is unavailable right now; the link was saved with default tags."
DUPLICATE_NOTICE = "This link is already being shortened. Hold tight."


# --- Request Models ---

class ShortenRequest(BaseModel):
    url: str


def _origin(request: Request) -> str:
    return PUBLIC_ORIGIN or str(request.base_url).rstrip("/")


def register_link_routes(app, service: LinkService):
    """Register page and API routes for one LinkService on the FastAPI app."""

    # ============================================================
    # Pages
    # ============================================================

    @app.get("/", response_class=HTMLResponse)
    async def home(request: Request, u: Optional[str] = None,
                   message: Optional[str] = None, error: Optional[str] = None):
        # Resolve check runs before anything is rendered
        outcome = await service.resolve(u)
        if outcome.should_redirect:
            return RedirectResponse(url=outcome.target_url, status_code=302)
        return HTMLResponse(render_home(outcome.links, _origin(request), message=message, error=error))

    @app.post("/shorten")
    async def shorten_submit(request: Request):
        form = await request.form()
        raw_url = (form.get("url") or "").strip()
        if not raw_url:
            return RedirectResponse("/", status_code=303)

        try:
            _, outcome = await service.shorten(raw_url)
        except ValidationError as e:
            html = render_home(service.list_links(), _origin(request), url_value=raw_url, error=str(e))
            return HTMLResponse(html, status_code=400)
        except DuplicateSubmissionError:
            html = render_home(service.list_links(), _origin(request), url_value=raw_url, error=DUPLICATE_NOTICE)
            return HTMLResponse(html, status_code=409)

        if outcome.fallback:
            return RedirectResponse("/?" + urlencode({"message": FALLBACK_NOTICE}), status_code=303)
        return RedirectResponse("/", status_code=303)

    @app.post("/links/{link_id}/visit")
    async def visit_submit(link_id: str):
        link = await service.visit(link_id)
        if link is None:
            return RedirectResponse("/", status_code=303)
        return RedirectResponse(link.original_url, status_code=303)

    @app.post("/links/{link_id}/delete")
    async def delete_submit(link_id: str):
        await service.delete(link_id)
        return RedirectResponse("/", status_code=303)

    # ============================================================
    # JSON API
    # ============================================================

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    @app.get("/api/links")
    async def api_list_links():
        links = service.list_links()
        return {"links": [l.to_dict() for l in links], "count": len(links)}

    @app.post("/api/links", status_code=201)
    async def api_create_link(body: ShortenRequest, request: Request):
        try:
            link, outcome = await service.shorten(body.url)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except DuplicateSubmissionError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return {
            "link": link.to_dict(),
            "shortUrl": build_short_url(_origin(request), link.short_code),
            "fallback": outcome.fallback,
        }

    @app.delete("/api/links/{link_id}", status_code=204)
    async def api_delete_link(link_id: str):
        await service.delete(link_id)
        return Response(status_code=204)

    @app.post("/api/links/{link_id}/visit")
    async def api_visit_link(link_id: str):
        link = await service.visit(link_id)
        if link is None:
            raise HTTPException(status_code=404, detail="Link not found")
        return {"link": link.to_dict()}

    @app.get("/api/resolve/{code}")
    async def api_resolve(code: str):
        outcome = await service.resolve(code)
        return {"redirect": outcome.should_redirect, "url": outcome.target_url}
