"""
SwiftLink -- FastAPI Application

AI-annotated URL shortener. Links live in a local key-value store file;
short links have the form <origin>?u=<shortCode> and resolve on this app.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import SWIFTLINK_DATA_PATH, SWIFTLINK_STORAGE_QUOTA, PORT
from annotator import Annotator
from link_service import LinkService
from link_store import LinkStore
from routes import register_link_routes
from storage import LocalStorage


def create_app(store: LinkStore = None, annotator: Annotator = None) -> FastAPI:
    """Build the app around an explicit store and annotator (config defaults)."""
    if store is None:
        store = LinkStore(LocalStorage(SWIFTLINK_DATA_PATH, quota_bytes=SWIFTLINK_STORAGE_QUOTA))
    if annotator is None:
        annotator = Annotator()
    service = LinkService(store, annotator)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        links = store.load()
        print(f"[App] Ready. {len(links)} links in storage.")
        yield
        await annotator.close()

    app = FastAPI(title="SwiftLink", lifespan=lifespan)
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_link_routes(app, service)
    return app


app = create_app()


# ============================================================
# Main
# ============================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=PORT)
