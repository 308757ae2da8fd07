from __future__ import annotations

from fastapi import FastAPI

from api.routers import crawl_control, records


def create_app() -> FastAPI:
    app = FastAPI(title="Social Harvester", version="0.1.0")

    app.include_router(records.router)
    app.include_router(crawl_control.router)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
