from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI

from stylecraft.config import get_settings
from stylecraft.handlers import inventory_handler, styling_handler, sustainability_handler

logging.basicConfig(level=get_settings().log_level.upper())

app = FastAPI(title="Stylecraft API")

app.include_router(inventory_handler.router)
app.include_router(styling_handler.router)
app.include_router(sustainability_handler.router)


@app.get("/healthz")
async def healthz():
    return {"status": "ok"}


def serve() -> None:
    """Run the API with uvicorn on the configured host and port."""

    settings = get_settings()
    uvicorn.run("stylecraft.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    serve()
