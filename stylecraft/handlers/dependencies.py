"""FastAPI dependencies shared by the routers.

Overriding these in ``app.dependency_overrides`` swaps settings, storage or
the generative provider in tests.
"""
from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, HTTPException

from stylecraft.config import Settings, get_settings
from stylecraft.services.inventory import InventoryService
from stylecraft.services.llm import ConfigurationError, GenerativeProvider, get_provider

logger = logging.getLogger(__name__)


def get_app_settings() -> Settings:
    return get_settings()


@lru_cache()
def _default_provider() -> GenerativeProvider:
    return get_provider(get_settings())


def get_generative_provider() -> GenerativeProvider:
    try:
        return _default_provider()
    except ConfigurationError as exc:
        logger.error("Generative provider unavailable: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc


def get_inventory_service(settings: Settings = Depends(get_app_settings)) -> InventoryService:
    return InventoryService(settings)
