"""Catalog inventory backed by a public Google Cloud Storage bucket.

Two sources are supported:

* a JSON metadata object (``GCS_INVENTORY_PATH``) listing items as
  ``{"id", "filename" | "src", "alt" | "name"}``;
* otherwise, every image object at the bucket root.

Whatever goes wrong (bucket unreachable, malformed metadata, empty
listing) the caller gets the bundled ``data/inventory.example.json`` list
instead of an error.
"""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, List, Optional

from google.cloud import storage

from stylecraft.config import Settings
from stylecraft.models import InventoryItem

logger = logging.getLogger(__name__)

_GCS_PUBLIC_URL = "https://storage.googleapis.com"
_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".gif", ".svg")
FALLBACK_INVENTORY_FILE = Path(__file__).resolve().parent.parent / "data" / "inventory.example.json"


class InventoryUnavailable(Exception):
    """The bucket could not provide a usable inventory."""


class InventoryService:
    """Lists inventory items from GCS with a bundled fallback."""

    def __init__(
        self,
        settings: Settings,
        *,
        client: Optional[storage.Client] = None,
        fallback_file: Path = FALLBACK_INVENTORY_FILE,
    ) -> None:
        self._bucket_name = settings.gcs_bucket_name
        self._inventory_path = settings.gcs_inventory_path
        self._public_base_url = settings.public_base_url.rstrip("/")
        self._fallback_file = fallback_file
        self._client = client

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def list_items(self) -> List[InventoryItem]:
        """Return the inventory; never raises."""

        try:
            if self._inventory_path:
                items = self._items_from_metadata(self._inventory_path)
            else:
                items = self._items_from_listing()
        except Exception as exc:
            logger.warning("Inventory unavailable from gs://%s, using fallback: %s", self._bucket_name, exc)
            return self.fallback_items()

        logger.debug("Loaded %d inventory items from gs://%s", len(items), self._bucket_name)
        return items

    def fallback_items(self) -> List[InventoryItem]:
        try:
            raw = json.loads(self._fallback_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Could not read fallback inventory %s: %s", self._fallback_file, exc)
            return []
        if not isinstance(raw, list):
            logger.error("Fallback inventory %s is not a list", self._fallback_file)
            return []

        items: List[InventoryItem] = []
        for index, entry in enumerate(raw):
            if not isinstance(entry, dict) or not entry.get("filename"):
                continue
            filename = entry["filename"]
            items.append(
                InventoryItem(
                    id=entry.get("id") or index + 1,
                    src=f"{self._public_base_url}/images/{filename}",
                    alt=entry.get("alt") or label_from_filename(filename),
                )
            )
        return items

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @property
    def client(self) -> storage.Client:
        if self._client is None:
            self._client = storage.Client.create_anonymous_client()
        return self._client

    def _items_from_metadata(self, path: str) -> List[InventoryItem]:
        blob = self.client.bucket(self._bucket_name).blob(path)
        data = json.loads(blob.download_as_bytes())
        if not isinstance(data, list):
            raise InventoryUnavailable(f"Inventory metadata {path} is not a list")

        items: List[InventoryItem] = []
        for index, entry in enumerate(data):
            if not isinstance(entry, dict) or not (entry.get("src") or entry.get("filename")):
                continue
            filename: Optional[str] = entry.get("filename")
            src = public_url(self._bucket_name, filename) if filename else entry["src"]
            label_source = filename or src.rsplit("/", 1)[-1] or f"item-{index + 1}"
            items.append(
                InventoryItem(
                    id=entry.get("id") or index + 1,
                    src=src,
                    alt=entry.get("alt") or entry.get("name") or label_from_filename(label_source),
                )
            )
        if not items:
            raise InventoryUnavailable(f"Inventory metadata {path} has no usable items")
        return items

    def _items_from_listing(self) -> List[InventoryItem]:
        names = [blob.name for blob in self.client.list_blobs(self._bucket_name, delimiter="/")]
        image_names = [name for name in names if _is_root_image(name)]
        if not image_names:
            raise InventoryUnavailable(f"No images at the root of gs://{self._bucket_name}")
        return [
            InventoryItem(id=index, src=public_url(self._bucket_name, name), alt=label_from_filename(name))
            for index, name in enumerate(image_names, start=1)
        ]


# ------------------------------------------------------------------
# Helper functions
# ------------------------------------------------------------------


def public_url(bucket_name: str, object_name: str) -> str:
    return f"{_GCS_PUBLIC_URL}/{bucket_name}/{object_name}"


def label_from_filename(filename: str) -> str:
    """``"blue_denim-jacket.png"`` -> ``"Blue Denim Jacket"``."""

    stem = re.sub(r"\.[^/.]+$", "", filename)
    return " ".join(word[:1].upper() + word[1:].lower() for word in re.split(r"[-_]", stem))


def _is_root_image(name: str) -> bool:
    return "/" not in name and name.lower().endswith(_IMAGE_EXTENSIONS)


def items_from_payload(payload: Any) -> List[InventoryItem]:
    """Validate a JSON payload returned by ``GET /api/inventory``."""

    if not isinstance(payload, list):
        raise ValueError("Inventory payload is not a list")
    return [InventoryItem.model_validate(entry) for entry in payload]
