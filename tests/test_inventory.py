from __future__ import annotations

import json
from types import SimpleNamespace

import pytest
from google.api_core import exceptions as gcs_exceptions

from stylecraft.services.inventory import InventoryService, items_from_payload, label_from_filename


class FakeBlob:
    def __init__(self, name: str, payload: bytes | None = None, error: Exception | None = None):
        self.name = name
        self._payload = payload
        self._error = error

    def download_as_bytes(self) -> bytes:
        if self._error is not None:
            raise self._error
        return self._payload or b""


class FakeStorageClient:
    """Mimics the parts of google.cloud.storage.Client the service uses."""

    def __init__(self, names=(), metadata: bytes | None = None, error: Exception | None = None):
        self.names = list(names)
        self.metadata = metadata
        self.error = error
        self.listed = []

    def list_blobs(self, bucket_name, delimiter=None):
        self.listed.append((bucket_name, delimiter))
        if self.error is not None:
            raise self.error
        return [FakeBlob(name) for name in self.names]

    def bucket(self, bucket_name):
        return SimpleNamespace(blob=lambda path: FakeBlob(path, self.metadata, self.error))


def _fallback_srcs(service: InventoryService) -> list[str]:
    return [item.src for item in service.fallback_items()]


@pytest.mark.parametrize(
    "filename, label",
    [
        ("blue_denim-jacket.png", "Blue Denim Jacket"),
        ("SUMMER-dress.jpeg", "Summer Dress"),
        ("hat", "Hat"),
    ],
)
def test_label_from_filename(filename, label):
    assert label_from_filename(filename) == label


def test_lists_root_images_of_bucket(settings):
    client = FakeStorageClient(
        names=["red-scarf.png", "notes.txt", "archive/old-coat.jpg", "Wool_Coat.JPG", "icon.svg"]
    )
    items = InventoryService(settings, client=client).list_items()

    assert client.listed == [("test-bucket", "/")]
    assert [(i.id, i.src, i.alt) for i in items] == [
        (1, "https://storage.googleapis.com/test-bucket/red-scarf.png", "Red Scarf"),
        (2, "https://storage.googleapis.com/test-bucket/Wool_Coat.JPG", "Wool Coat"),
        (3, "https://storage.googleapis.com/test-bucket/icon.svg", "Icon"),
    ]


def test_reads_metadata_file_when_configured(settings):
    settings.gcs_inventory_path = "inventory.json"
    metadata = json.dumps(
        [
            {"id": 10, "filename": "linen-shirt.jpg"},
            {"src": "https://img.example.com/boots.png", "name": "Chelsea Boots"},
            {"alt": "no image here"},
            {"filename": "belt.png", "alt": "Leather Belt"},
        ]
    ).encode()
    items = InventoryService(settings, client=FakeStorageClient(metadata=metadata)).list_items()

    assert [(i.id, i.src, i.alt) for i in items] == [
        (10, "https://storage.googleapis.com/test-bucket/linen-shirt.jpg", "Linen Shirt"),
        (2, "https://img.example.com/boots.png", "Chelsea Boots"),
        (4, "https://storage.googleapis.com/test-bucket/belt.png", "Leather Belt"),
    ]


def test_non_list_metadata_falls_back(settings):
    settings.gcs_inventory_path = "inventory.json"
    service = InventoryService(settings, client=FakeStorageClient(metadata=b'{"items": []}'))

    items = service.list_items()
    assert [i.src for i in items] == _fallback_srcs(service)
    assert items and items[0].src.startswith("http://assets.local/images/")


def test_unavailable_bucket_falls_back(settings):
    service = InventoryService(settings, client=FakeStorageClient(error=gcs_exceptions.Forbidden("denied")))
    assert [i.src for i in service.list_items()] == _fallback_srcs(service)


def test_empty_bucket_falls_back(settings):
    service = InventoryService(settings, client=FakeStorageClient(names=["readme.md"]))
    assert [i.src for i in service.list_items()] == _fallback_srcs(service)


def test_bundled_fallback_derives_missing_labels(settings):
    items = InventoryService(settings, client=FakeStorageClient()).fallback_items()
    by_id = {i.id: i for i in items}
    assert by_id[1].alt == "White Linen Shirt"
    assert by_id[2].alt == "Navy Chino Trousers"
    assert by_id[2].src == "http://assets.local/images/navy-chino-trousers.jpg"


def test_unreadable_fallback_yields_empty_list(settings, tmp_path):
    service = InventoryService(
        settings,
        client=FakeStorageClient(error=gcs_exceptions.NotFound("gone")),
        fallback_file=tmp_path / "missing.json",
    )
    assert service.list_items() == []


def test_items_from_payload_validates():
    assert items_from_payload([{"id": 1, "src": "https://x/a.png", "alt": "A"}])[0].alt == "A"
    with pytest.raises(ValueError):
        items_from_payload({"id": 1})
