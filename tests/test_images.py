from __future__ import annotations

import pytest
from pydantic import ValidationError

from helpers import make_png
from stylecraft.models import EncodedImage
from stylecraft.utils.images import MAX_UPLOAD_BYTES, encode_upload, image_size, load_upload


def test_data_url_parsing():
    image = EncodedImage.from_data_url("data:image/webp;base64,AAAA")
    assert image.media_type == "image/webp"
    assert image.data == "AAAA"
    assert image.to_data_url() == "data:image/webp;base64,AAAA"


@pytest.mark.parametrize("value", ["image/png;base64,AAAA", "data:image/png,AAAA", "data:image/png;base64"])
def test_data_url_rejects_other_shapes(value):
    with pytest.raises(ValueError):
        EncodedImage.from_data_url(value)


def test_invalid_base64_is_rejected_on_construction():
    with pytest.raises(ValidationError, match="not valid base64"):
        EncodedImage(data="@@not base64@@", media_type="image/png")
    with pytest.raises(ValidationError):
        EncodedImage.model_validate({"base64": "!!", "mimeType": "image/png"})


def test_encoded_image_serialises_with_api_keys():
    image = EncodedImage.from_bytes(b"abc", "image/png")
    assert image.model_dump(by_alias=True) == {"base64": "YWJj", "mimeType": "image/png"}
    assert EncodedImage.model_validate({"base64": "YWJj", "mimeType": "image/png"}) == image


def test_upload_is_downscaled_to_jpeg():
    image = encode_upload(make_png(2000, 1000), "image/png", max_dim=500)
    assert image.media_type == "image/jpeg"
    assert image_size(image) == (500, 250)


def test_upload_without_compression_keeps_bytes():
    raw = make_png()
    image = encode_upload(raw, "image/png", compress=False)
    assert image.raw_bytes() == raw
    assert image.media_type == "image/png"


def test_undecodable_upload_falls_back_to_original_bytes():
    image = encode_upload(b"not really a png", "image/png")
    assert image.raw_bytes() == b"not really a png"
    assert image.media_type == "image/png"


@pytest.mark.parametrize(
    "payload, content_type, message",
    [
        (b"x", "text/plain", "Unsupported content_type"),
        (b"", "image/png", "empty"),
        (b"x" * (MAX_UPLOAD_BYTES + 1), "image/png", "10 MB"),
    ],
)
def test_upload_validation(payload, content_type, message):
    with pytest.raises(ValueError, match=message):
        encode_upload(payload, content_type)


def test_load_upload_guesses_type(tmp_path):
    path = tmp_path / "shirt.png"
    path.write_bytes(make_png())
    assert load_upload(path, compress=False).media_type == "image/png"
