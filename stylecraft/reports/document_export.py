"""Downloadable exports of a generated design: raw image or PDF sheet.

PDF pages are drawn with Pillow on an A4 canvas at 150 dpi and saved as a
multi-page PDF.  Text wraps to the content width, sections flow onto a new
page when they overflow, and the rendered image is scaled to fit the space
left while keeping its aspect ratio.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont, UnidentifiedImageError

from stylecraft.models import EncodedImage, OutfitRecommendation, ToteBagRecommendation

logger = logging.getLogger(__name__)

_DPI = 150
_PX_PER_MM = _DPI / 25.4
_PAGE_SIZE = (round(210 * _PX_PER_MM), round(297 * _PX_PER_MM))  # A4
_MARGIN = round(15 * _PX_PER_MM)
_IMAGE_BOTTOM_PAD = round(10 * _PX_PER_MM)
_MIN_IMAGE_HEIGHT = _PAGE_SIZE[1] // 4
_BG_COLOR = (255, 255, 255)
_TEXT_COLOR = (0, 0, 0)
_MUTED_COLOR = (90, 90, 90)

_TITLE_SIZE = 42
_HEADING_SIZE = 30
_BODY_SIZE = 25
_LIST_SIZE = 23
_NOTE_SIZE = 21


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    content_type: str
    data: bytes

    def save(self, directory: Path) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename
        path.write_bytes(self.data)
        logger.info("Saved %s (%d bytes)", path, len(self.data))
        return path


def export_image(image_data_url: str, filename: str = "design-image") -> ExportArtifact:
    """Export the rendered image as-is; ``.png`` is appended to bare names."""

    image = EncodedImage.from_data_url(image_data_url)
    name = filename if "." in filename else f"{filename}.png"
    return ExportArtifact(name, image.media_type, image.raw_bytes())


def export_outfit_pdf(
    recommendation: OutfitRecommendation,
    image_data_url: Optional[str],
    filename: str = "outfit-design",
) -> ExportArtifact:
    doc = _PdfDocument()
    doc.text(recommendation.title, _TITLE_SIZE, bold=True, gap=15)
    doc.text(recommendation.justification, _BODY_SIZE, gap=30)
    if recommendation.accessories:
        doc.text("Accessories:", _HEADING_SIZE, bold=True, gap=10)
        doc.bullets(recommendation.accessories)
    if recommendation.color_palette:
        doc.text("Color Palette:", _HEADING_SIZE, bold=True, gap=10)
        doc.text(", ".join(recommendation.color_palette), _LIST_SIZE, gap=30)
    doc.image(image_data_url)
    return ExportArtifact(f"{filename}.pdf", "application/pdf", doc.render())


def export_tote_bag_pdf(
    recommendation: ToteBagRecommendation,
    image_data_url: Optional[str],
    filename: str = "tote-bag-design",
) -> ExportArtifact:
    doc = _PdfDocument()
    doc.text(recommendation.title, _TITLE_SIZE, bold=True, gap=15)
    doc.text(recommendation.description, _BODY_SIZE, gap=30)
    doc.text("Material:", _HEADING_SIZE, bold=True, gap=10)
    material = recommendation.material_type
    doc.text(material[:1].upper() + material[1:], _LIST_SIZE, gap=30)
    if recommendation.design_features:
        doc.text("Design Features:", _HEADING_SIZE, bold=True, gap=10)
        doc.bullets(recommendation.design_features)
    if recommendation.color_palette:
        doc.text("Color Palette:", _HEADING_SIZE, bold=True, gap=10)
        doc.text(", ".join(recommendation.color_palette), _LIST_SIZE, gap=30)
    doc.image(image_data_url)
    return ExportArtifact(f"{filename}.pdf", "application/pdf", doc.render())


def fit_within(width: int, height: int, max_width: float, max_height: float) -> Tuple[int, int]:
    """Scale (width, height) to max_width, then shrink to max_height if taller."""

    if width <= 0 or height <= 0:
        raise ValueError("Image dimensions must be positive")
    aspect = width / height
    display_w, display_h = max_width, max_width / aspect
    if display_h > max_height:
        display_h = max_height
        display_w = max_height * aspect
    return max(1, round(display_w)), max(1, round(display_h))


def wrap_text(text: str, font: ImageFont.ImageFont, max_width: float) -> List[str]:
    """Greedy word wrap measured with the font; keeps explicit newlines."""

    measure = ImageDraw.Draw(Image.new("RGB", (1, 1)))
    lines: List[str] = []
    for paragraph in text.splitlines() or [""]:
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if current and measure.textlength(candidate, font=font) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        lines.append(current)
    return lines


# ------------------------------------------------------------------
# Layout
# ------------------------------------------------------------------


def _load_font(size: int, *, bold: bool = False, italic: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    name = "DejaVuSans"
    if bold:
        name += "-Bold"
    elif italic:
        name += "-Oblique"
    try:
        return ImageFont.truetype(f"{name}.ttf", size)
    except OSError:  # pragma: no cover
        return ImageFont.load_default(size)


class _PdfDocument:
    def __init__(self) -> None:
        self.pages: List[Image.Image] = []
        self.content_width = _PAGE_SIZE[0] - 2 * _MARGIN
        self._new_page()

    def _new_page(self) -> None:
        page = Image.new("RGB", _PAGE_SIZE, _BG_COLOR)
        self.pages.append(page)
        self._draw = ImageDraw.Draw(page)
        self.y = _MARGIN

    def _ensure_room(self, height: int) -> None:
        if self.y + height > _PAGE_SIZE[1] - _MARGIN and self.y > _MARGIN:
            self._new_page()

    def text(
        self,
        text: str,
        size: int,
        *,
        bold: bool = False,
        italic: bool = False,
        indent: int = 0,
        gap: int = 0,
        color: Tuple[int, int, int] = _TEXT_COLOR,
    ) -> None:
        font = _load_font(size, bold=bold, italic=italic)
        line_height = round(size * 1.35)
        for line in wrap_text(text, font, self.content_width - indent):
            self._ensure_room(line_height)
            self._draw.text((_MARGIN + indent, self.y), line, font=font, fill=color)
            self.y += line_height
        self.y += gap

    def bullets(self, items: Iterable[str]) -> None:
        for item in items:
            self.text(f"• {item}", _LIST_SIZE, indent=30)
        self.y += 20

    def image(self, image_data_url: Optional[str]) -> None:
        try:
            if not image_data_url:
                raise ValueError("no image")
            raw = EncodedImage.from_data_url(image_data_url).raw_bytes()
            with Image.open(io.BytesIO(raw)) as img:
                picture = img.convert("RGB")
        except (ValueError, UnidentifiedImageError, OSError) as exc:
            logger.error("Error adding image to PDF: %s", exc)
            self.text("Image could not be loaded", _NOTE_SIZE, italic=True, color=_MUTED_COLOR)
            return

        available = _PAGE_SIZE[1] - self.y - _MARGIN - _IMAGE_BOTTOM_PAD
        if available < _MIN_IMAGE_HEIGHT:
            self._new_page()
            available = _PAGE_SIZE[1] - self.y - _MARGIN - _IMAGE_BOTTOM_PAD

        size = fit_within(picture.width, picture.height, self.content_width, available)
        self.pages[-1].paste(picture.resize(size, Image.Resampling.LANCZOS), (_MARGIN, self.y))
        self.y += size[1]

    def render(self) -> bytes:
        buffer = io.BytesIO()
        first, *rest = self.pages
        first.save(buffer, format="PDF", save_all=True, append_images=rest, resolution=float(_DPI))
        return buffer.getvalue()
