#!/usr/bin/env python
"""Run the outfit or tote bag flow against a running Stylecraft API and export the result."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from stylecraft.config import get_settings
from stylecraft.reports.document_export import export_image, export_outfit_pdf, export_tote_bag_pdf
from stylecraft.services.api_client import ServiceUnreachableError, StylecraftAPIError, StylecraftClient
from stylecraft.services.image_fetch import FetchOptions, ImageFetchError
from stylecraft.services.sustainability import MATERIAL_OPTIONS
from stylecraft.services.workflow import OutfitWorkflow, ToteBagWorkflow
from stylecraft.utils.images import load_upload

logger = logging.getLogger("stylecraft.cli")


def _show_progress(message: Optional[str]) -> None:
    if message:
        print(f"... {message}", file=sys.stderr)


async def _run(args: argparse.Namespace) -> None:
    settings = get_settings()
    upload_kwargs = {"max_dim": settings.image_max_dim, "quality": settings.image_quality}
    out_dir = Path(args.out_dir)

    async with StylecraftClient.from_settings(settings) as client:
        if args.command == "outfit":
            garment = load_upload(Path(args.garment), **upload_kwargs)
            workflow = OutfitWorkflow(
                client,
                fetch_options=FetchOptions.from_settings(settings),
                progress=_show_progress,
            )
            result = await workflow.run(args.prompt, garment)
            print(result.recommendation.model_dump_json(indent=2))
            export_image(result.image_data_url, "outfit-image").save(out_dir)
            export_outfit_pdf(result.recommendation, result.image_data_url).save(out_dir)
        else:
            photos = [load_upload(Path(p), **upload_kwargs) for p in args.photos]
            workflow = ToteBagWorkflow(client, progress=_show_progress)
            result = await workflow.run(photos, args.material)
            print(result.recommendation.model_dump_json(indent=2))
            export_image(result.image_data_url, "tote-bag-image").save(out_dir)
            export_tote_bag_pdf(result.recommendation, result.image_data_url).save(out_dir)


def main() -> None:
    parser = argparse.ArgumentParser(description="Stylecraft outfit and tote bag designer")
    parser.add_argument("--out_dir", default="exports")
    sub = parser.add_subparsers(dest="command", required=True)

    outfit = sub.add_parser("outfit", help="Style a garment with inventory pieces")
    outfit.add_argument("--garment", required=True, help="Photo of the garment (PNG, JPG, WEBP)")
    outfit.add_argument("--prompt", required=True, help='Style context, e.g. "a casual summer picnic"')

    tote = sub.add_parser("tote", help="Design a tote bag from old clothing")
    tote.add_argument("photos", nargs="+", help="Photos of the old clothing")
    tote.add_argument("--material", default="plain", choices=sorted(MATERIAL_OPTIONS))

    args = parser.parse_args()
    logging.basicConfig(level=get_settings().log_level.upper())

    try:
        asyncio.run(_run(args))
    except (ValueError, ImageFetchError, StylecraftAPIError, ServiceUnreachableError, OSError) as exc:
        logger.debug("Flow failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
