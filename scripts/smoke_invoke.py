#!/usr/bin/env python3
"""
Bundle Smoke Test Script
========================

Standalone script to exercise one bundle invocation end to end.

This script:
    1. Seeds a local object store with synthetic item photos
    2. Invokes the bundler (in-process, or against a running server)
    3. Lists the entries of the published archive
    4. Reports pass/fail

Usage:
    python scripts/smoke_invoke.py --item A1 --count 3 --skip 2
    python scripts/smoke_invoke.py --url http://localhost:8080/invoke --root ./data/storage
"""

import argparse
import io
import logging
import os
import sys
import zipfile
from pathlib import Path

import requests
from PIL import Image


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


def seed_photos(root: Path, bucket: str, item: str, count: int, skip: set) -> None:
    """Write synthetic JPEG photos for every slot not in ``skip``."""
    bucket_dir = root / bucket
    bucket_dir.mkdir(parents=True, exist_ok=True)
    for slot in range(1, count + 1):
        if slot in skip:
            continue
        buffer = io.BytesIO()
        Image.new("RGB", (64, 64), (40 * slot % 256, 90, 160)).save(buffer, format="JPEG")
        (bucket_dir / f"{item}_{slot}.jpeg").write_bytes(buffer.getvalue())
    logger.info(f"Seeded {count - len(skip)} photos for {item} under {bucket_dir}")


def invoke_remote(url: str, payload: dict) -> dict:
    response = requests.post(url, json=payload, timeout=60)
    logger.info(f"POST {url} -> {response.status_code}")
    return response.json()


def invoke_local(payload: dict) -> dict:
    # Settings are read at import time, so the environment must be set first
    sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))
    from image_bundler.main import handler

    return handler(payload)


def main():
    parser = argparse.ArgumentParser(description="Bundle smoke test")
    parser.add_argument("--item", default="A1", help="Item code (default: A1)")
    parser.add_argument("--count", type=int, default=3, help="Image count (default: 3)")
    parser.add_argument(
        "--skip",
        type=int,
        action="append",
        default=[],
        help="Slot to leave absent (repeatable)",
    )
    parser.add_argument("--size", default="S，M，L", help="Single-line size label")
    parser.add_argument("--root", default="./data/smoke", help="Local object store root")
    parser.add_argument("--photo-bucket", default="phitemspics")
    parser.add_argument("--output-bucket", default="phbundledimages")
    parser.add_argument(
        "--url",
        default=None,
        help="POST to a running server instead of invoking in-process",
    )
    args = parser.parse_args()

    root = Path(args.root)
    seed_photos(root, args.photo_bucket, args.item, args.count, set(args.skip))

    payload = {
        "item_code": args.item,
        "image_count": str(args.count),
        "body": {"size_table": None, "size_description": None, "size_zh": args.size},
    }

    if args.url:
        result = invoke_remote(args.url, payload)
    else:
        os.environ.setdefault("BUNDLER_STORAGE_BACKEND", "local")
        os.environ.setdefault("BUNDLER_LOCAL_ROOT", str(root))
        os.environ.setdefault("BUNDLER_RENDER_STRATEGY", "local")
        os.environ.setdefault("BUNDLER_PHOTO_BUCKET", args.photo_bucket)
        os.environ.setdefault("BUNDLER_OUTPUT_BUCKET", args.output_bucket)
        result = invoke_local(payload)

    logger.info(f"Result: {result}")

    bundle_path = root / args.output_bucket / f"{args.item}.zip"
    if result.get("result") != "ok" or not bundle_path.exists():
        logger.error("TEST FAILED - no bundle published")
        sys.exit(1)

    with zipfile.ZipFile(bundle_path) as zf:
        for info in zf.infolist():
            logger.info(f"  {info.filename} ({info.file_size} bytes)")

    logger.info("TEST PASSED - bundle published")


if __name__ == "__main__":
    main()
