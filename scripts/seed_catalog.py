"""Seed the stamp catalog from the command line.

Usage: python scripts/seed_catalog.py "Main gate" "Clock tower" ...
Prints each new stamp with the URL to encode in its QR code.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.stamp_rally.stamp_rally.container import build_container


def main(argv: list[str]) -> None:
    if not argv:
        raise SystemExit("Usage: seed_catalog.py NAME [NAME ...]")

    settings = importlib.import_module(get_settings_module())
    container = build_container(storage_config=dict(settings.STORAGE_CONFIG))

    base_url = "https://<your-host>"
    for name in argv:
        entry = container.catalog_service.add_stamp(name)
        print(f"OK: {entry.stamp_id} {entry.name} -> {base_url}/stamp/{entry.hash}")


if __name__ == "__main__":
    main(sys.argv[1:])
