#!/usr/bin/env python3
"""One-off import of a Mobgran offer (same pipeline as POST /v1/offers/sync).

Run (local / Railway):
  cd services/api
  python -m scripts.import_offer "https://www.mobgran.com/app/link/<id>"
  python -m scripts.import_offer "<link>" --replace

Exit code is 0 when the offer was created, replaced or already present,
1 when the import failed.
"""

import argparse
import asyncio
import os
import sys
from dataclasses import asdict


# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mobgran_sync.services.mobgran_client import close_mobgran_client  # noqa: E402
from mobgran_sync.services.sync import SyncRequest, sync_offer  # noqa: E402
from mobgran_sync.stores.postgres import close_db, init_db, ping_db  # noqa: E402
from mobgran_sync.stores.redis import close_redis, init_redis  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Import one Mobgran offer by share link")
    parser.add_argument("link", help="Mobgran share link (or any text containing the offer id)")
    parser.add_argument(
        "--replace",
        action="store_true",
        help="Replace the stored snapshot when the offer already exists",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Initialize shared connections (same as API lifespan, but for a one-off run)
    await init_db()
    await ping_db()
    try:
        await init_redis()
    except Exception:
        # Still safe within this process; concurrent API imports are not excluded.
        pass

    try:
        result = await sync_offer(SyncRequest(link=args.link, replace_if_existing=args.replace))
        out = asdict(result)
        out["outcome"] = result.outcome.value
        out["error_kind"] = result.error_kind.value if result.error_kind else None
        out["stage"] = result.stage.value if result.stage else None
        print(out)
        return 0 if result.succeeded else 1
    finally:
        await close_mobgran_client()
        await close_redis()
        await close_db()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
