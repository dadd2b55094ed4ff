from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

# Script entrypoint: ensure `backend/` is importable.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.services.numbering_errors import NumberingError  # noqa: E402
from app.services.rule_store import SqlRuleStore  # noqa: E402
from app.services.seeds import load_seed_rules, seed_rules  # noqa: E402


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Load numbering rules from a JSON seed file.")
    parser.add_argument("seed_file", nargs="?", default=os.environ.get("NUMBERING_SEED_FILE"))
    parser.add_argument("--dry-run", action="store_true", help="Validate and count rules without inserting.")
    return parser.parse_args(argv)


async def _main(argv: list[str]) -> int:
    args = _parse_args(argv)
    if not args.seed_file:
        print("A seed file (argument or NUMBERING_SEED_FILE) is required.", file=sys.stderr)
        return 2

    try:
        rules = load_seed_rules(Path(args.seed_file))
    except (OSError, ValueError) as e:
        print(f"Cannot read seed file: {e}", file=sys.stderr)
        return 1

    if args.dry_run:
        print(f"Would insert {len(rules)} numbering rules")
        return 0

    url = os.environ.get("DATABASE_URL")
    if not url:
        print("DATABASE_URL is required.", file=sys.stderr)
        return 2

    engine = create_async_engine(url, pool_pre_ping=True)
    try:
        store = SqlRuleStore(async_sessionmaker(bind=engine, expire_on_commit=False))
        count = await seed_rules(store, rules)
    except NumberingError as e:
        print(f"Seeding stopped: {e}", file=sys.stderr)
        return 1
    finally:
        await engine.dispose()

    print(f"Inserted {count} numbering rules")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(_main(sys.argv[1:])))
