import argparse
import asyncio
import os
import sys

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dotenv import load_dotenv

load_dotenv()

from app.core.config import settings
from app.core.db import SessionLocal, engine, init_models
from app.core.logging import setup_logging
from app.modules.seed.loader import SeedReconciler
from app.modules.seed.report import BatchReport
from app.modules.seed.schemas import SEED_ORDER
from app.modules.seed.verify import verify_all
from app.platform.provider_registry import registry

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Reconcile seed records and their media files into the database.")
    parser.add_argument("--env", choices=["development", "production"], default=settings.SEED_ENVIRONMENT,
                        help="which environment-specific seed folder to layer over the shared one")
    parser.add_argument("--clear", action="store_true", help="delete existing content rows before seeding")
    parser.add_argument("--verify", action="store_true",
                        help="only check the seed JSON files; touches neither storage nor the database")
    parser.add_argument("--kind", action="append", choices=list(SEED_ORDER), dest="kinds",
                        help="seed only this kind (repeatable); defaults to all kinds in dependency order")
    parser.add_argument("--root", default=settings.SEED_DATA_ROOT, help="seed data root directory")
    return parser.parse_args(argv)

def print_summary(batch: BatchReport, kinds: list[str], checked_only: bool = False) -> None:
    print("\n" + "-" * 60)
    for kind in kinds:
        if kind in batch.reports:
            report = batch.reports[kind]
            print(f"  OK    {report.check_summary() if checked_only else report.summary()}")
            for w in report.warnings:
                print(f"        warning: {w}")
        elif kind in batch.failures:
            print(f"  FAIL  {kind}: {batch.failures[kind]}")
    print("-" * 60)

def verify(args, kinds: list[str]) -> BatchReport:
    print("=" * 60)
    print(f"Verifying seed data environment={args.env} root={args.root}")
    print("=" * 60)
    return verify_all(args.env, args.root, kinds)

async def seed(args, kinds: list[str]) -> BatchReport:
    storage = registry.object_storage()
    print("=" * 60)
    print(f"Seeding environment={args.env} backend={storage.name} clear={'yes' if args.clear else 'no'}")
    print("=" * 60)
    try:
        await init_models()
        reconciler = SeedReconciler(SessionLocal, storage, root=args.root)
        if args.clear:
            await reconciler.clear_all()
        return await reconciler.reconcile_all(args.env, kinds)
    finally:
        await engine.dispose()

async def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging()
    kinds = [k for k in SEED_ORDER if not args.kinds or k in args.kinds]

    if args.verify:
        batch = verify(args, kinds)
    else:
        batch = await seed(args, kinds)

    print_summary(batch, kinds, checked_only=args.verify)
    return 0 if batch.ok else 1

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
