#!/usr/bin/env python3
"""
Re-run automatic categorization over stored products.

Usage:
    python scripts/recategorize_products.py [--only-uncategorized]

Example:
    python scripts/recategorize_products.py --only-uncategorized
"""
import argparse
import asyncio
import os
import sys

# Add parent directory to path so we can import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from packages.common.config import get_settings
from packages.common.logging import configure_logging
from services.worker.tasks.recategorize_products import run_recategorization


async def main():
    parser = argparse.ArgumentParser(description="Recategorize stored products")
    parser.add_argument(
        "--only-uncategorized",
        action="store_true",
        help="Only products that have no primary category yet",
    )
    args = parser.parse_args()

    configure_logging(get_settings().log_level)

    print("Recategorizing products...")

    result = await run_recategorization(args.only_uncategorized)

    print("\nResult:")
    print(f"  Processed: {result.get('processed')}")
    print(f"  Updated:   {result.get('updated')}")
    print(f"  Failed:    {result.get('failed')}")

    if result.get("failed"):
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
