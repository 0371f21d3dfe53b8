"""Run seeds from the command line.

Usage:
    cd /path/to/buzzly
    SEED_ADMIN_EMAIL=mod@buzzly.io SEED_ADMIN_PASSWORD=... python -m scripts.run_seeds
"""
import asyncio
import logging

from seeds.seed_data import seed_all


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed_all())
