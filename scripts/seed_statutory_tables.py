#!/usr/bin/env python
"""Seed a tenant's statutory configuration.

Usage:
    python scripts/seed_statutory_tables.py scripts/data/sample_tenant.json
    python scripts/seed_statutory_tables.py config.json --create-schema
    python scripts/seed_statutory_tables.py config.json --database-url postgresql+asyncpg://...

Loads tax tables, contribution rates, currency rates and the leave policy
from a JSON document. Re-running skips tables and rates whose effective
range is already present.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from statutory_payroll.database import create_schema, dispose_db, get_session, init_db
from statutory_payroll.repositories import SqlAlchemyRepository
from statutory_payroll.schemas import TenantConfiguration
from statutory_payroll.services import ConfigImportService


def load_configuration(path: Path) -> TenantConfiguration:
    """Parse and validate a tenant configuration file."""
    with path.open() as f:
        return TenantConfiguration.model_validate(json.load(f))


async def seed(configuration: TenantConfiguration, with_schema: bool = False) -> None:
    if with_schema:
        await create_schema()

    async with get_session() as session:
        service = ConfigImportService(SqlAlchemyRepository(session))
        summary = await service.import_tenant(configuration, skip_existing=True)

    print(f"Created {summary.tax_tables} tax tables")
    print(f"Created {summary.contribution_rates} contribution rates")
    print(f"Created {summary.currency_rates} currency rates")
    if summary.leave_policy_updated:
        print("Updated leave policy")
    for message in summary.skipped:
        print(f"Skipped: {message}")


async def run(args: argparse.Namespace) -> int:
    try:
        configuration = load_configuration(args.config)
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}")
        return 1

    init_db(args.database_url)
    print("Seeding statutory tables...")
    try:
        await seed(configuration, with_schema=args.create_schema)
    finally:
        await dispose_db()
    print("\nDone! Statutory tables seeded successfully.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed statutory tables for a tenant")
    parser.add_argument("config", type=Path, help="Tenant configuration JSON file")
    parser.add_argument(
        "--database-url",
        default=None,
        help="Database URL (defaults to DATABASE_URL)",
    )
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create missing tables before seeding",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
