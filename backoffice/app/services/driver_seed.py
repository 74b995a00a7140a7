"""
Driver seeding from a CSV file with an ``ID,NAME`` header.

Seeding only runs against an empty drivers table. Malformed rows and
repeated ids are skipped and logged.
"""

import csv
import logging
from pathlib import Path
from typing import Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.models.driver import Driver

logger = logging.getLogger(__name__)


async def seed_drivers_from_csv(db: AsyncSession, csv_path: Union[str, Path]) -> int:
    """
    Load drivers from ``csv_path`` when no driver exists yet.

    Returns:
        Number of drivers inserted
    """
    existing = await db.scalar(select(func.count(Driver.id)))
    if existing:
        logger.debug("Drivers table already has %d rows, skipping seed", existing)
        return 0

    path = Path(csv_path)
    if not path.is_file():
        logger.warning("Driver seed file %s not found", path)
        return 0

    seen = set()
    with path.open(newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        for line_no, row in enumerate(reader, start=2):
            raw_id = (row.get("ID") or "").strip()
            name = (row.get("NAME") or "").strip()
            try:
                driver_id = int(raw_id)
            except ValueError:
                logger.warning("Skipping driver row %d: invalid id %r", line_no, raw_id)
                continue
            if driver_id <= 0 or not name:
                logger.warning("Skipping driver row %d: missing id or name", line_no)
                continue
            if driver_id in seen:
                logger.warning("Skipping driver row %d: duplicate id %d", line_no, driver_id)
                continue
            seen.add(driver_id)
            db.add(Driver(id=driver_id, name=name))

    await db.commit()
    logger.info("Seeded %d drivers from %s", len(seen), path)
    return len(seen)
