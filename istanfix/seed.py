"""
Reference data seeding.

Each reference table is seeded only when empty, inside its own transaction:
a failure rolls back that table alone and the remaining tables still run.
Neighborhoods are seeded after districts, resolving each district by name
from a fresh query.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .db.models import Category, District, Neighborhood
from . import reference_data

logger = logging.getLogger(__name__)


@dataclass
class SeedResult:
    """Rows inserted per reference table (0 when already populated)"""
    categories: int = 0
    districts: int = 0
    neighborhoods: int = 0
    failed: Tuple[str, ...] = ()

    @property
    def total(self) -> int:
        return self.categories + self.districts + self.neighborhoods


def _seed_categories(db: Session, categories: List[Tuple[str, str, str]]) -> int:
    if db.query(Category).count() > 0:
        return 0
    db.add_all([Category(name=name, icon=icon, description=description) for name, icon, description in categories])
    return len(categories)


def _seed_districts(db: Session, districts: List[Tuple[str, str]]) -> int:
    if db.query(District).count() > 0:
        return 0
    db.add_all([District(name=name, area_code=area_code) for name, area_code in districts])
    return len(districts)


def _seed_neighborhoods(db: Session, neighborhoods: Dict[str, List[Tuple[str, str]]]) -> int:
    if db.query(Neighborhood).count() > 0:
        return 0

    district_ids = {name: district_id for district_id, name in db.query(District.id, District.name).all()}
    if not district_ids:
        logger.warning("No districts available; skipping neighborhood seeding")
        return 0

    rows = []
    for district_name, items in neighborhoods.items():
        district_id = district_ids.get(district_name)
        if district_id is None:
            logger.warning(f"Unknown district '{district_name}' in neighborhood seed list; skipped")
            continue
        for name, postal_code in items:
            rows.append(Neighborhood(name=name, district_id=district_id, postal_code=postal_code))

    db.add_all(rows)
    return len(rows)


def _run_table(session_factory: Callable[[], Session], table: str, seeder, data) -> Optional[int]:
    db = session_factory()
    try:
        inserted = seeder(db, data)
        db.commit()
        if inserted:
            logger.info(f"Seeded {inserted} {table}")
        return inserted
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Seeding {table} failed, table left unchanged: {e}")
        return None
    finally:
        db.close()


def seed_reference_data(
    session_factory: Callable[[], Session],
    categories: Optional[List[Tuple[str, str, str]]] = None,
    districts: Optional[List[Tuple[str, str]]] = None,
    neighborhoods: Optional[Dict[str, List[Tuple[str, str]]]] = None,
) -> SeedResult:
    """
    Populate empty reference tables from the built-in lists.

    Args:
        session_factory: Callable returning a new Session (e.g. `Database.session`)
        categories / districts / neighborhoods: Override the built-in lists

    Returns:
        SeedResult with per-table insert counts
    """
    plan = [
        ("categories", _seed_categories, categories if categories is not None else reference_data.CATEGORIES),
        ("districts", _seed_districts, districts if districts is not None else reference_data.DISTRICTS),
        ("neighborhoods", _seed_neighborhoods, neighborhoods if neighborhoods is not None else reference_data.NEIGHBORHOODS),
    ]

    result = SeedResult()
    failed = []
    for table, seeder, data in plan:
        inserted = _run_table(session_factory, table, seeder, data)
        if inserted is None:
            failed.append(table)
            continue
        setattr(result, table, inserted)

    result.failed = tuple(failed)
    return result
