"""
Create all tables from the models and, optionally, a school with its first administrator.

Run once against a fresh database (DATABASE_URL from env):
  python -m sfms.db.bootstrap
  python -m sfms.db.bootstrap --school-name "Green Valley School" --admin-user-id <idp-user-id>

The administrator link is what lets the identity-provider user reach the school's data.
"""
import argparse
import asyncio
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

import sfms.core.models  # noqa: F401  (register models on Base.metadata)
from sfms.core.config import settings
from sfms.core.enums import AdministratorRole
from sfms.core.logging import configure_logging
from sfms.core.models import School, SchoolAdministrator
from sfms.db.session import AsyncSessionLocal, Base, engine

logger = logging.getLogger(__name__)


async def create_tables(bind: AsyncEngine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))


async def seed_school(
    db: AsyncSession,
    school_name: str,
    admin_user_id: Optional[str] = None,
    role: str = AdministratorRole.OWNER.value,
) -> School:
    school = (await db.execute(select(School).where(School.name == school_name))).scalar_one_or_none()
    if not school:
        school = School(name=school_name)
        db.add(school)
        await db.flush()
        logger.info("Created school %s (%s)", school_name, school.id)

    if admin_user_id:
        link = (
            await db.execute(select(SchoolAdministrator).where(SchoolAdministrator.user_id == admin_user_id))
        ).scalar_one_or_none()
        if link is None:
            db.add(SchoolAdministrator(user_id=admin_user_id, school_id=school.id, role=role))
            logger.info("Linked user %s to school %s as %s", admin_user_id, school.id, role)
        elif link.school_id != school.id:
            logger.warning("User %s is already linked to another school (%s); left unchanged", admin_user_id, link.school_id)
    await db.commit()
    return school


async def main(school_name: Optional[str], admin_user_id: Optional[str], role: str) -> None:
    await create_tables(engine)
    if school_name:
        async with AsyncSessionLocal() as db:
            await seed_school(db, school_name, admin_user_id, role)
    await engine.dispose()


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create tables and optionally seed a school")
    parser.add_argument("--school-name")
    parser.add_argument("--admin-user-id")
    parser.add_argument(
        "--role",
        default=AdministratorRole.OWNER.value,
        choices=[r.value for r in AdministratorRole],
    )
    return parser.parse_args()


if __name__ == "__main__":
    args = _parse_args()
    configure_logging(settings.log_level)
    asyncio.run(main(args.school_name, args.admin_user_id, args.role))
