"""
Seed script for the submission_types table.

Inserts TA, CIE and Defaulter work if they are missing. Safe to run repeatedly.
"""
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

# Import all models to ensure SQLAlchemy can resolve relationships
from acadtrack.auth.models import User  # noqa: F401
from acadtrack.core import models  # noqa: F401
from acadtrack.core.services import ensure_submission_types
from acadtrack.db.session import AsyncSessionLocal

logger = logging.getLogger(__name__)


async def seed_submission_types(db: AsyncSession) -> None:
    types = await ensure_submission_types(db)
    logger.info("Submission types present: %s", ", ".join(sorted(types)))


async def main() -> None:
    async with AsyncSessionLocal() as session:
        await seed_submission_types(session)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
