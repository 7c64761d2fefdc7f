"""
Database connectivity and task table health check script
"""
import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from task_service.db.database import AsyncSessionLocal, engine
from sqlalchemy import text
from loguru import logger


async def check_database():
    """Check database connectivity and task counts"""
    logger.info("Checking database connectivity...")

    try:
        async with AsyncSessionLocal() as db:
            await db.execute(text("SELECT 1"))
            logger.info("Database connection successful")

            active_count = await db.execute(text("SELECT COUNT(*) FROM tasks WHERE is_deleted = false"))
            deleted_count = await db.execute(text("SELECT COUNT(*) FROM tasks WHERE is_deleted = true"))

            logger.info("Task statistics:")
            logger.info(f"   Active tasks: {active_count.scalar()}")
            logger.info(f"   Soft-deleted tasks: {deleted_count.scalar()}")

    except Exception as e:
        logger.error(f"Database check failed: {e}")
        raise
    finally:
        await engine.dispose()

if __name__ == "__main__":
    asyncio.run(check_database())
