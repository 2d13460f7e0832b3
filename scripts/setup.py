#!/usr/bin/env python3
"""Setup script for the travel booking API: create tables and seed sample tours."""

import asyncio
import logging
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import func, select

from travel_booking.core.database import async_session_factory, close_db, init_db
from travel_booking.models import Tour

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SAMPLE_TOURS = [
    ("Paris City Lights", Decimal("500.00"), 8, 3),
    ("Ha Long Bay Cruise", Decimal("320.00"), 12, 2),
    ("Northern Lights Adventure", Decimal("1299.00"), 6, 5),
]


async def setup_database():
    """Create all tables that do not exist yet."""
    logger.info("Setting up database...")
    await init_db()
    logger.info("Database setup completed successfully!")


async def create_sample_data():
    """Create sample tours unless any tour already exists."""
    logger.info("Creating sample data...")

    async with async_session_factory() as db:
        existing_tours = await db.scalar(select(func.count()).select_from(Tour))
        if existing_tours:
            logger.info("Sample data already exists, skipping...")
            return

        start = date.today() + timedelta(days=30)
        for offset, (title, price, max_guests, duration_days) in enumerate(SAMPLE_TOURS):
            db.add(Tour(
                title=title,
                price_per_person=price,
                max_guests=max_guests,
                duration_days=duration_days,
                start_date=start + timedelta(days=offset * 7),
            ))

        await db.commit()
        logger.info("Sample data created successfully!", extra={"tours": len(SAMPLE_TOURS)})


async def main():
    """Main setup function."""
    logger.info("Starting travel booking API setup...")

    try:
        await setup_database()
        await create_sample_data()
    finally:
        await close_db()

    logger.info("Setup completed successfully!")
    logger.info("You can now start the API server with: uvicorn travel_booking.main:app --reload")


if __name__ == "__main__":
    asyncio.run(main())
