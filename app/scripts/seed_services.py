"""Seed the service catalog with the standard AX TEAM offerings"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent.parent))

import logging
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.db.session import SessionLocal, init_db
from app.models.service import Service, ServiceCategory

logger = logging.getLogger(__name__)

DEFAULT_SERVICES = [
    {
        "name": "AC Repair",
        "category": ServiceCategory.AC_SERVICES.value,
        "description": "Diagnosis and repair of split and window air conditioners.",
        "price_min": Decimal("499"),
        "price_max": Decimal("2499"),
        "duration": "1-2 hours",
        "features": ["Gas leak check", "Cooling diagnosis", "30-day service warranty"],
    },
    {
        "name": "AC Installation",
        "category": ServiceCategory.AC_SERVICES.value,
        "description": "Professional installation of split AC units including piping.",
        "price_min": Decimal("1499"),
        "price_max": Decimal("3999"),
        "duration": "2-4 hours",
        "features": ["Copper piping", "Wall mounting", "Test run"],
    },
    {
        "name": "Washing Machine Repair",
        "category": ServiceCategory.APPLIANCE_SERVICES.value,
        "description": "Repair for front and top load washing machines of all brands.",
        "price_min": Decimal("399"),
        "price_max": Decimal("1999"),
        "duration": "1-2 hours",
        "features": ["All brands", "Genuine spare parts"],
    },
    {
        "name": "Refrigerator Repair",
        "category": ServiceCategory.APPLIANCE_SERVICES.value,
        "description": "Cooling, compressor and gas refill service for refrigerators.",
        "price_min": Decimal("449"),
        "price_max": Decimal("2999"),
        "features": ["Gas refill", "Compressor check"],
    },
    {
        "name": "Electrical Wiring",
        "category": ServiceCategory.ELECTRICAL_SERVICES.value,
        "description": "House wiring, switchboard and fixture installation by licensed electricians.",
        "price_min": Decimal("299"),
        "price_max": Decimal("4999"),
        "features": ["Licensed electricians", "Safety inspection"],
    },
    {
        "name": "Plumbing Repair",
        "category": ServiceCategory.PLUMBING_SERVICES.value,
        "description": "Leak fixing, tap and pipe replacement, drainage cleaning.",
        "price_min": Decimal("199"),
        "price_max": Decimal("1999"),
        "features": ["Leak detection", "Tap replacement"],
    },
    {
        "name": "Wall Painting",
        "category": ServiceCategory.PAINTING_SERVICES.value,
        "description": "Interior and exterior wall painting with premium finishes.",
        "price_min": Decimal("4999"),
        "price_max": Decimal("49999"),
        "duration": "2-5 days",
        "features": ["Premium paints", "Furniture covering", "Post-work cleanup"],
    },
    {
        "name": "CCTV Installation",
        "category": ServiceCategory.CCTV_SERVICES.value,
        "description": "CCTV camera installation, DVR setup and mobile viewing configuration.",
        "price_min": Decimal("999"),
        "price_max": Decimal("9999"),
        "features": ["Mobile viewing setup", "Cable management"],
    },
    {
        "name": "Deep Home Cleaning",
        "category": ServiceCategory.CLEANING_SERVICES.value,
        "description": "Complete deep cleaning of kitchen, bathrooms and living areas.",
        "price_min": Decimal("1999"),
        "price_max": Decimal("5999"),
        "duration": "4-6 hours",
        "features": ["Eco-friendly products", "Trained staff"],
    },
    {
        "name": "Carpentry & Repairs",
        "category": ServiceCategory.GENERAL_REPAIRS.value,
        "description": "Furniture repair, door alignment and general handyman work.",
        "price_min": Decimal("299"),
        "price_max": Decimal("2999"),
        "features": ["Furniture repair", "Door and window fixes"],
    },
]


def seed_services(db: Session) -> int:
    """Insert missing default services; returns how many were added"""
    added = 0
    for data in DEFAULT_SERVICES:
        exists = db.query(Service).filter(func.lower(Service.name) == data["name"].lower()).first()
        if exists:
            continue
        db.add(Service(**data))
        added += 1
    db.commit()
    logger.info(f"Seeded {added} service(s)")
    return added


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    session = SessionLocal()
    try:
        count = seed_services(session)
        print(f"✅ {count} service(s) added")
    finally:
        session.close()
