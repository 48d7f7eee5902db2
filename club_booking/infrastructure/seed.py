"""Catálogo de demostración: se carga en modo en memoria y con `scripts/seed_db.py`."""

from decimal import Decimal

from club_booking.domain.entities.resource import Resource, ResourceType


def demo_catalog() -> list[Resource]:
    return [
        Resource(
            id=1,
            resource_type=ResourceType.ROOM,
            name="Room 101",
            category="Deluxe",
            max_capacity=3,
            member_price=Decimal("5000.00"),
            guest_price=Decimal("7000.00"),
        ),
        Resource(
            id=2,
            resource_type=ResourceType.ROOM,
            name="Room 102",
            category="Deluxe",
            max_capacity=3,
            member_price=Decimal("5000.00"),
            guest_price=Decimal("7000.00"),
        ),
        Resource(
            id=3,
            resource_type=ResourceType.ROOM,
            name="Room 201",
            category="Standard",
            max_capacity=2,
            member_price=Decimal("3500.00"),
            guest_price=Decimal("5000.00"),
        ),
        Resource(
            id=10,
            resource_type=ResourceType.HALL,
            name="Banquet Hall",
            min_capacity=50,
            max_capacity=400,
            member_price=Decimal("80000.00"),
            guest_price=Decimal("120000.00"),
        ),
        Resource(
            id=20,
            resource_type=ResourceType.LAWN,
            name="Main Lawn",
            category="Outdoor",
            min_capacity=100,
            max_capacity=800,
            member_price=Decimal("150000.00"),
            guest_price=Decimal("200000.00"),
        ),
        Resource(
            id=30,
            resource_type=ResourceType.PHOTOSHOOT,
            name="Garden Photoshoot",
            member_price=Decimal("15000.00"),
            guest_price=Decimal("20000.00"),
        ),
    ]
