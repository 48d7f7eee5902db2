"""Servicios de infraestructura."""

from club_booking.infrastructure.services.id_generator import generate_attempt_id

__all__ = [
    "generate_attempt_id",
]
