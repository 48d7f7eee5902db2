"""Generación de identificadores de intentos de reserva."""

import uuid

ATTEMPT_ID_PREFIX = "ATT-"


def generate_attempt_id() -> str:
    """
    Genera un id de intento único.

    Formato: `ATT-` + UUID v4 en hexadecimal (32 caracteres).
    El id viaja en el borrador opaco y regresa en el callback del gateway.
    """
    return f"{ATTEMPT_ID_PREFIX}{uuid.uuid4().hex}"
