"""Excepciones de dominio para el motor de disponibilidad y retenciones."""

from datetime import date


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Errores de Validación ===


class ValidationError(DomainError):
    """Error de validación de datos de entrada (antes de cualquier cambio de estado)."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=f"Validación fallida en '{field}': {message}",
            code="VALIDATION_ERROR",
        )
        self.field = field


class CapacityError(DomainError):
    """El número de invitados está fuera de los límites del recurso."""

    def __init__(
        self,
        resource_id: int,
        guests: int,
        min_guests: int | None,
        max_guests: int | None,
    ):
        super().__init__(
            message=(
                f"Capacidad inválida para recurso {resource_id}: {guests} invitados, "
                f"permitido {min_guests or 0}-{max_guests if max_guests is not None else 'sin límite'}"
            ),
            code="CAPACITY_ERROR",
        )
        self.resource_id = resource_id
        self.guests = guests
        self.min_guests = min_guests
        self.max_guests = max_guests


# === Errores de Conflicto ===


class ConflictError(DomainError):
    """
    El recurso no está disponible para el periodo solicitado.

    `kind` es la señal autoritativa (OUT_OF_SERVICE, BOOKED, RESERVED, ALREADY_HELD);
    `day` y `slot` indican exactamente qué choca para poder ofrecer alternativas.
    """

    def __init__(
        self,
        kind: str,
        message: str,
        resource_id: int | None = None,
        day: date | None = None,
        slot: str | None = None,
    ):
        super().__init__(message=message, code=f"CONFLICT_{kind}")
        self.kind = kind
        self.resource_id = resource_id
        self.day = day
        self.slot = slot


class AlreadyHeldError(ConflictError):
    """Otro titular tiene una retención vigente sobre el recurso."""

    def __init__(self, resource_id: int, holder_id: str | None = None):
        super().__init__(
            kind="ALREADY_HELD",
            message=f"El recurso {resource_id} está retenido por otro miembro",
            resource_id=resource_id,
        )
        self.holder_id = holder_id


# === Errores del Ciclo de Reserva ===


class GatewayError(DomainError):
    """Falla del servicio externo de pagos."""

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message=message, code="GATEWAY_ERROR")
        self.gateway_error_code = error_code


class HoldExpiredError(DomainError):
    """El pago se confirmó después de vencida la retención."""

    def __init__(self, attempt_id: str, hold_expires_at):
        super().__init__(
            message=f"La retención del intento {attempt_id} venció en {hold_expires_at}",
            code="HOLD_EXPIRED",
        )
        self.attempt_id = attempt_id
        self.hold_expires_at = hold_expires_at


class InvalidAttemptStateError(DomainError):
    """Transición no permitida en la máquina de estados del intento."""

    def __init__(self, attempt_id: str, current_state: str, target_state: str):
        super().__init__(
            message=f"Intento {attempt_id}: no se puede pasar de '{current_state}' a '{target_state}'",
            code="INVALID_ATTEMPT_STATE",
        )
        self.attempt_id = attempt_id
        self.current_state = current_state
        self.target_state = target_state


# === Errores de Búsqueda ===


class ResourceNotFoundError(DomainError):
    """El recurso no existe."""

    def __init__(self, resource_id: int):
        super().__init__(
            message=f"Recurso no encontrado: {resource_id}",
            code="RESOURCE_NOT_FOUND",
        )
        self.resource_id = resource_id


class BookingNotFoundError(DomainError):
    """La reserva confirmada no existe."""

    def __init__(self, booking_id: int):
        super().__init__(
            message=f"Reserva no encontrada: {booking_id}",
            code="BOOKING_NOT_FOUND",
        )
        self.booking_id = booking_id


class AttemptNotFoundError(DomainError):
    """El intento de reserva no existe."""

    def __init__(self, attempt_id: str):
        super().__init__(
            message=f"Intento de reserva no encontrado: {attempt_id}",
            code="ATTEMPT_NOT_FOUND",
        )
        self.attempt_id = attempt_id


# === Errores de Concurrencia y Consistencia ===


class OptimisticLockError(DomainError):
    """Conflicto de concurrencia al actualizar el estado del recurso."""

    def __init__(self, resource_id: int, expected_version: int, actual_version: int | None):
        super().__init__(
            message=f"Conflicto de concurrencia en recurso {resource_id}: "
            f"versión esperada {expected_version}, versión actual {actual_version}",
            code="OPTIMISTIC_LOCK_ERROR",
        )
        self.resource_id = resource_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class InconsistentStateError(DomainError):
    """Una operación compuesta quedó a medias y no puede reportarse como éxito."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INCONSISTENT_STATE")
