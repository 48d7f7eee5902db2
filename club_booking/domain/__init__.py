"""
Capa de Dominio - Motor de disponibilidad y retenciones del club.

Esta capa contiene la lógica de negocio pura, sin dependencias de frameworks.

Estructura:
- entities/: Recursos, reservas, bloqueos, comprobantes e intentos de reserva
- value_objects/: Objetos de valor inmutables (Money, TimeSlot)
- calendar.py: Claves de día en la zona horaria local
- reservable.py: Capacidad polimórfica de ocupación por día
- pricing.py: Cálculo de precios
- errors.py: Excepciones específicas del dominio
- constants.py: Constantes del dominio
"""
