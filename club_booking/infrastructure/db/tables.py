from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
)

metadata = MetaData()

resources = Table(
    "resources",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("resource_type", String(16), nullable=False),
    Column("name", String(150), nullable=False, default=""),
    Column("category", String(100)),
    Column("min_capacity", Integer),
    Column("max_capacity", Integer),
    Column("member_price", Numeric(12, 2), nullable=False),
    Column("guest_price", Numeric(12, 2), nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("is_booked", Boolean, nullable=False, default=False),
    Column("is_reserved", Boolean, nullable=False, default=False),
    Column("on_hold", Boolean, nullable=False, default=False),
    Column("hold_expiry", DateTime),
    Column("hold_by", String(64)),
    Column("is_out_of_service", Boolean, nullable=False, default=False),
    Column("out_of_service_from", Date),
    Column("out_of_service_to", Date),
    Column("out_of_service_reason", String(500)),
    Column("version", Integer, nullable=False, default=0),
    Index("ix_resources_type_category", "resource_type", "category", "id"),
    Index("ix_resources_hold_expiry", "on_hold", "hold_expiry"),
    Index("ix_resources_oos_window", "out_of_service_from", "out_of_service_to"),
)

bookings = Table(
    "bookings",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("resource_id", Integer, nullable=False),
    Column("member_id", String(64), nullable=False),
    Column("resource_type", String(16), nullable=False),
    Column("check_in", Date),
    Column("check_out", Date),
    Column("booking_date", Date),
    Column("end_date", Date),
    Column("time_slot", String(16)),
    Column("start_time", DateTime),
    Column("end_time", DateTime),
    # Primer y último día cubierto, para filtrar solapamientos por índice.
    Column("first_day", Date, nullable=False),
    Column("last_day", Date, nullable=False),
    Column("total_price", Numeric(12, 2), nullable=False),
    Column("pricing_tier", String(16), nullable=False),
    Column("payment_status", String(16), nullable=False),
    Column("paid_amount", Numeric(12, 2), nullable=False),
    Column("pending_amount", Numeric(12, 2), nullable=False),
    Column("number_of_guests", Integer),
    Column("number_of_adults", Integer),
    Column("number_of_children", Integer),
    Column("event_type", String(100)),
    Column("special_requests", String(1000)),
    Column("attempt_id", String(64)),
    Column("created_at", DateTime),
    Index("ix_bookings_resource_days", "resource_id", "first_day", "last_day"),
    Index("ix_bookings_attempt", "attempt_id"),
    Index("ix_bookings_member", "member_id", "resource_type"),
)

reservations = Table(
    "reservations",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("resource_id", Integer, nullable=False),
    Column("reserved_from", Date, nullable=False),
    Column("reserved_to", Date, nullable=False),
    Column("time_slot", String(16)),
    Column("remarks", String(500)),
    Index("ix_reservations_resource_days", "resource_id", "reserved_from", "reserved_to"),
)

payment_vouchers = Table(
    "payment_vouchers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("booking_id", Integer, nullable=False),
    Column("resource_type", String(16), nullable=False),
    Column("member_id", String(64), nullable=False),
    Column("amount", Numeric(12, 2), nullable=False),
    Column("voucher_type", String(16), nullable=False),
    Column("payment_mode", String(16), nullable=False),
    Column("status", String(16), nullable=False),
    Column("invoice_id", String(64)),
    Column("remarks", String(500)),
    Column("issued_at", DateTime),
)

booking_attempts = Table(
    "booking_attempts",
    metadata,
    Column("attempt_id", String(64), primary_key=True),
    Column("member_id", String(64), nullable=False),
    Column("resource_type", String(16), nullable=False),
    Column("resource_ids", JSON, nullable=False),
    Column("draft", JSON, nullable=False),
    Column("state", String(32), nullable=False),
    Column("hold_expires_at", DateTime),
    Column("invoice_id", String(64)),
    Column("total_price", Numeric(12, 2), nullable=False),
    Column("booking_ids", JSON, nullable=False),
    Column("failure_code", String(64)),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
    Index("ix_booking_attempts_state_expiry", "state", "hold_expires_at"),
)
