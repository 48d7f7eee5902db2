from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, condecimal, constr, field_validator

from club_booking.application.dtos import BookingRequestDTO, BookingUpdateDTO, PaymentConfirmationDTO
from club_booking.domain.entities.booking import PaymentStatus, PricingTier
from club_booking.domain.entities.resource import ResourceType
from club_booking.domain.entities.voucher import PaymentMode, VoucherStatus, VoucherType
from club_booking.domain.value_objects.time_slot import TimeSlot

Money = condecimal(max_digits=12, decimal_places=2)


class BookingInvoiceRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    member_id: constr(strip_whitespace=True, min_length=1, max_length=64)
    resource_type: ResourceType
    pricing_tier: PricingTier = PricingTier.MEMBER
    resource_id: int | None = None
    category: str | None = None
    number_of_units: int = Field(default=1, ge=1)

    check_in: date | None = None
    check_out: date | None = None
    booking_date: date | None = None
    end_date: date | None = None
    time_slot: TimeSlot | None = None
    start_time: datetime | None = None

    number_of_guests: int | None = Field(default=None, ge=0)
    number_of_adults: int = Field(default=1, ge=0)
    number_of_children: int = Field(default=0, ge=0)
    guest_name: str | None = None
    guest_contact: str | None = None
    event_type: str | None = None
    special_requests: str | None = Field(default=None, max_length=1000)

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, value: date | None, info: Any) -> date | None:
        booking_date = info.data.get("booking_date")
        if value and booking_date and value < booking_date:
            raise ValueError("end_date must be on or after booking_date")
        return value

    def to_dto(self) -> BookingRequestDTO:
        return BookingRequestDTO(**self.model_dump())


class BookingInvoiceResponse(BaseModel):
    model_config = ConfigDict(json_encoders={Decimal: lambda v: format(v, ".2f")})

    attempt_id: str
    invoice_id: str
    amount: Money
    currency_code: str
    due_at: datetime
    hold_expires_at: datetime
    resource_ids: list[int]
    payment_channels: list[str]
    consumer_number: str | None = None
    booking_draft: dict[str, Any]


class PaymentCallbackRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    booking_draft: dict[str, Any]
    invoice_id: str | None = None
    payment_status: PaymentStatus = PaymentStatus.PAID
    paid_amount: Money | None = None
    payment_mode: PaymentMode = PaymentMode.ONLINE
    transaction_ref: str | None = None

    def to_dto(self) -> PaymentConfirmationDTO:
        return PaymentConfirmationDTO(**self.model_dump())


class PaymentCallbackResponse(BaseModel):
    model_config = ConfigDict(json_encoders={Decimal: lambda v: format(v, ".2f")})

    attempt_id: str
    booking_ids: list[int]
    payment_status: PaymentStatus
    paid_amount: Money
    pending_amount: Money
    voucher_ids: list[int]
    already_confirmed: bool = False


class AttemptReleaseRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    member_id: constr(strip_whitespace=True, min_length=1, max_length=64)
    reason: str = "USER_CANCELLED"


class AttemptReleaseResponse(BaseModel):
    attempt_id: str
    state: str
    released_holds: int


class BookingUpdateRequest(BaseModel):
    """Campos omitidos conservan su valor actual."""

    model_config = ConfigDict(extra="forbid")

    member_id: constr(strip_whitespace=True, min_length=1, max_length=64) | None = None

    check_in: date | None = None
    check_out: date | None = None
    booking_date: date | None = None
    end_date: date | None = None
    time_slot: TimeSlot | None = None
    start_time: datetime | None = None

    pricing_tier: PricingTier | None = None
    number_of_guests: int | None = Field(default=None, ge=0)
    number_of_adults: int | None = Field(default=None, ge=0)
    number_of_children: int | None = Field(default=None, ge=0)
    guest_name: str | None = None
    guest_contact: str | None = None
    event_type: str | None = None
    special_requests: str | None = Field(default=None, max_length=1000)

    payment_status: PaymentStatus | None = None
    paid_amount: Money | None = Field(default=None, ge=0)
    payment_mode: PaymentMode = PaymentMode.CASH
    remarks: str | None = Field(default=None, max_length=500)

    def to_dto(self, booking_id: int) -> BookingUpdateDTO:
        return BookingUpdateDTO(booking_id=booking_id, **self.model_dump())


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, json_encoders={Decimal: lambda v: format(v, ".2f")})

    id: int
    resource_id: int
    member_id: str
    resource_type: ResourceType
    check_in: date | None = None
    check_out: date | None = None
    booking_date: date | None = None
    end_date: date | None = None
    time_slot: TimeSlot | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    total_price: Money
    pricing_tier: PricingTier
    payment_status: PaymentStatus
    paid_amount: Money
    pending_amount: Money
    number_of_guests: int | None = None
    number_of_adults: int | None = None
    number_of_children: int | None = None
    event_type: str | None = None
    special_requests: str | None = None


class BookingUpdateResponse(BaseModel):
    booking: BookingResponse
    voucher_ids: list[int]
    cancelled_vouchers: int


class VoucherResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, json_encoders={Decimal: lambda v: format(v, ".2f")})

    id: int
    booking_id: int
    resource_type: ResourceType
    member_id: str
    amount: Money
    voucher_type: VoucherType
    payment_mode: PaymentMode
    status: VoucherStatus
    invoice_id: str | None = None
    remarks: str | None = None
    issued_at: datetime | None = None
