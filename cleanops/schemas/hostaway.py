"""Hostaway API payloads (only the fields the sync uses)."""
from datetime import date, datetime, time, timezone
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


def _coerce_id(v):
    if v is None or isinstance(v, str):
        return v
    return str(v)


def _parse_stay_datetime(v):
    """Hostaway sends arrival/departure as 'YYYY-MM-DD'; naive values are UTC."""
    if isinstance(v, str):
        v = v.strip()
        if len(v) == 10:
            return datetime.combine(date.fromisoformat(v), time.min, tzinfo=timezone.utc)
    if isinstance(v, date) and not isinstance(v, datetime):
        return datetime.combine(v, time.min, tzinfo=timezone.utc)
    return v


class ListingDTO(BaseModel):
    id: str
    name: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    property_type: str | None = Field(None, validation_alias=AliasChoices("propertyTypeName", "propertyType"))
    bedrooms: int | None = Field(None, validation_alias=AliasChoices("bedrooms", "bedroomsNumber"))
    bathrooms: float | None = Field(None, validation_alias=AliasChoices("bathrooms", "bathroomsNumber"))

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, v):
        return _coerce_id(v)

    class Config:
        extra = "ignore"


class ReservationDTO(BaseModel):
    id: str
    listing_map_id: str | None = Field(None, validation_alias=AliasChoices("listingMapId", "listing_map_id"))
    guest_name: str | None = Field(None, validation_alias=AliasChoices("guestName", "guest_name"))
    guest_email: str | None = Field(None, validation_alias=AliasChoices("guestEmail", "guest_email"))
    guest_phone: str | None = Field(None, validation_alias=AliasChoices("guestPhone", "guest_phone"))
    arrival_date: datetime = Field(validation_alias=AliasChoices("arrivalDate", "arrival_date"))
    departure_date: datetime = Field(validation_alias=AliasChoices("departureDate", "departure_date"))
    # Optional hour-of-day for date-only arrival/departure values
    check_in_time: int | None = Field(None, ge=0, le=23, validation_alias=AliasChoices("checkInTime", "check_in_time"))
    check_out_time: int | None = Field(None, ge=0, le=23, validation_alias=AliasChoices("checkOutTime", "check_out_time"))
    number_of_guests: int | None = Field(None, validation_alias=AliasChoices("numberOfGuests", "number_of_guests"))
    status: str | None = None
    total_price: Decimal | None = Field(None, validation_alias=AliasChoices("totalPrice", "total_price"))
    currency: str | None = None

    @field_validator("id", "listing_map_id", mode="before")
    @classmethod
    def normalize_ids(cls, v):
        return _coerce_id(v)

    @field_validator("arrival_date", "departure_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return _parse_stay_datetime(v)

    @field_validator("arrival_date", "departure_date")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)

    @model_validator(mode="after")
    def apply_stay_hours(self):
        if self.check_in_time is not None and self.arrival_date.time() == time.min:
            self.arrival_date = self.arrival_date.replace(hour=self.check_in_time)
        if self.check_out_time is not None and self.departure_date.time() == time.min:
            self.departure_date = self.departure_date.replace(hour=self.check_out_time)
        return self

    class Config:
        extra = "ignore"
