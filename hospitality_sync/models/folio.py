"""Pydantic models for folio (billing) responses."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from hospitality_sync.models.common import EntityId


class FolioCharge(BaseModel):
    """Posted charge line."""

    id: EntityId
    charge_type: Optional[str] = Field(None, alias="chargeType")
    description: str = ""
    quantity: float = 1
    unit_price: Optional[float] = Field(None, alias="unitPrice")
    amount: float = 0.0
    charge_date: Optional[datetime] = Field(None, alias="chargeDate")

    class Config:
        extra = "allow"
        populate_by_name = True


class FolioPayment(BaseModel):
    """Recorded payment."""

    id: EntityId
    amount: float = 0.0
    payment_method: Optional[str] = Field(None, alias="paymentMethod")
    reference: Optional[str] = None
    received_at: Optional[datetime] = Field(None, alias="receivedAt")

    class Config:
        extra = "allow"
        populate_by_name = True


class Folio(BaseModel):
    """Billing aggregate for one booking.

    ``balance`` is whatever the server reports; it is never recomputed from
    ``total_amount`` and ``paid_amount`` on this side.
    """

    id: EntityId
    folio_number: Optional[str] = Field(None, alias="folioNumber")
    booking_id: Optional[EntityId] = Field(None, alias="bookingId")
    status: Optional[str] = None
    total_amount: float = Field(default=0.0, alias="totalAmount")
    paid_amount: float = Field(default=0.0, alias="paidAmount")
    balance: float = 0.0
    charges: list[FolioCharge] = Field(default_factory=list)
    payments: list[FolioPayment] = Field(default_factory=list)

    class Config:
        extra = "allow"
        populate_by_name = True

    @property
    def has_balance_due(self) -> bool:
        return self.balance > 0


class CheckOutPayment(BaseModel):
    """Payment submitted together with a check-out."""

    payment_method: Literal["cash", "card"] = Field(default="cash", alias="paymentMethod")
    payment_amount: float = Field(default=0.0, alias="paymentAmount", ge=0)
    payment_reference: Optional[str] = Field(None, alias="paymentReference")

    class Config:
        populate_by_name = True

    @field_validator("payment_amount", mode="before")
    @classmethod
    def parse_amount(cls, v):
        """Accept the raw text typed into an amount field; blank means 0."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return 0.0
            try:
                return float(v)
            except ValueError:
                return 0.0
        return v

    def to_request(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
