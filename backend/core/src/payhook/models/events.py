"""Webhook event models.

The processor posts ``{"event": "charge.success", "data": {...}}``. Only the
envelope is parsed up front; the payment record inside ``data`` is parsed
once the event type is known to need it.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

CHARGE_SUCCESS = "charge.success"

# Documented custom fields and the placeholder used when a field is absent.
# variant_id deliberately has no placeholder: an order cannot be created
# without a fulfillable item.
FIELD_DEFAULTS: dict[str, Optional[str]] = {
    "product_title": "Unknown Product",
    "variant_id": None,
    "customer_name": "N/A",
    "phone": "N/A",
    "shipping_zone": "N/A",
    "address": "N/A",
    "shipping_fee": "0",
}


class IncomingEvent(BaseModel):
    """Envelope of a processor webhook delivery."""

    type: str = Field(
        ...,
        validation_alias=AliasChoices("event", "type"),
        description="Event type, e.g. charge.success",
    )
    data: Any = None

    @property
    def is_charge_success(self) -> bool:
        return self.type == CHARGE_SUCCESS


class Customer(BaseModel):
    """Paying customer as reported by the processor."""

    email: str
    customer_code: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None

    @property
    def full_name(self) -> Optional[str]:
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts) if parts else None


class MetadataField(BaseModel):
    """One named custom field attached to the checkout."""

    variable_name: str = ""
    display_name: Any = None
    value: Any = None


class Metadata(BaseModel):
    """Ordered custom fields with a total, first-match lookup."""

    fields: list[MetadataField] = Field(default_factory=list)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the value of the first field named ``name``.

        Matching is exact on ``variable_name``. A missing field, or a first
        match with an empty value, yields ``default``. Never raises.
        """
        for item in self.fields:
            if item.variable_name != name:
                continue
            if item.value is None or item.value == "":
                return default
            return item.value if isinstance(item.value, str) else str(item.value)
        return default

    def field(self, name: str) -> Optional[str]:
        """Look up a documented field, falling back to its documented default."""
        return self.get(name, FIELD_DEFAULTS.get(name))


class PaymentRecord(BaseModel):
    """Payment facts carried by a charge.success event.

    Amounts are in minor units (kobo for NGN).
    """

    reference: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0, description="Amount in minor units")
    currency: str = Field(default="NGN")
    customer: Customer
    metadata: Metadata = Field(default_factory=Metadata)
    paid_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("paid_at", "paidAt"),
    )

    @field_validator("metadata", mode="before")
    @classmethod
    def _unwrap_custom_fields(cls, value: Any) -> Any:
        # The processor sends an object with custom_fields, an empty string,
        # or nothing at all. Entries without a string variable_name are dropped.
        if isinstance(value, Metadata):
            return value
        if not isinstance(value, dict):
            return {"fields": []}
        custom_fields = value.get("custom_fields")
        if not isinstance(custom_fields, list):
            return {"fields": []}
        return {
            "fields": [
                f
                for f in custom_fields
                if isinstance(f, dict) and isinstance(f.get("variable_name", ""), str)
            ]
        }

    @property
    def customer_name(self) -> str:
        name = self.metadata.field("customer_name")
        if name and name != FIELD_DEFAULTS["customer_name"]:
            return name
        return self.customer.full_name or FIELD_DEFAULTS["customer_name"] or ""
