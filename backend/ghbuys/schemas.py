"""
Pydantic request schemas for the public API.
"""
from decimal import Decimal
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, ValidationError, field_validator

from ghbuys.errors import ValidationFailed
from ghbuys.reference_data import CATEGORY_IDS, REGION_NAMES
from ghbuys.utils.ghana import is_valid_gps_code, is_valid_phone_number


def _ghana_phone(v: Optional[str], message: str) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not is_valid_phone_number(v):
        raise ValueError(message)
    return v


class ContactPerson(BaseModel):
    first_name: str = Field(..., min_length=2)
    last_name: str = Field(..., min_length=2)
    email: EmailStr
    phone: str
    role: str = "Owner"

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return _ghana_phone(v, "Invalid phone number format")


class VendorRegistration(BaseModel):
    """Vendor application submitted from the storefront."""

    # Basic information
    name: str = Field(..., min_length=2)
    description: Optional[str] = Field(default=None, min_length=10)
    business_email: EmailStr
    business_phone: str

    # Location
    region: str
    city: str = Field(..., min_length=2)
    address: str = Field(..., min_length=5)
    gps_coordinates: Optional[str] = None

    primary_category: str
    secondary_categories: List[str] = Field(default_factory=list)

    # Legal
    ghana_business_registration: str = Field(..., min_length=5)
    tin_number: Optional[str] = Field(default=None, min_length=10)
    vat_number: Optional[str] = None

    # Payouts
    bank_name: str = Field(..., min_length=2)
    account_number: str = Field(..., min_length=10)
    account_name: str = Field(..., min_length=2)
    mobile_money_number: Optional[str] = None
    mobile_money_provider: Optional[Literal["mtn", "vodafone", "airtel_tigo"]] = None

    # Store settings
    store_name: str = Field(..., min_length=2)
    store_description: Optional[str] = None
    offers_delivery: bool = True
    delivery_zones: List[str] = Field(..., min_length=1)
    delivery_fee: Decimal = Field(default=Decimal("5.00"), ge=0)

    contact_person: ContactPerson

    terms_accepted: bool
    privacy_accepted: bool

    @field_validator("business_phone")
    @classmethod
    def validate_business_phone(cls, v: str) -> str:
        return _ghana_phone(v, "Invalid Ghana phone number format")

    @field_validator("mobile_money_number")
    @classmethod
    def validate_mobile_money_number(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        return _ghana_phone(v, "Invalid mobile money number format")

    @field_validator("region")
    @classmethod
    def validate_region(cls, v: str) -> str:
        if v not in REGION_NAMES:
            raise ValueError(f"Region must be one of: {', '.join(REGION_NAMES)}")
        return v

    @field_validator("primary_category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        if v not in CATEGORY_IDS:
            raise ValueError(f"Category must be one of: {', '.join(CATEGORY_IDS)}")
        return v

    @field_validator("gps_coordinates")
    @classmethod
    def validate_gps(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        if not is_valid_gps_code(v):
            raise ValueError("Invalid GPS coordinates format")
        return v.strip()

    @field_validator("terms_accepted")
    @classmethod
    def validate_terms(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError("You must accept the terms and conditions")
        return v

    @field_validator("privacy_accepted")
    @classmethod
    def validate_privacy(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError("You must accept the privacy policy")
        return v


class VendorVerification(BaseModel):
    status: Literal["approved", "rejected", "suspended"]
    notes: str = Field(..., min_length=10)
    requirements: List[str] = Field(default_factory=list)


class PaymentInitializeRequest(BaseModel):
    email: EmailStr
    amount: Decimal = Field(..., gt=0)
    currency: str = "GHS"
    order_id: Optional[int] = None
    customer_name: Optional[str] = None
    phone: Optional[str] = None
    payment_method: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        return v.upper()


class MobileMoneyPaymentRequest(BaseModel):
    email: EmailStr
    amount: Decimal = Field(..., gt=0)
    phone: str
    provider: str
    currency: str = "GHS"
    order_id: Optional[int] = None
    customer_name: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        return v.upper()


class RefundRequest(BaseModel):
    amount: Optional[Decimal] = Field(default=None, gt=0)
    reason: Optional[str] = None


class OrderItemRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)


class OrderCreateRequest(BaseModel):
    customer_email: EmailStr
    customer_phone: Optional[str] = None
    customer_name: Optional[str] = None
    items: List[OrderItemRequest] = Field(..., min_length=1)
    delivery_address: Optional[dict] = None
    delivery_region: Optional[str] = None

    @field_validator("customer_phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        return _ghana_phone(v, "Invalid Ghana phone number format")


class OrderFulfillmentRequest(BaseModel):
    order_id: int
    action: str = Field(..., min_length=1)
    tracking_number: Optional[str] = None
    notes: Optional[str] = None


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=2)
    description: Optional[str] = None
    category: str
    subcategory: Optional[str] = None
    price: Decimal = Field(..., gt=0)
    stock: int = Field(default=0, ge=0)
    status: Literal["draft", "published", "archived"] = "draft"

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        if v not in CATEGORY_IDS:
            raise ValueError(f"Category must be one of: {', '.join(CATEGORY_IDS)}")
        return v


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = ""
    last_name: str = ""
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


def _field_errors(exc: ValidationError) -> list[dict]:
    out = []
    for e in exc.errors():
        msg = str(e.get("msg") or "")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        out.append({
            "field": ".".join(str(p) for p in e.get("loc") or ()),
            "message": msg,
        })
    return out


def parse_or_400(model: type[BaseModel], data: Any) -> Any:
    """Validate a JSON body, raising ValidationFailed with one entry per bad field."""
    try:
        return model.model_validate(data if data is not None else {})
    except ValidationError as e:
        raise ValidationFailed(_field_errors(e)) from e
