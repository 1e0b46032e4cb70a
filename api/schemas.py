"""Pydantic schemas for API request/response validation.

JSON bodies use camelCase keys. Python attributes stay snake_case and are
also accepted on input.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, ClassVar

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    PlainSerializer,
    field_validator,
)
from pydantic.alias_generators import to_camel

from models import OrderStatus, as_utc, utcnow

# Monetary amounts are exact decimals internally and JSON numbers on the wire
MoneyAmount = Annotated[
    Decimal,
    Field(max_digits=10, decimal_places=2),
    PlainSerializer(float, return_type=float, when_used="json"),
]

# Always rendered with an explicit UTC offset, whatever the backend returns
Timestamp = Annotated[datetime, AfterValidator(as_utc)]


def _required_text(value: str, required: str, max_length: int, too_long: str) -> str:
    """Reject blank text. The value is stored exactly as sent."""
    if not value.strip():
        raise ValueError(required)
    if len(value) > max_length:
        raise ValueError(too_long)
    return value


def _optional_text(value: str | None, max_length: int, too_long: str) -> str | None:
    if value is not None and len(value) > max_length:
        raise ValueError(too_long)
    return value


class CamelModel(BaseModel):
    """Base for API bodies: camelCase aliases, snake_case also accepted.

    required_messages and invalid_email_message replace pydantic's generic
    text in the 400 error map when a request body fails validation.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Absent or null field, keyed by wire name
    required_messages: ClassVar[dict[str, str]] = {}
    invalid_email_message: ClassVar[str] = "Invalid email format"


class CamelResponse(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# -----------------------------------------------------------------------------
# Departments
# -----------------------------------------------------------------------------


class DepartmentRequest(CamelModel):
    """Create or fully replace a department.

    is_active defaults to True on create. On update, leaving it out keeps the
    stored flag.
    """

    required_messages = {
        "name": "Department name is required",
        "code": "Department code is required",
    }

    name: str
    code: str
    description: str | None = None
    manager_name: str | None = None
    manager_email: str | None = None
    location: str | None = None
    budget: float | None = None
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _required_text(
            v,
            "Department name is required",
            100,
            "Department name must not exceed 100 characters",
        )

    @field_validator("code")
    @classmethod
    def validate_code(cls, v: str) -> str:
        return _required_text(
            v,
            "Department code is required",
            10,
            "Department code must not exceed 10 characters",
        )

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return _optional_text(v, 500, "Description must not exceed 500 characters")

    @field_validator("manager_name")
    @classmethod
    def validate_manager_name(cls, v: str | None) -> str | None:
        return _optional_text(v, 100, "Manager name must not exceed 100 characters")

    @field_validator("manager_email")
    @classmethod
    def validate_manager_email(cls, v: str | None) -> str | None:
        return _optional_text(v, 100, "Manager email must not exceed 100 characters")

    @field_validator("location")
    @classmethod
    def validate_location(cls, v: str | None) -> str | None:
        return _optional_text(v, 200, "Location must not exceed 200 characters")


class DepartmentResponse(CamelResponse):
    id: int
    name: str
    code: str
    description: str | None = None
    manager_name: str | None = None
    manager_email: str | None = None
    location: str | None = None
    budget: float | None = None
    is_active: bool
    created_at: Timestamp
    updated_at: Timestamp


# -----------------------------------------------------------------------------
# Employees
# -----------------------------------------------------------------------------


class EmployeeRequest(CamelModel):
    """Create or fully replace an employee."""

    required_messages = {
        "firstName": "First name is required",
        "lastName": "Last name is required",
        "email": "Email is required",
        "phoneNumber": "Phone number is required",
        "departmentId": "Department ID is required",
        "position": "Position is required",
        "hireDate": "Hire date is required",
    }
    invalid_email_message = "Email should be valid"

    first_name: str
    last_name: str
    email: EmailStr
    phone_number: str
    department_id: int
    position: str
    hire_date: date
    salary: float | None = None
    is_active: bool | None = None

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v: str) -> str:
        return _required_text(
            v,
            "First name is required",
            100,
            "First name must not exceed 100 characters",
        )

    @field_validator("last_name")
    @classmethod
    def validate_last_name(cls, v: str) -> str:
        return _required_text(
            v, "Last name is required", 100, "Last name must not exceed 100 characters"
        )

    @field_validator("phone_number")
    @classmethod
    def validate_phone_number(cls, v: str) -> str:
        return _required_text(
            v,
            "Phone number is required",
            50,
            "Phone number must not exceed 50 characters",
        )

    @field_validator("position")
    @classmethod
    def validate_position(cls, v: str) -> str:
        return _required_text(
            v, "Position is required", 100, "Position must not exceed 100 characters"
        )

    @field_validator("hire_date")
    @classmethod
    def validate_hire_date(cls, v: date) -> date:
        if v > utcnow().date():
            raise ValueError("Hire date cannot be in the future")
        return v


class EmployeeResponse(CamelResponse):
    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: str
    department_id: int
    position: str
    hire_date: date
    salary: float | None = None
    is_active: bool
    created_at: Timestamp
    updated_at: Timestamp


# -----------------------------------------------------------------------------
# Orders
# -----------------------------------------------------------------------------


class OrderItemRequest(CamelModel):
    """One line of an order. total_price defaults to quantity x unit_price."""

    product_id: int
    product_name: str | None = None
    quantity: int = Field(ge=1)
    unit_price: MoneyAmount = Field(ge=Decimal("0"))
    total_price: MoneyAmount | None = None

    @field_validator("product_name")
    @classmethod
    def validate_product_name(cls, v: str | None) -> str | None:
        return _optional_text(v, 100, "Product name must not exceed 100 characters")


class OrderItemResponse(CamelResponse):
    id: int
    product_id: int
    product_name: str | None = None
    quantity: int
    unit_price: MoneyAmount
    total_price: MoneyAmount


class OrderRequest(CamelModel):
    """Create or fully replace an order.

    order_number is generated when left out on create. When order_items is
    given, total_amount is recomputed from the items.
    """

    required_messages = {
        "customerName": "Customer name is required",
        "customerEmail": "Customer email is required",
        "totalAmount": "Total amount is required",
    }

    order_number: str | None = None
    customer_name: str
    customer_email: EmailStr
    total_amount: MoneyAmount
    status: OrderStatus | None = None
    shipping_address: str | None = None
    order_items: list[OrderItemRequest] | None = None

    @field_validator("order_number")
    @classmethod
    def validate_order_number(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _required_text(
            v,
            "Order number is required",
            50,
            "Order number must not exceed 50 characters",
        )

    @field_validator("customer_name")
    @classmethod
    def validate_customer_name(cls, v: str) -> str:
        return _required_text(
            v,
            "Customer name is required",
            100,
            "Customer name must not exceed 100 characters",
        )

    @field_validator("customer_email")
    @classmethod
    def validate_customer_email(cls, v: str) -> str:
        if len(v) > 100:
            raise ValueError("Customer email must not exceed 100 characters")
        return v

    @field_validator("shipping_address")
    @classmethod
    def validate_shipping_address(cls, v: str | None) -> str | None:
        return _optional_text(
            v, 500, "Shipping address must not exceed 500 characters"
        )


class OrderResponse(CamelResponse):
    id: int
    order_number: str
    customer_name: str
    customer_email: str
    total_amount: MoneyAmount
    status: OrderStatus
    shipping_address: str | None = None
    created_at: Timestamp
    updated_at: Timestamp
    order_items: list[OrderItemResponse] = Field(default_factory=list)


class OrderStatisticsResponse(CamelModel):
    """Order counts overall and per status.

    Each count is its own query, so the fields are not a consistent snapshot
    under concurrent writes.
    """

    total_orders: int
    pending_orders: int
    confirmed_orders: int
    shipped_orders: int
    delivered_orders: int
    cancelled_orders: int


# -----------------------------------------------------------------------------
# Products
# -----------------------------------------------------------------------------


class ProductRequest(CamelModel):
    """Create or fully replace a product. sku is generated when left out on create."""

    required_messages = {
        "name": "Product name is required",
        "price": "Product price is required",
        "quantity": "Product quantity is required",
    }

    name: str
    description: str | None = None
    price: MoneyAmount
    quantity: int
    category: str | None = None
    sku: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _required_text(
            v,
            "Product name is required",
            100,
            "Product name must not exceed 100 characters",
        )

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        return _optional_text(
            v, 500, "Product description must not exceed 500 characters"
        )

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Decimal) -> Decimal:
        if v < Decimal("0.01"):
            raise ValueError("Product price must be greater than 0")
        return v

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str | None) -> str | None:
        return _optional_text(v, 255, "Category must not exceed 255 characters")

    @field_validator("sku")
    @classmethod
    def validate_sku(cls, v: str | None) -> str | None:
        return _optional_text(v, 50, "SKU must not exceed 50 characters")


class ProductResponse(CamelResponse):
    id: int
    name: str
    description: str | None = None
    price: MoneyAmount
    quantity: int
    category: str | None = None
    sku: str | None = None
    created_at: Timestamp
    updated_at: Timestamp


# -----------------------------------------------------------------------------
# Operational
# -----------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str


class PoolStatusResponse(BaseModel):
    """Database connection pool status."""

    pool_size: int
    checked_out: int
    overflow: int
    checked_in: int


class DetailedHealthResponse(BaseModel):
    """Detailed health check response with component status."""

    status: str
    service: str
    database: bool
    pool: PoolStatusResponse | None = None


class InfoResponse(BaseModel):
    """Service identification."""

    service: str
    description: str
    version: str
