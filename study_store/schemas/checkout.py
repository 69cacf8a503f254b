from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from study_store.services.pricing import CartLine


class CartItem(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    quantity: int = Field(default=1, ge=1, le=1000)

    @field_validator("title")
    @classmethod
    def normalize_title(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("This field is required")
        return cleaned

    def to_line(self) -> CartLine:
        return CartLine(title=self.title, price=self.price, quantity=self.quantity)


class CheckoutRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    cart: list[CartItem]

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class CheckoutResponse(BaseModel):
    message: str
    download: str
    passwords: dict[str, str]
    subtotal: Decimal
    tax: Decimal
    total: Decimal


class RecordPurchaseRequest(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    purchases: list[CartItem] = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()
