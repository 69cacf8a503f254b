from pydantic import BaseModel, Field, field_validator


class _PurchaseKey(BaseModel):
    email: str = Field(min_length=3, max_length=255)
    title: str = Field(min_length=1, max_length=255)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("title")
    @classmethod
    def normalize_title(cls, value: str) -> str:
        return value.strip()


class PasswordVerifyRequest(_PurchaseKey):
    password: str = Field(min_length=1, max_length=64)


class PasswordVerifyResponse(BaseModel):
    message: str
    download: str
    expires_in_seconds: int


class PasswordStatusRequest(_PurchaseKey):
    pass


class PasswordStatusResponse(BaseModel):
    has_password: bool
    message: str
