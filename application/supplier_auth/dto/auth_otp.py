from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _coerce_text(value):
    """JSON numbers are read as text; any other non-string counts as missing so the service answers 400."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if value is None or isinstance(value, str):
        return value
    return None


class GenerateOTPRequest(CamelModel):
    """Request model for requesting OTP. Phone is checked by the service so a bad value answers 400."""
    phone: Optional[str] = Field(None, description="Phone number in any human-entered format")

    @field_validator("phone", mode="before")
    def coerce_phone(cls, phone):
        return _coerce_text(phone)


class GenerateOTPResponse(CamelModel):
    """Response model for OTP request"""
    success: bool
    message: str
    otp: Optional[str] = Field(None, description="Raw code, echoed only outside production")


class VerifyOTPRequest(CamelModel):
    """Request model for validating OTP"""
    phone: Optional[str] = Field(None, description="Phone number used when requesting the code")
    otp: Optional[str] = Field(None, description="6-digit OTP code")
    device_info: Optional[str] = Field(None, description="Client descriptor, defaults to the User-Agent header")

    @field_validator("phone", "otp", mode="before")
    def coerce_text_fields(cls, value):
        return _coerce_text(value)


class PublicUser(CamelModel):
    """Projection of a user safe to hand to clients"""
    id: str
    phone: str
    email: Optional[str] = None
    company_name: str = ""
    profile_completed: bool = False
    has_supplier_data: bool = False
    supplier_id: Optional[str] = None

    @classmethod
    def from_user(cls, user) -> "PublicUser":
        return cls(
            id=user.id,
            phone=user.phone,
            email=user.email,
            company_name=user.company_name or "",
            profile_completed=bool(user.profile_completed),
            has_supplier_data=bool(user.supplier_id),
            supplier_id=user.supplier_id,
        )


class VerifyOTPResponse(CamelModel):
    """Response model for OTP validation"""
    success: bool
    message: str
    token: str
    user: PublicUser


class VerifyTokenResponse(CamelModel):
    success: bool
    message: str
    user: Optional[PublicUser] = None


class LogoutResponse(CamelModel):
    success: bool = True
    message: str = "Logged out successfully"
