from typing import Any, Optional

from pydantic import BaseModel, Field


class SessionUser(BaseModel):
    """Caller as resolved by the marketplace /api/auth/me endpoint"""

    id: str
    email: str
    name: Optional[str] = None
    role: str = "USER"  # USER, VENDOR, ADMIN
    image: Optional[str] = None
    providerId: Optional[str] = None

    @property
    def first_name(self) -> str:
        if self.name and self.name.strip():
            return self.name.strip().split(" ")[0]
        return "there"

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"


class MessageResponse(BaseModel):
    message: str


class PageParams(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)


class PageMeta(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class RedirectResponse(BaseModel):
    success: bool = True
    redirectTo: Optional[str] = None
    data: Optional[dict[str, Any]] = None
