from pydantic import EmailStr
from typing import Optional

from .base import CamelModel


class UserCreate(CamelModel):
    first_name: str = ""
    last_name: str = ""
    username: str = ""
    email: EmailStr
    password: str = ""  # Raw password, will be hashed before storage
    city: Optional[str] = None


class UserLogin(CamelModel):
    username: str = ""
    password: str = ""


class UserUpdate(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    city: Optional[str] = None


class UserResponse(CamelModel):
    id: int
    first_name: str
    last_name: str
    username: str
    email: str
    city: Optional[str] = None
    role: str


class Token(CamelModel):
    token: str


class CurrentUser(CamelModel):
    """The authenticated principal carried by the access token."""
    user_id: int
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
