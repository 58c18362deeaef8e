from pydantic import EmailStr
from sqlmodel import Field, SQLModel

from utilities.enumerables import UserAccountStatus, UserRole


class UserBase(SQLModel):
    # used as the login name
    email: EmailStr = Field(unique=True, index=True)

    role: UserRole = Field(default=UserRole.USER)

    account_status: UserAccountStatus = Field(default=UserAccountStatus.ACTIVE)
