from datetime import date

from sqlmodel import Field, SQLModel


class ProfileBase(SQLModel):
    # max_length=100
    full_name: str | None = Field(default=None, max_length=100)

    email: str | None = Field(default=None)

    # max_length=100
    location: str | None = Field(default=None, max_length=100)

    birth_date: date | None = Field(default=None)

    avatar_url: str | None = Field(default=None)
