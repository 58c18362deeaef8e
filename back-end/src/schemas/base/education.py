from sqlmodel import Field, SQLModel


class EducationBase(SQLModel):
    # min_length=1, max_length=100
    institution: str = Field(min_length=1, max_length=100)

    # min_length=1, max_length=100
    degree: str = Field(min_length=1, max_length=100)

    field_of_study: str | None = Field(default=None, max_length=100)

    # "YYYY-MM" or "YYYY-MM-DD"
    start_date: str = Field(min_length=1, index=True)

    # must be null while current is true
    end_date: str | None = Field(default=None)

    current: bool = Field(default=False)

    description: str | None = Field(default=None)

    location: str | None = Field(default=None, max_length=100)
