from sqlmodel import Field, SQLModel


class ResumeBase(SQLModel):
    # min_length=1, max_length=100
    title: str = Field(min_length=1, max_length=100)

    summary: str | None = Field(default=None)

    template_id: int | None = Field(default=None, foreign_key="template.id", ondelete="SET NULL")
