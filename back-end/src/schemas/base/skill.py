from sqlmodel import Field, SQLModel

from utilities.enumerables import SkillLevel


class SkillBase(SQLModel):
    # min_length=1, max_length=50
    name: str = Field(min_length=1, max_length=50, index=True)

    level: SkillLevel | None = Field(default=None)

    # grouping label, e.g. "Languages"; None renders under "General"
    category: str | None = Field(default=None, max_length=50, index=True)
