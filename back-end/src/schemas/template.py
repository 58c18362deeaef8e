from datetime import datetime

from pydantic import model_validator
from sqlmodel import Field, SQLModel

from schemas.base.template import TemplateBase
from utilities.enumerables import TemplateLayout
from utilities.fields_validator import reject_null_fields


class TemplatePublic(TemplateBase):
    id: int
    created_at: datetime
    updated_at: datetime | None


class TemplateCreate(TemplateBase):
    pass


class TemplateUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=3, max_length=50)

    category: str | None = Field(default=None, max_length=30)

    description: str | None = Field(default=None, max_length=250)

    color: str | None = Field(default=None, min_length=4, max_length=9)

    layout: TemplateLayout | None = Field(default=None)

    preview_image_url: str | None = Field(default=None)

    @model_validator(mode="before")
    @classmethod
    def _required_columns_cannot_be_cleared(cls, data):
        return reject_null_fields(data, ("name", "category", "color", "layout"))
