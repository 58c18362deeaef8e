from sqlmodel import Field, SQLModel

from utilities.enumerables import TemplateLayout


class TemplateBase(SQLModel):
    # min_length=3, max_length=50
    name: str = Field(min_length=3, max_length=50, unique=True, index=True)

    # free-form label, see TemplateCategory for the seeded values
    category: str = Field(index=True, max_length=30)

    # max_length=250
    description: str | None = Field(default=None, max_length=250)

    # hex accent color, e.g. "#003366"
    color: str = Field(min_length=4, max_length=9)

    layout: TemplateLayout = Field(default=TemplateLayout.STANDARD)

    preview_image_url: str | None = Field(default=None)
