"""Hero banner schemas."""

from pydantic import Field

from collectibles.catalog.schemas import CamelModel


class HeroHeading(CamelModel):
    line1: str = Field(..., max_length=255)
    line2: str = Field(..., max_length=255)


class HeroContent(CamelModel):
    heading: HeroHeading
    paragraph: str = Field(..., max_length=5000)
