from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

SectionType = Literal["hero", "features", "pricing", "testimonials", "cta", "faq", "footer"]
ColorPalette = Literal["violet", "ocean", "sunset", "forest", "midnight", "electric", "rose", "aurora"]
DesignStyle = Literal["glassmorphic", "gradient", "minimal", "bold", "dark"]


class WireModel(BaseModel):
    """Base for models exchanged with the chat layer as camelCase JSON."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class SectionStyleOverride(WireModel):
    palette: ColorPalette | None = None
    style: DesignStyle | None = None
    custom_background: str | None = Field(default=None, alias="customBackground")


class Section(WireModel):
    type: SectionType
    props: Dict[str, Any] = Field(default_factory=dict)
    style_override: SectionStyleOverride | None = Field(default=None, alias="styleOverride")


class Theme(WireModel):
    primary_color: str = Field(alias="primaryColor")
    secondary_color: str = Field(alias="secondaryColor")
    font: str
    palette: ColorPalette
    style: DesignStyle


class PageMetadata(WireModel):
    title: str
    description: str
    og_image: str | None = Field(default=None, alias="ogImage")


class Document(WireModel):
    sections: List[Section] = Field(default_factory=list)
    theme: Theme
    metadata: PageMetadata

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "sections": [
                    {
                        "type": "hero",
                        "props": {
                            "headline": "Transform Your Business Today",
                            "ctaText": "Get Started Free",
                            "ctaLink": "/signup",
                            "variant": "centered",
                        },
                    }
                ],
                "theme": {
                    "primaryColor": "#7c3aed",
                    "secondaryColor": "#4f46e5",
                    "font": "Inter",
                    "palette": "violet",
                    "style": "glassmorphic",
                },
                "metadata": {
                    "title": "Acme",
                    "description": "The all-in-one platform that helps you grow faster",
                },
            }
        },
    )

    def to_wire(self) -> dict[str, Any]:
        # Full dump: patch paths must resolve even for fields left at their defaults.
        return self.model_dump(mode="json", by_alias=True)


__all__ = [
    "ColorPalette",
    "DesignStyle",
    "Document",
    "PageMetadata",
    "Section",
    "SectionStyleOverride",
    "SectionType",
    "Theme",
    "WireModel",
]
