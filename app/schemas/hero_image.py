from pydantic import BaseModel


class HeroImageForm(BaseModel):
    """Text fields of the hero upload form after coercion."""
    title: str = ""
    subtitle: str = ""
    description: str = ""
    display_order: int = 0
    show_content: bool = False

    @classmethod
    def from_form(
        cls,
        title: str | None,
        subtitle: str | None,
        description: str | None,
        display_order: str | None,
        show_content: str | None,
    ) -> "HeroImageForm":
        """display_order falls back to 0 when not an integer; show_content is true only for "true"."""
        try:
            order = int((display_order or "").strip())
        except ValueError:
            order = 0
        return cls(
            title=title or "",
            subtitle=subtitle or "",
            description=description or "",
            display_order=order,
            show_content=show_content == "true",
        )


class HeroImageResponse(BaseModel):
    id: str
    file_name: str
    file_url: str
    title: str
    subtitle: str
    description: str
    display_order: int
    show_content: bool
    is_active: bool
    created_at: str
    updated_at: str


class HeroImageUploadResponse(BaseModel):
    success: bool = True
    image: HeroImageResponse
    message: str
