"""Page content and version stamp models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


class PageContent(BaseModel):
    """Text of one stored revision of a page.

    ``redirect_target`` is set when the revision is a redirect to another page.
    """

    model_config = ConfigDict(frozen=True)

    page_name: str
    revision_id: int
    text: str
    redirect_target: str | None = None

    @property
    def is_redirect(self) -> bool:
        return self.redirect_target is not None


class VersionStamp(BaseModel):
    """Freshness marker for a page, compared by equality only."""

    model_config = ConfigDict(frozen=True)

    page_id: int
    revision_id: int
    length: int = 0
    touched: datetime | None = None

    @field_validator("revision_id")
    @classmethod
    def _revision_ge_1(cls, v: int) -> int:
        if v < 1:
            raise ValueError("revision_id must be >= 1")
        return v


# Page name -> stamp. A missing entry means the page has no known content.
TitleInfo = dict[str, VersionStamp]
