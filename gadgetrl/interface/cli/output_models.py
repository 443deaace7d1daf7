from typing import Literal

from pydantic import BaseModel, Field


class BaseOutput(BaseModel):
    schema_version: int = 1
    command: Literal["list", "pages", "info", "content", "freshness"]
    exit_code: int
    error: str | None = None


class ListOutput(BaseOutput):
    command: Literal["list"] = "list"
    bundles: list[str] = Field(default_factory=list)


class PagesOutput(BaseOutput):
    command: Literal["pages"] = "pages"
    bundle_id: str
    pages: dict[str, str] = Field(default_factory=dict)


class InfoOutput(BaseOutput):
    command: Literal["info"] = "info"
    bundle_id: str
    placeholder: bool = False
    type: str | None = None
    group: str | None = None
    mode: str | None = None
    dependencies: list[str] = Field(default_factory=list)
    messages: list[str] = Field(default_factory=list)
    targets: list[str] = Field(default_factory=list)


class ContentOutput(BaseOutput):
    command: Literal["content"] = "content"
    bundle_id: str
    page: str
    mode: str | None = None
    # On missing content, revision_id is omitted and text is empty.
    revision_id: int | None = None
    text: str = ""


class StampSummary(BaseModel):
    """Version stamp of one page for freshness output."""
    page_id: int
    revision_id: int
    length: int
    touched: str | None = None


class FreshnessOutput(BaseOutput):
    command: Literal["freshness"] = "freshness"
    bundle_id: str
    mode: str | None = None
    batch_key: str | None = None
    stamps: dict[str, StampSummary] = Field(default_factory=dict)
    missing: list[str] = Field(default_factory=list)
