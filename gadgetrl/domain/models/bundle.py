"""Bundle (gadget definition) and page reference models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from gadgetrl.domain.constants import STYLE_PAGE_SUFFIX


class BundleType(str, Enum):
    """Type tag declared by a bundle definition."""

    STYLES = "styles"
    GENERAL = "general"


class LoadType(str, Enum):
    """How the loader should deliver a module built from a bundle."""

    STYLES = "styles"    # Stylesheet link, no script execution
    GENERAL = "general"  # Regular script module


class PageType(str, Enum):
    """Content kind of a page."""

    SCRIPT = "script"
    STYLE = "style"


class PageRef(BaseModel):
    """A page name together with its content kind."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: PageType

    @field_validator("name")
    @classmethod
    def _name_non_empty(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("page name must be non-empty")
        return v2

    @classmethod
    def from_name(cls, name: str) -> "PageRef":
        """Build a reference when only the page name is known.

        Pages ending in ``.css`` are styles; everything else is a script.
        """
        page_type = PageType.STYLE if name.endswith(STYLE_PAGE_SUFFIX) else PageType.SCRIPT
        return cls(name=name, type=page_type)


class Bundle(BaseModel):
    """A named collection of style and script pages plus loader metadata.

    Notes:
    - Strict: rejects unknown keys.
    - Page names must be unique across styles and scripts; order is kept.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    styles: tuple[str, ...] = ()
    scripts: tuple[str, ...] = ()
    supports_resource_loader: bool = False
    dependencies: tuple[str, ...] = ()
    targets: tuple[str, ...] = ()
    messages: tuple[str, ...] = ()
    type: BundleType = BundleType.GENERAL

    @field_validator("id")
    @classmethod
    def _id_non_empty(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("bundle id must be non-empty")
        return v2

    @model_validator(mode="after")
    def _pages_unique(self) -> "Bundle":
        seen: set[str] = set()
        for name in (*self.styles, *self.scripts):
            if name in seen:
                raise ValueError(f"Duplicate page in bundle '{self.id}': {name}")
            seen.add(name)
        return self

    @classmethod
    def placeholder(cls, bundle_id: str) -> "Bundle":
        """Empty bundle used when the real definition cannot be resolved.

        Built without validation: the id is kept exactly as requested, even
        when blank or padded, so the fallback itself can never fail.
        """
        return cls.model_construct(id=bundle_id)

    @property
    def page_names(self) -> list[str]:
        return [*self.styles, *self.scripts]


class BundleDefinition(BaseModel):
    """Raw bundle definition as supplied by a repository backend.

    Lists arrive as plain sequences; ``to_bundle`` normalizes them.
    """

    model_config = ConfigDict(extra="forbid")

    styles: list[str] = Field(default_factory=list)
    scripts: list[str] = Field(default_factory=list)
    resource_loader: bool = False
    dependencies: list[str] = Field(default_factory=list)
    targets: list[str] = Field(default_factory=list)
    messages: list[str] = Field(default_factory=list)
    type: BundleType = BundleType.GENERAL

    def to_bundle(self, bundle_id: str) -> Bundle:
        return Bundle(
            id=bundle_id,
            styles=tuple(self.styles),
            scripts=tuple(self.scripts),
            supports_resource_loader=self.resource_loader,
            dependencies=tuple(self.dependencies),
            targets=tuple(self.targets),
            messages=tuple(self.messages),
            type=self.type,
        )
