"""Resolver configuration model.

Config structure (.gadgetrl/config.yml):
    max_redirects: 1
    review_styles: false
    snapshot: .gadgetrl/site.yml
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from gadgetrl.domain.constants import DEFAULT_MAX_REDIRECTS


class ResolverConfig(BaseModel):
    """Settings shared by the content and title-info resolvers.

    Attributes:
        max_redirects: Redirect hops followed for unreviewed content
        review_styles: Whether style pages are gated like scripts
        snapshot: Site snapshot used by the development collaborators
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_redirects: int = Field(default=DEFAULT_MAX_REDIRECTS, ge=0)
    review_styles: bool = False
    snapshot: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ResolverConfig":
        """Build from a loaded config mapping, ignoring keys owned by other layers."""
        if not data:
            return cls()
        known = {k: v for k, v in data.items() if k in cls.model_fields}
        return cls.model_validate(known)
