"""Module event payload model."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from gadgetrl.domain.events.event_types import ModuleEventType
from gadgetrl.domain.models.gating import GatingMode


class ModuleEvent(BaseModel):
    """Immutable event payload for module resolution notifications."""

    model_config = {"frozen": True}

    event_type: ModuleEventType
    bundle_id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    mode: GatingMode | None = None
    page: str | None = None
    batch_key: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
