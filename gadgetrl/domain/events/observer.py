"""Module observer protocol."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from gadgetrl.domain.events.event import ModuleEvent


class ModuleObserver(Protocol):
    """Protocol for module resolution observers."""

    def on_event(self, event: "ModuleEvent") -> None:
        """Handle a module event. Must not throw or block."""
        ...
