"""Stderr event observer for CLI integration."""

import click

from gadgetrl.domain.events.event import ModuleEvent


class StderrEventObserver:
    """Emits events as structured lines to stderr."""

    def on_event(self, event: ModuleEvent) -> None:
        """Emit event as structured line to stderr."""
        parts = [f"[EVENT] {event.event_type.value}", f"bundle={event.bundle_id}"]
        if event.mode:
            parts.append(f"mode={event.mode.value}")
        if event.page:
            parts.append(f"page={event.page}")
        if event.batch_key is not None:
            parts.append(f"batch={event.batch_key}")
        click.echo(" ".join(parts), err=True)
