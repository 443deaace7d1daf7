"""Module resolution event system for observer pattern notifications."""

from gadgetrl.domain.events.event_types import ModuleEventType
from gadgetrl.domain.events.event import ModuleEvent
from gadgetrl.domain.events.observer import ModuleObserver
from gadgetrl.domain.events.emitter import ModuleEventEmitter
from gadgetrl.domain.events.stderr_observer import StderrEventObserver

__all__ = [
    "ModuleEventType",
    "ModuleEvent",
    "ModuleObserver",
    "ModuleEventEmitter",
    "StderrEventObserver",
]
