"""
Event System - Unified Pub/Sub Messaging.

Provides:
- Signal: Simple observer pattern for sync notifications (e.g., config changes)
- EventBus: Unified pub/sub for async application-wide events
- Events: Standard event type constants for type-safe subscriptions
"""
from .observer import Signal
from .bus import EventBus
from .constants import Events


__all__ = ["Signal", "EventBus", "Events"]
