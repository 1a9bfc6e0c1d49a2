"""
Event Type Constants.

Standard event types for application-wide pub/sub messaging.

Usage:
    from historystore.core.events import Events, EventBus

    event_bus.subscribe(Events.HISTORY_PRUNED, on_pruned)
"""


class Events:
    """Standard event type constants for EventBus."""

    # History store changes
    HISTORY_VISIT_RECORDED = "history.visit_recorded"
    HISTORY_SITE_REMOVED = "history.site_removed"
    HISTORY_CLEARED = "history.cleared"
    HISTORY_PRUNED = "history.pruned"

    # Derived projections
    TOP_SITES_INVALIDATED = "top_sites.invalidated"

    # Config events - configuration changes
    CONFIG_CHANGED = "config.changed"
