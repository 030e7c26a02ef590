"""
Live update fan-out: the revision clock and the broadcast hub.
"""

from realtime.revision import RevisionClock
from realtime.hub import BroadcastHub, EventTypes, Subscriber

__all__ = ["RevisionClock", "BroadcastHub", "EventTypes", "Subscriber"]
