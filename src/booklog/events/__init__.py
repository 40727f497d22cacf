"""Real-time catalog events."""

from .broadcaster import EventBroadcaster, Subscription
from .models import BOOK_ADDED, BookAddedEvent

__all__ = ["BOOK_ADDED", "BookAddedEvent", "EventBroadcaster", "Subscription"]
