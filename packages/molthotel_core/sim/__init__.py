"""Party simulation for Molt Hotel."""

from .clock import Clock, ManualClock, SystemClock, TimerQueue
from .events import EventSink, NullEventSink, RecordingEventSink
from .hotel import HotelWorld, PendingReply
from .scheduler import PartyScheduler

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "TimerQueue",
    "EventSink",
    "NullEventSink",
    "RecordingEventSink",
    "HotelWorld",
    "PendingReply",
    "PartyScheduler",
]
