"""railmate - Train search, ticket booking, live tracking and destination alerts."""

__version__ = "0.1.0"

from .models import Station, Train, RoutePoint, Passenger, Ticket, TicketDraft, AlertSession, User
from .registry import TrainRegistry
from .search import search_trains
from .routes import generate_route
from .tracking import TrackingAnimator, TrackingState, TrackingUpdate
from .alerts import AlertManager, setup_alert
from .tickets import TicketStore
from .service import RailCompanion

__all__ = [
    "RailCompanion",
    "TrainRegistry",
    "TrackingAnimator",
    "TrackingState",
    "TrackingUpdate",
    "AlertManager",
    "TicketStore",
    "search_trains",
    "generate_route",
    "setup_alert",
    "Station",
    "Train",
    "RoutePoint",
    "Passenger",
    "Ticket",
    "TicketDraft",
    "AlertSession",
    "User",
]
