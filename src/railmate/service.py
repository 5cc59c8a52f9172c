"""Main railmate facade."""

import dataclasses
import logging
from typing import Callable, List, Optional

from .accounts import AccountStore
from .alerts import AlertManager
from .booking import BookingForm, validate_booking
from .config import Settings
from .errors import StationNotFoundError, TrainNotFoundError
from .models import AlertSession, PaymentStatus, Station, Ticket, Train
from .notifications import Notifier
from .registry import TrainRegistry
from .routes import generate_route
from .scheduler import Scheduler, ThreadingScheduler
from .search import search_trains
from .storage import MemoryStorage, open_storage
from .tickets import TicketStore
from .tracking import TrackingAnimator, TrackingUpdate

logger = logging.getLogger(__name__)


class RailCompanion:
    """
    Train search, booking, live tracking and destination alerts.

    This class owns every component and is the only writer of the shared
    storage. It provides methods to:
    - Search trains and look them up by number
    - Book tickets and list the current user's bookings
    - Replay a train's route on a map-friendly position stream
    - Set and cancel a destination alert
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        storage: Optional[MemoryStorage] = None,
        scheduler: Optional[Scheduler] = None,
        notifier: Optional[Notifier] = None,
        registry: Optional[TrainRegistry] = None,
    ):
        """
        Initialize the companion.

        Args:
            settings: Runtime settings; defaults to Settings.from_env().
            storage: Key-value store; defaults to the one named by settings.storage_path.
            scheduler: Clock for tracking and alerts; defaults to a threading scheduler.
            notifier: Alert notification surface; defaults to logging.
            registry: Reference data; defaults to the built-in stations and trains.
        """
        self.settings = settings or Settings.from_env()
        self.storage = storage if storage is not None else open_storage(self.settings.storage_path)
        self.scheduler = scheduler or ThreadingScheduler()
        self.registry = registry or TrainRegistry()

        self.tickets = TicketStore(self.storage)
        self.accounts = AccountStore(self.storage)
        self.tracker = TrackingAnimator(self.scheduler, interval=self.settings.tracking_interval)
        self.alerts = AlertManager(
            self.scheduler,
            notifier=notifier,
            seconds_per_minute=self.settings.seconds_per_minute,
            countdown_tick=self.settings.countdown_tick,
        )

    # ------------------ search -----------------

    def search_trains(
        self,
        source: Optional[str] = None,
        destination: Optional[str] = None,
        name: Optional[str] = None,
        number: Optional[str] = None,
    ) -> List[Train]:
        """Trains matching every non-empty query, in registry order."""
        results = search_trains(self.registry.all_trains(), source, destination, name, number)
        logger.debug(f"Search matched {len(results)} trains")
        return results

    def get_train(self, number: str) -> Train:
        """
        Get a train by its exact number.

        Raises:
            TrainNotFoundError: If no train has that number.
        """
        train = self.registry.get_train_by_number(number.strip())
        if train is None:
            raise TrainNotFoundError(number.strip())
        return train

    def get_station(self, station_id: str) -> Station:
        """
        Raises:
            StationNotFoundError: If the id is unknown.
        """
        station = self.registry.get_station(station_id)
        if station is None:
            raise StationNotFoundError(station_id)
        return station

    def route_for(self, number: str):
        return generate_route(self.get_train(number))

    # ------------------ booking -----------------

    def book_ticket(self, form: BookingForm) -> Ticket:
        """
        Validate a booking form, simulate payment and persist the ticket.

        Raises:
            BookingValidationError, TrainNotFoundError, StationNotFoundError
        """
        draft = validate_booking(form, self.registry)
        draft = dataclasses.replace(draft, payment_status=PaymentStatus.PAID)
        return self.tickets.book(draft)

    def my_tickets(self) -> List[Ticket]:
        """Tickets booked with the current user's phone number."""
        user = self.accounts.current_user
        if user is None:
            return []
        return self.tickets.tickets_by_phone(user.phone)

    # ------------------ tracking -----------------

    def track_train(self, number: str) -> TrackingUpdate:
        """Load a train into the tracker (READY at its source station)."""
        train = self.get_train(number)
        self.tracker.load(train)
        return self.tracker.snapshot()

    def start_tracking(self) -> None:
        self.tracker.start()

    def stop_tracking(self) -> bool:
        return self.tracker.stop()

    def on_position(self, listener: Callable[[TrackingUpdate], None]) -> None:
        self.tracker.add_listener(listener)

    # ------------------ alerts -----------------

    def set_alert(
        self,
        train_number: str,
        station_id: str,
        minutes_before: int,
        on_fire: Optional[Callable[[AlertSession], None]] = None,
    ) -> AlertSession:
        """
        Set a destination alert for a train approaching a station.

        Raises:
            TrainNotFoundError, StationNotFoundError, AlertValidationError, AlertError
        """
        train = self.get_train(train_number)
        station = self.get_station(station_id)
        return self.alerts.set_alert(train.number, station.name, minutes_before, on_fire)

    def cancel_alert(self) -> bool:
        return self.alerts.cancel_alert()

    # ------------------ lifecycle -----------------

    def cleanup(self) -> None:
        """Cancel outstanding timers."""
        self.tracker.close()
        self.alerts.close()
        self.scheduler.shutdown()
        logger.info("Cleaned up railmate resources")
