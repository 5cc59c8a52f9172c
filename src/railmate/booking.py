"""Booking form validation."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import BookingValidationError, StationNotFoundError, TrainNotFoundError
from .models import Passenger, PaymentStatus, TicketDraft
from .registry import TrainRegistry

logger = logging.getLogger(__name__)

MAX_TICKETS = 6

PAYMENT_METHODS = ("card", "upi", "netbanking")


@dataclass
class PassengerForm:
    name: Optional[str] = None
    age: Optional[str] = None


@dataclass
class BookingForm:
    """Raw booking input as entered by the user; every field may be missing."""
    train_number: Optional[str] = None
    source_id: Optional[str] = None
    destination_id: Optional[str] = None
    passenger_name: Optional[str] = None
    passenger_age: Optional[str] = None
    phone_number: Optional[str] = None
    number_of_tickets: Optional[str] = "1"
    additional_passengers: List[PassengerForm] = field(default_factory=list)
    payment_method: Optional[str] = "card"

    def resize_passengers(self, number_of_tickets: int) -> None:
        """Grow or shrink the additional passenger rows to number_of_tickets - 1."""
        self.number_of_tickets = str(number_of_tickets)
        target = max(0, number_of_tickets - 1)
        while len(self.additional_passengers) < target:
            self.additional_passengers.append(PassengerForm())
        del self.additional_passengers[target:]


def _blank(value: Optional[str]) -> bool:
    return value is None or str(value).strip() == ""


def _parse_age(value: str, field_name: str, label: str) -> int:
    try:
        age = int(str(value).strip())
    except ValueError:
        raise BookingValidationError(field_name, f"Please enter a valid age for {label}")
    if age <= 0 or age > 120:
        raise BookingValidationError(field_name, f"Please enter a valid age for {label}")
    return age


def validate_booking(form: BookingForm, registry: TrainRegistry) -> TicketDraft:
    """
    Validate a booking form and build the ticket draft.

    Fields are checked in form order and the first problem is reported.

    Raises:
        BookingValidationError: For a missing or malformed field.
        TrainNotFoundError: If the train number is unknown.
        StationNotFoundError: If a station id is unknown.
    """
    required = [
        ("train_number", "train number"),
        ("source_id", "source station"),
        ("destination_id", "destination station"),
        ("passenger_name", "passenger name"),
        ("passenger_age", "passenger age"),
        ("phone_number", "phone number"),
    ]
    for field_name, label in required:
        if _blank(getattr(form, field_name)):
            raise BookingValidationError(field_name, f"Please fill the {label}")

    try:
        number_of_tickets = int(str(form.number_of_tickets).strip())
    except ValueError:
        raise BookingValidationError("number_of_tickets", "Please choose the number of tickets")
    if not 1 <= number_of_tickets <= MAX_TICKETS:
        raise BookingValidationError(
            "number_of_tickets", f"Number of tickets must be between 1 and {MAX_TICKETS}"
        )

    train_number = form.train_number.strip()
    train = registry.get_train_by_number(train_number)
    if train is None:
        raise TrainNotFoundError(train_number)

    source = registry.get_station(form.source_id)
    if source is None:
        raise StationNotFoundError(form.source_id)
    destination = registry.get_station(form.destination_id)
    if destination is None:
        raise StationNotFoundError(form.destination_id)
    if source.id == destination.id:
        raise BookingValidationError("destination_id", "Source and destination must differ")

    passenger_age = _parse_age(form.passenger_age, "passenger_age", "passenger 1")
    passengers = [Passenger(name=form.passenger_name.strip(), age=passenger_age)]

    additional = form.additional_passengers[: number_of_tickets - 1]
    if len(additional) < number_of_tickets - 1:
        missing = len(additional) + 2
        raise BookingValidationError(f"passenger_{missing}", f"Please fill details for passenger {missing}")

    for offset, extra in enumerate(additional):
        position = offset + 2
        if _blank(extra.name) or _blank(extra.age):
            raise BookingValidationError(f"passenger_{position}", f"Please fill details for passenger {position}")
        age = _parse_age(extra.age, f"passenger_{position}", f"passenger {position}")
        passengers.append(Passenger(name=extra.name.strip(), age=age))

    if form.payment_method and form.payment_method not in PAYMENT_METHODS:
        raise BookingValidationError("payment_method", f"Unsupported payment method {form.payment_method}")

    logger.debug(f"Validated booking for train {train.number} with {len(passengers)} passengers")

    return TicketDraft(
        train_number=train.number,
        train_name=train.name,
        source=source.name,
        destination=destination.name,
        passenger_name=passengers[0].name,
        passenger_age=passenger_age,
        departure_time=train.departure_time,
        arrival_time=train.arrival_time,
        phone_number=form.phone_number.strip(),
        passengers=tuple(passengers),
        number_of_tickets=number_of_tickets,
    )
