"""Data models for railmate."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Station:
    """Represents a railway station."""
    id: str
    name: str
    code: str  # Short station code, e.g. "NDLS"
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Train:
    """Represents a scheduled train service."""
    id: str
    number: str  # Human-facing train number, e.g. "12301"
    name: str
    source: Station
    destination: Station
    intermediate_stations: Tuple[Station, ...]  # Ordered source -> destination
    departure_time: str  # "HH:MM"
    arrival_time: str  # "HH:MM"
    duration: str  # e.g. "15h 50m"

    def stations(self) -> List[Station]:
        """Source, intermediate stations in stored order, then destination."""
        return [self.source, *self.intermediate_stations, self.destination]


@dataclass(frozen=True)
class RoutePoint:
    """A single coordinate sample along a route."""
    lat: float
    lng: float


class PaymentStatus(str, Enum):
    PAID = "Paid"
    PENDING = "Pending"


@dataclass(frozen=True)
class Passenger:
    name: str
    age: int


@dataclass(frozen=True)
class TicketDraft:
    """Everything needed to book a ticket except the generated identifiers."""
    train_number: str
    train_name: str
    source: str
    destination: str
    passenger_name: str
    passenger_age: int
    departure_time: str
    arrival_time: str
    phone_number: str
    passengers: Tuple[Passenger, ...]
    number_of_tickets: int
    payment_status: PaymentStatus = PaymentStatus.PENDING
    seat_number: Optional[str] = None
    coach: Optional[str] = None


@dataclass(frozen=True)
class Ticket:
    """An immutable booking record."""
    id: str
    train_number: str
    train_name: str
    source: str
    destination: str
    passenger_name: str
    passenger_age: int
    departure_time: str
    arrival_time: str
    ticket_number: str  # Display code, "TRN" + 6 digits
    payment_status: PaymentStatus
    phone_number: str
    passengers: Tuple[Passenger, ...]
    number_of_tickets: int
    seat_number: Optional[str] = None
    coach: Optional[str] = None

    @classmethod
    def from_draft(cls, draft: TicketDraft, ticket_id: str, ticket_number: str) -> "Ticket":
        return cls(
            id=ticket_id,
            train_number=draft.train_number,
            train_name=draft.train_name,
            source=draft.source,
            destination=draft.destination,
            passenger_name=draft.passenger_name,
            passenger_age=draft.passenger_age,
            departure_time=draft.departure_time,
            arrival_time=draft.arrival_time,
            ticket_number=ticket_number,
            payment_status=draft.payment_status,
            phone_number=draft.phone_number,
            passengers=tuple(draft.passengers),
            number_of_tickets=draft.number_of_tickets,
            seat_number=draft.seat_number,
            coach=draft.coach,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the persisted (camelCase) record layout."""
        data = {
            "id": self.id,
            "trainNumber": self.train_number,
            "trainName": self.train_name,
            "source": self.source,
            "destination": self.destination,
            "passengerName": self.passenger_name,
            "passengerAge": self.passenger_age,
            "departureTime": self.departure_time,
            "arrivalTime": self.arrival_time,
            "ticketNumber": self.ticket_number,
            "paymentStatus": self.payment_status.value,
            "phoneNumber": self.phone_number,
            "passengers": [{"name": p.name, "age": p.age} for p in self.passengers],
            "numberOfTickets": self.number_of_tickets,
        }
        if self.seat_number is not None:
            data["seatNumber"] = self.seat_number
        if self.coach is not None:
            data["coach"] = self.coach
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ticket":
        passengers = tuple(
            Passenger(name=p["name"], age=int(p["age"])) for p in data.get("passengers") or []
        )
        return cls(
            id=data["id"],
            train_number=data["trainNumber"],
            train_name=data.get("trainName", ""),
            source=data.get("source", ""),
            destination=data.get("destination", ""),
            passenger_name=data.get("passengerName", ""),
            passenger_age=int(data.get("passengerAge", 0)),
            departure_time=data.get("departureTime", ""),
            arrival_time=data.get("arrivalTime", ""),
            ticket_number=data["ticketNumber"],
            payment_status=PaymentStatus(data.get("paymentStatus", PaymentStatus.PENDING.value)),
            phone_number=data.get("phoneNumber", ""),
            passengers=passengers,
            number_of_tickets=int(data.get("numberOfTickets", len(passengers) or 1)),
            seat_number=data.get("seatNumber"),
            coach=data.get("coach"),
        )


@dataclass
class AlertSession:
    """The single pending destination alert of a UI session."""
    train_number: str
    station_name: str
    minutes_before: int
    active: bool
    remaining_countdown: int  # Whole seconds until the alert fires
    handle: Optional[Any] = field(default=None, repr=False)  # AlertHandle


@dataclass(frozen=True)
class User:
    """A registered user, without credentials."""
    id: str
    name: str
    email: str
    gender: str
    phone: str
    age: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "gender": self.gender,
            "phone": self.phone,
            "age": self.age,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            email=data["email"],
            gender=data.get("gender", ""),
            phone=data.get("phone", ""),
            age=int(data.get("age", 0)),
        )
