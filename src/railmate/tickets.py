"""Append-only ticket store."""

import logging
import random
import string
import time
from typing import List, Optional

import pandas as pd

from .models import Ticket, TicketDraft
from .storage import TICKETS_KEY, MemoryStorage

logger = logging.getLogger(__name__)

TICKET_NUMBER_PREFIX = "TRN"
MAX_NUMBER_ATTEMPTS = 20

_ID_ALPHABET = string.digits + string.ascii_lowercase


class TicketStore:
    """Books tickets and persists them under a single storage key."""

    def __init__(self, storage: MemoryStorage, rng: Optional[random.Random] = None):
        """
        Args:
            storage: Key-value store owning the ticket list.
            rng: Random source for identifiers (seedable in tests).
        """
        self.storage = storage
        self._rng = rng or random.Random()

    def book(self, draft: TicketDraft) -> Ticket:
        """Create a ticket from a draft, persist it and return it."""
        created = {}

        def append(records):
            records = self._valid_records(records)
            taken = {record.get("ticketNumber") for record in records}
            ticket = Ticket.from_draft(draft, self._new_id(), self._new_ticket_number(taken))
            created["ticket"] = ticket
            return list(records) + [ticket.to_dict()]

        self.storage.update(TICKETS_KEY, append, default=[])
        ticket = created["ticket"]
        logger.info(f"Booked ticket {ticket.ticket_number} on train {ticket.train_number}")
        return ticket

    def list_tickets(self) -> List[Ticket]:
        """Every readable ticket in booking order. Malformed records are logged and skipped."""
        tickets = []
        for record in self._valid_records(self.storage.get(TICKETS_KEY, [])):
            try:
                tickets.append(Ticket.from_dict(record))
            except (KeyError, TypeError, ValueError) as e:
                logger.error(f"Skipping malformed ticket record {record.get('id')!r}: {e!r}")
        return tickets

    def tickets_by_phone(self, phone_number: str) -> List[Ticket]:
        """Tickets whose phone number matches exactly."""
        return [ticket for ticket in self.list_tickets() if ticket.phone_number == phone_number]

    def find_by_ticket_number(self, ticket_number: str) -> Optional[Ticket]:
        for ticket in self.list_tickets():
            if ticket.ticket_number == ticket_number:
                return ticket
        return None

    def summary_frame(self) -> pd.DataFrame:
        """One row per booking, for reporting."""
        columns = [
            "ticket_number",
            "train_number",
            "train_name",
            "source",
            "destination",
            "passenger_name",
            "phone_number",
            "number_of_tickets",
            "payment_status",
        ]
        rows = [
            {
                "ticket_number": t.ticket_number,
                "train_number": t.train_number,
                "train_name": t.train_name,
                "source": t.source,
                "destination": t.destination,
                "passenger_name": t.passenger_name,
                "phone_number": t.phone_number,
                "number_of_tickets": t.number_of_tickets,
                "payment_status": t.payment_status.value,
            }
            for t in self.list_tickets()
        ]
        return pd.DataFrame(rows, columns=columns)

    def _new_id(self) -> str:
        suffix = "".join(self._rng.choice(_ID_ALPHABET) for _ in range(7))
        return f"ticket_{int(time.time() * 1000)}_{suffix}"

    def _new_ticket_number(self, taken) -> str:
        for _ in range(MAX_NUMBER_ATTEMPTS):
            number = f"{TICKET_NUMBER_PREFIX}{self._rng.randint(100000, 999999)}"
            if number not in taken:
                return number
            logger.debug(f"Ticket number {number} already issued, drawing again")
        raise RuntimeError("Could not allocate a unique ticket number")

    @staticmethod
    def _valid_records(records) -> List[dict]:
        if not isinstance(records, list):
            logger.error(f"Stored tickets are a {type(records).__name__}, not a list; ignoring them")
            return []
        return [record for record in records if isinstance(record, dict)]
