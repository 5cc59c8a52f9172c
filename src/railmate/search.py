"""Train search filtering."""

from typing import Callable, Iterable, List, Optional

from .models import Station, Train


def _normalize(query: Optional[str]) -> Optional[str]:
    if query is None or query.strip() == "":
        return None
    return query.lower()


def _station_matches(station: Station, query: str) -> bool:
    return query in station.name.lower() or query in station.code.lower()


def search_trains(
    trains: Iterable[Train],
    source_query: Optional[str] = None,
    destination_query: Optional[str] = None,
    name_query: Optional[str] = None,
    number_query: Optional[str] = None,
) -> List[Train]:
    """
    Filter trains by optional case-insensitive substring queries.

    Args:
        trains: Trains in registry order.
        source_query: Matched against source station name or code.
        destination_query: Matched against destination station name or code.
        name_query: Matched against the train name.
        number_query: Matched against the train number.

    Returns:
        Trains satisfying every non-empty query, in input order.
    """
    checks: List[Callable[[Train], bool]] = []

    source = _normalize(source_query)
    if source:
        checks.append(lambda t: _station_matches(t.source, source))

    destination = _normalize(destination_query)
    if destination:
        checks.append(lambda t: _station_matches(t.destination, destination))

    name = _normalize(name_query)
    if name:
        checks.append(lambda t: name in t.name.lower())

    number = _normalize(number_query)
    if number:
        checks.append(lambda t: number in t.number.lower())

    return [train for train in trains if all(check(train) for check in checks)]
