"""Route interpolation for tracking playback."""

from typing import List

from .models import RoutePoint, Station, Train

# Each station-to-station segment is split into this many equal steps
SEGMENT_DIVISIONS = 6


def route_stations(train: Train) -> List[Station]:
    """Ordered stations of a train: source, intermediates, destination."""
    return train.stations()


def _point(station: Station) -> RoutePoint:
    return RoutePoint(lat=station.latitude, lng=station.longitude)


def generate_route(train: Train) -> List[RoutePoint]:
    """
    Build a dense coordinate sequence for animating a train.

    Each segment A->B contributes A followed by the points
    A + (B - A) * k/6 for k = 1..5. The destination is appended once at
    the end, so the result holds 6 * segments + 1 points.

    Interpolation is linear in latitude/longitude, not geodesic.
    """
    stops = [_point(station) for station in route_stations(train)]
    route: List[RoutePoint] = []

    for start, end in zip(stops, stops[1:]):
        route.append(start)
        for k in range(1, SEGMENT_DIVISIONS):
            fraction = k / SEGMENT_DIVISIONS
            route.append(
                RoutePoint(
                    lat=start.lat + (end.lat - start.lat) * fraction,
                    lng=start.lng + (end.lng - start.lng) * fraction,
                )
            )

    route.append(stops[-1])
    return route
