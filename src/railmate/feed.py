"""GTFS-Realtime export of tracked train positions and destination alerts."""

import logging
import time
from typing import Iterable, Optional

from .models import AlertSession
from .tracking import TrackingState, TrackingUpdate

logger = logging.getLogger(__name__)

GTFS_REALTIME_VERSION = "2.0"


def _new_feed(timestamp: Optional[int]):
    try:
        from google.transit import gtfs_realtime_pb2
    except ImportError:
        logger.error("google.transit.gtfs_realtime_pb2 not installed")
        raise

    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = GTFS_REALTIME_VERSION
    feed.header.incrementality = gtfs_realtime_pb2.FeedHeader.FULL_DATASET
    feed.header.timestamp = int(time.time()) if timestamp is None else timestamp
    return feed, gtfs_realtime_pb2


def build_vehicle_feed(updates: Iterable[TrackingUpdate], timestamp: Optional[int] = None):
    """
    Build a FeedMessage with one VehiclePosition per tracked train.

    Updates without a train or position are skipped. The route id and
    vehicle id are the train number; current_stop_sequence is the route
    point index.
    """
    feed, pb2 = _new_feed(timestamp)

    for update in updates:
        if update.train_number is None or update.position is None:
            continue

        entity = feed.entity.add()
        entity.id = f"vehicle_{update.train_number}"

        vehicle = entity.vehicle
        vehicle.trip.route_id = update.train_number
        vehicle.vehicle.id = update.train_number
        vehicle.position.latitude = update.position.lat
        vehicle.position.longitude = update.position.lng
        vehicle.current_stop_sequence = update.index
        vehicle.timestamp = feed.header.timestamp
        if update.state == TrackingState.TRACKING:
            vehicle.current_status = pb2.VehiclePosition.IN_TRANSIT_TO
        else:
            vehicle.current_status = pb2.VehiclePosition.STOPPED_AT

    logger.debug(f"Built vehicle feed with {len(feed.entity)} entities")
    return feed


def build_alert_feed(sessions: Iterable[AlertSession], timestamp: Optional[int] = None):
    """Build a FeedMessage with one Alert per active destination alert."""
    feed, _ = _new_feed(timestamp)

    for session in sessions:
        if not session.active:
            continue

        entity = feed.entity.add()
        entity.id = f"alert_{session.train_number}_{len(feed.entity)}"

        alert = entity.alert
        informed = alert.informed_entity.add()
        informed.route_id = session.train_number
        alert.header_text.translation.add().text = f"Train {session.train_number} Approaching!"
        alert.description_text.translation.add().text = (
            f"Alert {session.minutes_before} minutes before arriving at {session.station_name}"
        )

    logger.debug(f"Built alert feed with {len(feed.entity)} entities")
    return feed


def serialize_feed(feed) -> bytes:
    return feed.SerializeToString()
