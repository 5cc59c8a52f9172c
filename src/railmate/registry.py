"""Station and train reference data."""

import logging
from typing import Dict, List, Optional

import pandas as pd

from .errors import StationNotFoundError
from .models import Station, Train

logger = logging.getLogger(__name__)

# Built-in reference data: (id, name, code, latitude, longitude)
DEFAULT_STATIONS = [
    ("sta_1", "New Delhi Railway Station", "NDLS", 28.6419, 77.2194),
    ("sta_2", "Mumbai Central", "MMCT", 18.9712, 72.8246),
    ("sta_3", "Chennai Central", "MAS", 13.0827, 80.2707),
    ("sta_4", "Howrah Junction", "HWH", 22.5986, 88.3425),
    ("sta_5", "Bangalore City Junction", "SBC", 12.9784, 77.5731),
    ("sta_6", "Jaipur Junction", "JP", 26.9172, 75.8152),
    ("sta_7", "Ahmedabad Junction", "ADI", 23.0330, 72.5678),
    ("sta_8", "Hyderabad Deccan", "HYB", 17.3845, 78.4799),
    ("sta_9", "Pune Junction", "PUNE", 18.5285, 73.8740),
    ("sta_10", "Lucknow Charbagh", "LKO", 26.8333, 80.9167),
]

# (id, number, name, source, destination, intermediates, departure, arrival, duration)
DEFAULT_TRAINS = [
    ("trn_1", "12301", "Rajdhani Express", "sta_1", "sta_2", ["sta_7", "sta_9"], "16:25", "08:15", "15h 50m"),
    ("trn_2", "12259", "Shatabdi Express", "sta_1", "sta_6", [], "06:05", "10:35", "4h 30m"),
    ("trn_3", "12622", "Tamil Nadu Express", "sta_1", "sta_3", ["sta_8", "sta_5"], "22:30", "06:45", "32h 15m"),
    ("trn_4", "12802", "Purushottam Express", "sta_1", "sta_10", [], "21:25", "06:45", "9h 20m"),
    ("trn_5", "12314", "Sealdah Rajdhani", "sta_1", "sta_4", ["sta_10"], "16:30", "10:10", "17h 40m"),
    ("trn_6", "12951", "Mumbai Rajdhani", "sta_2", "sta_1", ["sta_7", "sta_6"], "17:00", "08:35", "15h 35m"),
    ("trn_7", "12028", "Shatabdi Express", "sta_2", "sta_9", [], "05:50", "08:40", "2h 50m"),
    ("trn_8", "12657", "Chennai Mail", "sta_3", "sta_8", [], "23:00", "13:15", "14h 15m"),
    ("trn_9", "12246", "Duronto Express", "sta_4", "sta_1", [], "20:05", "13:30", "17h 25m"),
    ("trn_10", "22691", "Rajdhani Express", "sta_5", "sta_8", [], "20:30", "07:10", "10h 40m"),
]

INTERMEDIATE_SEPARATOR = ";"


class TrainRegistry:
    """Indexes stations and trains for lookup by id, code, number and name."""

    def __init__(self, load_defaults: bool = True):
        """
        Initialize the registry.

        Args:
            load_defaults: If True, populate with the built-in stations and trains.
        """
        self.stations: Dict[str, Station] = {}
        self.stations_by_code: Dict[str, str] = {}  # upper-cased code -> station id
        self.trains: Dict[str, Train] = {}  # number -> train, insertion order is registry order

        if load_defaults:
            self.load_defaults()

    def load_defaults(self) -> None:
        """Load the built-in reference data."""
        for station_id, name, code, latitude, longitude in DEFAULT_STATIONS:
            self.add_station(Station(id=station_id, name=name, code=code, latitude=latitude, longitude=longitude))

        for train_id, number, name, source_id, dest_id, via, departure, arrival, duration in DEFAULT_TRAINS:
            self.add_train(self._build_train(train_id, number, name, source_id, dest_id, via, departure, arrival, duration))

        logger.info(f"Loaded {len(self.stations)} stations and {len(self.trains)} trains")

    def load_from_files(self, stations_path: str, trains_path: str) -> None:
        """
        Load reference data from CSV files.

        Args:
            stations_path: CSV with columns id,name,code,latitude,longitude
            trains_path: CSV with columns id,number,name,source_id,destination_id,
                intermediate_station_ids,departure_time,arrival_time,duration.
                Intermediate ids are separated by ';' and kept in file order.

        Raises:
            StationNotFoundError: If a train references an unknown station id.
            ValueError: If a train number appears twice.
        """
        logger.info("Loading reference data from local files")
        stations_df = pd.read_csv(stations_path, dtype={"id": str, "name": str, "code": str})
        trains_df = pd.read_csv(trains_path, dtype=str, keep_default_na=False)

        for row in stations_df.itertuples(index=False):
            self.add_station(
                Station(
                    id=row.id,
                    name=row.name,
                    code=row.code,
                    latitude=float(row.latitude),
                    longitude=float(row.longitude),
                )
            )

        for row in trains_df.itertuples(index=False):
            via = [s.strip() for s in row.intermediate_station_ids.split(INTERMEDIATE_SEPARATOR) if s.strip()]
            self.add_train(
                self._build_train(
                    row.id,
                    row.number,
                    row.name,
                    row.source_id,
                    row.destination_id,
                    via,
                    row.departure_time,
                    row.arrival_time,
                    row.duration,
                )
            )

        logger.info(f"Loaded {len(self.stations)} stations and {len(self.trains)} trains")

    def _build_train(self, train_id, number, name, source_id, dest_id, via, departure, arrival, duration) -> Train:
        return Train(
            id=train_id,
            number=number,
            name=name,
            source=self._require_station(source_id),
            destination=self._require_station(dest_id),
            intermediate_stations=tuple(self._require_station(s) for s in via),
            departure_time=departure,
            arrival_time=arrival,
            duration=duration,
        )

    def _require_station(self, station_id: str) -> Station:
        station = self.stations.get(station_id)
        if station is None:
            raise StationNotFoundError(station_id)
        return station

    def add_station(self, station: Station) -> None:
        self.stations[station.id] = station
        self.stations_by_code[station.code.upper()] = station.id

    def add_train(self, train: Train) -> None:
        if train.number in self.trains:
            raise ValueError(f"Duplicate train number {train.number}")
        self.trains[train.number] = train

    def get_station(self, station_id: str) -> Optional[Station]:
        """Get station by id, or None."""
        return self.stations.get(station_id)

    def get_station_by_code(self, code: str) -> Optional[Station]:
        """Get station by code (case-insensitive), or None."""
        station_id = self.stations_by_code.get(code.strip().upper())
        return self.stations.get(station_id) if station_id else None

    def find_stations_by_name(self, name: str) -> List[Station]:
        """Find stations by name (partial, case-insensitive match)."""
        name_lower = name.lower()
        return [s for s in self.stations.values() if name_lower in s.name.lower()]

    def get_train_by_number(self, number: str) -> Optional[Train]:
        """Get train by its exact number, or None."""
        return self.trains.get(number)

    def all_stations(self) -> List[Station]:
        return list(self.stations.values())

    def all_trains(self) -> List[Train]:
        return list(self.trains.values())

    def clear(self) -> None:
        """Clear all loaded data."""
        self.stations.clear()
        self.stations_by_code.clear()
        self.trains.clear()
        logger.info("Cleared reference data")
