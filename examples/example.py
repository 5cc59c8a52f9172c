"""Example usage of RailCompanion."""

import logging
import sys
import threading
import time
from pathlib import Path

# Add src to path so we can import railmate
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from railmate.config import Settings
from railmate.service import RailCompanion
from railmate.tracking import TrackingState, format_remaining

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def print_train(train):
    print(f"\n{train.number} - {train.name}")
    print(f"  From: {train.source.name} ({train.source.code})  {train.departure_time}")
    print(f"  To:   {train.destination.name} ({train.destination.code})  {train.arrival_time}")
    print(f"  Duration: {train.duration}")
    if train.intermediate_stations:
        print(f"  Via: {', '.join(s.name for s in train.intermediate_stations)}")


def track(companion: RailCompanion, train_number: str):
    """
    Replay a train's route and print each position until it arrives.

    Args:
        companion: RailCompanion instance.
        train_number: Train number (e.g., "12301").
    """
    print(f"\n{'='*70}")
    print(f"Tracking train: {train_number}")
    print(f"{'='*70}")

    # Simulate lookup latency
    time.sleep(companion.settings.search_delay)
    companion.track_train(train_number)
    print_train(companion.tracker.train)

    finished = threading.Event()

    def on_update(update):
        if update.position is not None:
            print(
                f"  [{update.index:3d}] {update.position.lat:8.4f}, {update.position.lng:8.4f}"
                f"  remaining {format_remaining(update.remaining_seconds)}"
            )
        if update.state == TrackingState.STOPPED:
            finished.set()

    companion.on_position(on_update)
    companion.start_tracking()
    try:
        finished.wait()
    except KeyboardInterrupt:
        companion.stop_tracking()
    print("\n" + "=" * 70 + "\n")


def interactive_mode(companion: RailCompanion):
    """
    Run in interactive mode, searching trains by free text.
    """
    print("railmate - Interactive Mode")
    print("Enter a train number, train name or station to search")
    print("(Type 'quit' to exit)\n")

    while True:
        try:
            user_input = input("Search (or 'quit'): ").strip()

            if user_input.lower() in ["quit", "q", "exit"]:
                print("Goodbye!")
                break

            if not user_input:
                continue

            results = (
                companion.search_trains(number=user_input)
                or companion.search_trains(name=user_input)
                or companion.search_trains(source=user_input)
                or companion.search_trains(destination=user_input)
            )
            if not results:
                print("No trains found")
                continue

            for train in results:
                print_train(train)
            print()

        except KeyboardInterrupt:
            print("\n\nGoodbye!")
            break
        except Exception as e:
            logger.error(f"Error: {e}", exc_info=True)
            print(f"Error: {e}")


if __name__ == "__main__":
    companion = RailCompanion(settings=Settings.from_env())
    try:
        if len(sys.argv) > 1:
            # Command line mode: pass train number as argument
            try:
                track(companion, sys.argv[1])
            except ValueError as e:
                print(f"Error: {e}")
                sys.exit(1)
        else:
            interactive_mode(companion)
    finally:
        companion.cleanup()
