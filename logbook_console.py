import argparse
import asyncio
import logging

from dotenv import load_dotenv

from logbook.actions import ActionContext, ActionRunner
from logbook.errors import ActionNotAvailable
from logbook.models import (
    BoatProfile, LogbookSettings, MooringType, Motor, NavZone, ReductionMode, Sail, SailKind, Trip, VesselState,
)
from logbook.services import situation_title
from logbook.tools import ConsoleOperator, InMemoryLogStore, SensorFeed, StaticPositionSource
from logbook.utils.data_transform import format_position

load_dotenv()


def default_boat(name: str) -> BoatProfile:
    """A classical sloop with one inboard motor, reefable main and furling genoa"""
    return BoatProfile(
        name=name,
        motors=[Motor(name="Main motor")],
        sails=[
            Sail(kind=SailKind.MAINSAIL, reduction_mode=ReductionMode.REEF, max_reduction=3),
            Sail(kind=SailKind.HEADSAIL, reduction_mode=ReductionMode.FURL, max_reduction=3),
        ]
    )


class LogbookConsole:
    """Interactive logbook session on the terminal"""

    def __init__(self, settings: LogbookSettings, trip_type: str, destination: str = None,
                 lat: float = 0.0, lon: float = 0.0):
        self.settings = settings
        self.store = InMemoryLogStore()

        trip = Trip(trip_type=trip_type, destination=destination)
        self.store.insert_trip(trip)

        self.vessel = VesselState(
            boat=default_boat(settings.boat_name),
            trip=trip,
            lat=lat,
            lon=lon,
            mooring=MooringType.MOORED_ON_SHORE,
            nav_zone=NavZone.HARBOUR
        )
        self.context = ActionContext(
            vessel=self.vessel,
            store=self.store,
            operator=ConsoleOperator(),
            settings=settings,
            position_source=StaticPositionSource([(lat, lon)]) if lat or lon else None,
            sensor_feed=SensorFeed()
        )
        self.runner = ActionRunner(self.context)

    def print_menu(self):
        menu = self.runner.available_actions()
        print("\n" + "=" * 50)
        print(f"🧭 {situation_title(menu.situation)} ({menu.situation.value})")
        print(f"📍 {format_position(self.vessel.lat, self.vessel.lon)}")
        print("=" * 50)
        print("Always available:")
        for definition in menu.global_bar:
            print(f"  {definition.tag.value:6} {definition.title}")
        print("Actions:")
        for definition in menu.contextual:
            marker = "❗" if definition.emphasised else "  "
            print(f"{marker}{definition.tag.value:6} {definition.title}")

    def print_log(self):
        entries = self.store.entries(self.vessel.trip.id)
        if not entries:
            print("  (no entries yet)")
        for entry in entries:
            print(f"  {entry.timestamp:%H:%M} {format_position(entry.lat, entry.lon)}  {entry.text.replace(chr(10), ' / ')}")

    async def run(self):
        print("Type an action tag, 'log' to show the log or 'quit' to leave.")
        while True:
            self.print_menu()
            try:
                command = (await asyncio.to_thread(input, "\naction> ")).strip()
            except EOFError:
                break

            if not command:
                continue
            if command.lower() in ("quit", "exit", "q"):
                break
            if command.lower() == "log":
                self.print_log()
                continue

            try:
                await self.runner.fire(command.upper())
            except ActionNotAvailable as e:
                print(f"❌ {e}")

        print(f"\n📒 {self.store.count()} log entries written")


def main():
    parser = argparse.ArgumentParser(description="Sailing trip logbook")
    parser.add_argument("--trip-type", default="Cruise", help="Kind of trip (default: Cruise)")
    parser.add_argument("--destination", type=str, help="Planned destination")
    parser.add_argument("--lat", type=float, default=0.0, help="Starting latitude")
    parser.add_argument("--lon", type=float, default=0.0, help="Starting longitude")
    parser.add_argument("--log-level", type=str, help="Override LOGBOOK_LOG_LEVEL")

    args = parser.parse_args()

    settings = LogbookSettings.from_env()
    if args.log_level:
        settings.log_level = args.log_level.upper()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO),
                        format="%(asctime)s %(name)s %(levelname)s %(message)s")

    print(f"⛵ Logbook for {settings.boat_name}")
    console = LogbookConsole(settings, args.trip_type, args.destination, args.lat, args.lon)
    asyncio.run(console.run())


if __name__ == "__main__":
    main()
