# File: src/parkhub/main.py
"""
Command line entry point for the Parking Reservation Backend

    parkhub init-db
    parkhub list-areas [--page N] [--size N] [--sort asc|desc] [--query TEXT] [--field address|city|name]
    parkhub search-cars --long LON --lat LAT [--page N] [--size N]

Configuration comes from the environment (see AppConfig.from_env).
"""

import argparse
import logging
import sys
from typing import List, Optional

from .application.dtos import ErrorResponseDTO
from .application.exceptions import ParkHubError
from .application.service_factory import ServiceFactory, ServiceRegistry
from .config import AppConfig, configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="parkhub", description="Parking reservation backend")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Create the database schema")

    areas = commands.add_parser("list-areas", help="List parking areas sorted by address")
    areas.add_argument("--page", type=int, default=0)
    areas.add_argument("--size", type=int, default=10)
    areas.add_argument("--sort", default="asc", help="asc or desc")
    areas.add_argument("--query", default=None, help="Case-insensitive substring")
    areas.add_argument("--field", default=None, help="address, city or name")

    cars = commands.add_parser("search-cars", help="Partner cars closest to a position")
    cars.add_argument("--long", dest="longitude", type=float, required=True)
    cars.add_argument("--lat", dest="latitude", type=float, required=True)
    cars.add_argument("--page", type=int, default=0)
    cars.add_argument("--size", type=int, default=10)

    return parser


class ParkHubApplication:
    """Main application controller that sets up all components"""

    def __init__(self, config: AppConfig, services: Optional[ServiceRegistry] = None):
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)
        self.services = services or ServiceFactory.create_services(config)

    def run(self, args: argparse.Namespace) -> str:
        """Execute one command and return its JSON output"""
        if args.command == "init-db":
            # The schema is created when the unit of work is built
            self.logger.info(f"Database ready at {self.config.database_url}")
            return '{"success": true}'

        if args.command == "list-areas":
            page = self.services.parking_areas.list_parking_areas(
                page=args.page,
                size=args.size,
                sort_direction=args.sort,
                search_query=args.query,
                search_field=args.field
            )
            return page.to_json(indent=2)

        if args.command == "search-cars":
            page = self.services.cars.search_cars_by_proximity(
                args.page, args.size, args.longitude, args.latitude
            )
            return page.to_json(indent=2)

        raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None, services: Optional[ServiceRegistry] = None) -> int:
    args = build_parser().parse_args(argv)

    config = AppConfig.from_env()
    configure_logging(config.log_level)

    try:
        app = ParkHubApplication(config, services)
        print(app.run(args))
        return 0
    except ParkHubError as e:
        error = ErrorResponseDTO(error=str(e), error_code=e.__class__.__name__)
        print(error.to_json(indent=2), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
