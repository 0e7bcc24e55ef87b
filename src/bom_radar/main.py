# main.py
import argparse
import logging
import sys
import time
from typing import Callable, List, Optional
from .config import RadarConfig
from .context import AppContext, build_context
from .exceptions import BOMError, ConfigurationError
from .forecasters.willyweather_client import WillyWeatherClient
from .service import BOMService

def configure_logging(log_file: str) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout)
        ]
    )

class RadarWorker:
    """Runs refresh cycles forever on a fixed interval"""

    def __init__(self, context: AppContext, service: Optional[BOMService] = None,
                 sleep: Callable[[float], None] = time.sleep):
        self.context = context
        self.config = context.config
        self.service = service or BOMService(context)
        self.sleep = sleep
        self.logger = logging.getLogger(__name__)

        self.logger.info("RadarWorker initialized")

    def run(self, max_cycles: Optional[int] = None) -> None:
        """Main execution loop; the first cycle starts immediately"""
        self.logger.info("Starting RadarWorker main loop")
        cycles = 0

        while max_cycles is None or cycles < max_cycles:
            try:
                self.service.refresh_all()
                cycles += 1
                if max_cycles is not None and cycles >= max_cycles:
                    break

                self.logger.info(f"Waiting {self.config.refresh_interval_seconds}s before next cycle...")
                self.sleep(self.config.refresh_interval_seconds)

            except KeyboardInterrupt:
                self.logger.info("Received interrupt signal, shutting down...")
                break

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bom-radar",
        description="Cache BOM radar and satellite imagery and build timelapse gifs"
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--once", action="store_true", help="run a single refresh cycle")
    group.add_argument("--cleanup", action="store_true", help="delete expired cache entries")
    group.add_argument("--radar", metavar="ID", help="generate a radar gif, e.g. IDR703")
    group.add_argument("--satellite", metavar="ID", help="generate a satellite gif, e.g. IDE00416")
    group.add_argument("--background", metavar="ID", help="regenerate one radar base image")
    group.add_argument("--forecast", metavar="LOCATION_ID", help="print the WillyWeather forecast")
    parser.add_argument("--days", type=int, default=7, help="forecast days (default: 7)")
    return parser

def main(argv: Optional[List[str]] = None) -> int:
    """Entry point"""
    args = build_parser().parse_args(argv)
    config = RadarConfig()
    configure_logging(config.log_file)
    logger = logging.getLogger(__name__)

    if args.forecast:
        if not config.willyweather_api_key:
            print("oops: WILLYWEATHER_API_KEY is not set", file=sys.stderr)
            return 1
        try:
            days = WillyWeatherClient(config.willyweather_api_key).get_forecast(args.forecast, args.days)
        except BOMError as e:
            print(f"oops: {e}", file=sys.stderr)
            return 1
        for day in days:
            uv = f" UV {day.uv}" if day.uv is not None else ""
            print(f"{day.date_time[:10]}  {day.description}  {day.min}-{day.max}{uv}")
        return 0

    try:
        context = build_context(config)
    except ConfigurationError as e:
        logger.error(f"Configuration validation failed: {e}")
        return 1

    service = BOMService(context)

    try:
        if args.once:
            report = service.refresh_all()
            print(report)
            return 0 if report.ok else 1
        if args.cleanup:
            print(service.cleanup())
            return 0
        if args.radar:
            print(service.generate_radar_timelapse(args.radar).url)
            return 0
        if args.satellite:
            print(service.generate_satellite_timelapse(args.satellite).url)
            return 0
        if args.background:
            service.generate_background(args.background)
            return 0
    except BOMError as e:
        logger.error(f"Command failed: {e}")
        print(f"oops: {e}", file=sys.stderr)
        return 1

    RadarWorker(context, service).run()
    return 0

if __name__ == "__main__":
    sys.exit(main())
