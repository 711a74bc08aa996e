#!/usr/bin/env python3

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from metgen.config import MetgenConfig
from metgen.errors import MetgenError
from metgen.models.station import RawLocation, Region
from metgen.pipeline import MetarGenerator
from metgen.weather.normalizer import SchemaKind

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='metgen',
        description='Generate a METAR for an airport, coordinates or place name',
    )
    parser.add_argument('location', nargs='?',
                        help='ICAO code, "lat,lon" pair or place name')
    where = parser.add_mutually_exclusive_group()
    where.add_argument('--icao', help='ICAO station code')
    where.add_argument('--coords', nargs=2, type=float, metavar=('LAT', 'LON'),
                       help='Decimal degree coordinates')
    where.add_argument('--place', help='Place name to geocode')
    parser.add_argument('--ident', help='Station identifier to use for coordinates or a place')
    parser.add_argument('--extended', action='store_true',
                        help='Use the extended (One Call) schema and add trend remarks')
    parser.add_argument('--region', choices=[r.value for r in Region],
                        help='Force a reporting convention')
    parser.add_argument('-c', '--config', help='JSON config file')
    parser.add_argument('--airports', help='Airport reference CSV')
    parser.add_argument('--prefer-observed', action='store_true',
                        help='Use the real METAR when the station has one')
    parser.add_argument('--json', action='store_true', help='Print the report as JSON')
    parser.add_argument('-v', '--verbose', action='store_true', help='Verbose output')
    return parser


def location_from_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> RawLocation:
    if args.icao:
        return RawLocation.icao(args.icao)
    if args.coords:
        return RawLocation.coordinates(args.coords[0], args.coords[1], identifier=args.ident)
    if args.place:
        return RawLocation.text(args.place, identifier=args.ident)
    if args.location:
        return RawLocation.parse(args.location, identifier=args.ident)
    parser.error('a location is required (LOCATION, --icao, --coords or --place)')


def config_from_args(args: argparse.Namespace) -> MetgenConfig:
    config = MetgenConfig.load(args.config)
    overrides = {}
    if args.extended:
        overrides['schema'] = SchemaKind.EXTENDED
    if args.region:
        overrides['region'] = Region(args.region)
    if args.airports:
        overrides['airports_csv'] = Path(args.airports)
    if args.prefer_observed:
        overrides['prefer_observed'] = True
    return replace(config, **overrides) if overrides else config


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    location = location_from_args(parser, args)
    try:
        config = config_from_args(args)
        generator = MetarGenerator.from_config(config)
    except (OSError, ValueError) as e:
        logger.error("Invalid configuration: %s", e)
        return 1

    try:
        report = generator.generate(location)
    except MetgenError as e:
        logger.error("METAR generation failed: %s", e)
        if args.json:
            print(json.dumps({'error': e.to_dict()}, indent=2), file=sys.stderr)
        else:
            print(str(e), file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(report.rendered_text)
    return 0


if __name__ == '__main__':
    sys.exit(main())
