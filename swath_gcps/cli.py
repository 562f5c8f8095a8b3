"""
Command-line interface for swath GCP computation.

Usage:
    gcp-compute config.yaml [--output OUTPUT] [--format {csv,json}]
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import Config, OUTPUT_FORMATS
from .gcp_compute import compute_gcps, save_gcps_csv, save_gcps_json
from .timestamps import load_timestamps
from .tle import load_tle


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def main(argv=None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description='Compute ground control points for a satellite swath image',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
    # Write GCPs next to the config file
    gcp-compute config.yaml

    # Custom output file and format
    gcp-compute config.yaml --output gcps.json --format json

    # Verbose output
    gcp-compute config.yaml -v
'''
    )

    parser.add_argument(
        'config',
        type=str,
        help='Path to YAML configuration file'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        default=None,
        help='Output file for GCPs (default: files.output, or gcps.<format> next to the config file)'
    )

    parser.add_argument(
        '--format', '-f',
        choices=OUTPUT_FORMATS,
        default=None,
        help='Output format (default: output_format from config)'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    args = parser.parse_args(argv)

    # Setup logging
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = Config.from_yaml(args.config)
        output_format = args.format or config.output_format

        # Determine output file
        if args.output:
            output_path = Path(args.output)
        elif config.files.output:
            output_path = Path(config.files.output)
        else:
            output_path = Path(args.config).parent / f'gcps.{output_format}'

        tle = load_tle(config.files.tle, config.tle_name)
        timestamps = load_timestamps(config.files.timestamps)
        logger.info(f"Using TLE for {tle.name}, {len(timestamps)} scanlines")

        gcps = compute_gcps(config.projection, tle, timestamps)

        output_path.parent.mkdir(parents=True, exist_ok=True)

        if output_format == 'json':
            save_gcps_json(gcps, str(output_path))
        else:
            save_gcps_csv(gcps, str(output_path))

        print("\n" + "=" * 60)
        print("GCP SUMMARY")
        print("=" * 60)
        print(f"Satellite:              {tle.name}")
        print(f"Scanlines:              {len(timestamps)}")
        print(f"GCPs:                   {len(gcps)}")
        if gcps:
            lons = [g.longitude for g in gcps]
            lats = [g.latitude for g in gcps]
            print(f"Longitude range:        {min(lons):.3f} to {max(lons):.3f}")
            print(f"Latitude range:         {min(lats):.3f} to {max(lats):.3f}")
        print(f"Output:                 {output_path}")
        print("=" * 60)

        return 0

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
