"""
Configuration module for swath GCP computation.

Handles loading and validation of configuration from YAML files.
"""

import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ('csv', 'json')


@dataclass
class FilePaths:
    """Paths to input and output files."""
    tle: str  # TLE text file (2-line or 3-line records)
    timestamps: str  # Per-scanline timestamps (JSON, CSV or text)
    output: Optional[str] = None  # GCP output file


@dataclass
class Config:
    """
    Main configuration class for swath GCP computation.

    Attributes:
        projection: Projection model parameters, passed unchanged to the
            projection builder (must include a "type" key)
        files: Paths to input and output files
        tle_name: Satellite name or NORAD id to select from the TLE file
        output_format: 'csv' or 'json'
    """
    projection: Dict[str, Any]
    files: FilePaths
    tle_name: Optional[str] = None
    output_format: str = 'csv'

    @classmethod
    def from_yaml(cls, config_path: str) -> "Config":
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            Config object with loaded parameters

        Example YAML structure:
            projection:
              type: line_scanner
              image_width: 2048
              scan_angle: 110.0
              gcp_spacing_x: 64
              gcp_spacing_y: 64
              timestamp_offset: 0.0
              invert_scan: false
              roll_offset: 0.0
              pitch_offset: 0.0
              yaw_offset: 0.0
            tle_name: "METEOR-M2 3"
            output_format: csv
            files:
              tle: "weather.tle"
              timestamps: "timestamps.json"
              output: "gcps.csv"
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        logger.info(f"Loading configuration from {config_path}")

        if not isinstance(data, dict):
            raise ValueError(f"Configuration must be a mapping: {config_path}")

        projection = data.get('projection')
        if not isinstance(projection, dict):
            raise ValueError("Configuration has no 'projection' section")

        # Parse file paths
        files_data = data.get('files') or {}
        if not isinstance(files_data, dict):
            raise ValueError("Configuration 'files' section must be a mapping")
        for key in ('tle', 'timestamps'):
            if key not in files_data:
                raise ValueError(f"Configuration is missing files.{key}")

        # Resolve paths relative to config file location
        config_dir = path.parent

        output_path = files_data.get('output')
        if output_path:
            output_path = str(config_dir / output_path)

        files = FilePaths(
            tle=str(config_dir / files_data['tle']),
            timestamps=str(config_dir / files_data['timestamps']),
            output=output_path,
        )

        output_format = data.get('output_format', 'csv')
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unsupported output format: '{output_format}'. "
                f"Supported: {', '.join(OUTPUT_FORMATS)}"
            )

        tle_name = data.get('tle_name')

        return cls(
            projection=dict(projection),
            files=files,
            tle_name=str(tle_name) if tle_name is not None else None,
            output_format=output_format,
        )

    def to_yaml(self, config_path: str) -> None:
        """Save configuration to a YAML file."""
        data = {
            'projection': dict(self.projection),
            'tle_name': self.tle_name,
            'output_format': self.output_format,
            'files': {
                'tle': self.files.tle,
                'timestamps': self.files.timestamps,
                'output': self.files.output,
            },
        }

        with open(config_path, 'w') as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Configuration saved to {config_path}")
