"""
Scanline timestamp loader.

One timestamp per image row, in Unix seconds (UTC). Row order is file order.

Supported formats:
    - JSON: a plain array, or an object with a "timestamps" array
    - CSV: a "timestamp" column, or `line,timestamp` / `timestamp` rows
    - Text: one value per line, or whitespace-delimited `line timestamp`

A value of -1 marks a scanline without a usable time; it is kept in place
so that row indices stay aligned with the image.
"""

import json
from pathlib import Path
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

INVALID_TIMESTAMP = -1.0


class TimestampFileParser:
    """
    Parser for per-scanline timestamp files.

    Lines that cannot be parsed are recorded as INVALID_TIMESTAMP rather
    than dropped, since every row of the image needs an entry.
    """

    def parse_file(self, filepath: str) -> List[float]:
        """
        Parse a timestamp file.

        Args:
            filepath: Path to the timestamp file

        Returns:
            List of timestamps, one per scanline
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Timestamp file not found: {filepath}")

        if path.suffix.lower() == '.json':
            timestamps = self._parse_json(path)
        else:
            timestamps = self._parse_text(path)

        invalid = sum(1 for t in timestamps if t == INVALID_TIMESTAMP)
        logger.info(f"Parsed {len(timestamps)} scanline timestamps from {filepath}")
        if invalid:
            logger.warning(f"{invalid} scanlines have no valid timestamp")
        return timestamps

    def _parse_json(self, path: Path) -> List[float]:
        with open(path, 'r') as f:
            data = json.load(f)

        if isinstance(data, dict):
            if 'timestamps' not in data:
                raise ValueError(f"No 'timestamps' array in {path}")
            data = data['timestamps']

        if not isinstance(data, list):
            raise ValueError(f"Expected a timestamp array in {path}")

        return [self._to_float(value) for value in data]

    def _parse_text(self, path: Path) -> List[float]:
        timestamps: List[float] = []
        column = None
        first = True

        with open(path, 'r') as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()

                # Skip empty lines and comments
                if not line or line.startswith('#'):
                    continue

                # Try comma-separated first, then space-separated
                if ',' in line:
                    parts = [p.strip() for p in line.split(',')]
                else:
                    parts = line.split()

                # Only the first data line can be a header
                if first:
                    first = False
                    if self._is_header(parts):
                        lowered = [p.lower() for p in parts]
                        column = lowered.index('timestamp') if 'timestamp' in lowered else len(parts) - 1
                        continue

                idx = column if column is not None else len(parts) - 1
                if idx >= len(parts):
                    logger.warning(f"Missing timestamp on line {line_num}: {line}")
                    timestamps.append(INVALID_TIMESTAMP)
                    continue

                timestamps.append(self._to_float(parts[idx], line_num))

        return timestamps

    def _is_header(self, parts: List[str]) -> bool:
        """A header names a timestamp column, or is several non-numeric fields."""
        if 'timestamp' in [p.lower() for p in parts]:
            return True
        return len(parts) > 1 and not any(self._is_number(p) for p in parts)

    @staticmethod
    def _is_number(text: str) -> bool:
        try:
            float(text)
        except ValueError:
            return False
        return True

    @staticmethod
    def _to_float(value, line_num: Optional[int] = None) -> float:
        try:
            return float(value)
        except (TypeError, ValueError):
            where = f" on line {line_num}" if line_num is not None else ""
            logger.warning(f"Invalid timestamp{where}: {value!r}")
            return INVALID_TIMESTAMP


def load_timestamps(filepath: str) -> List[float]:
    """
    Convenience function to load scanline timestamps.

    Args:
        filepath: Path to timestamp file (.json, .csv or text)

    Returns:
        List of timestamps, one per scanline
    """
    parser = TimestampFileParser()
    return parser.parse_file(filepath)
