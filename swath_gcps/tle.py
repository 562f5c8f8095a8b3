"""
TLE (Two-Line Element) file parser.

Parses orbital element sets in the NORAD two-line format, with or without
a leading name line (the "3LE" variant distributed by CelesTrak, or by
Space-Track with a "0 " prefix on the name line).

    Example:
        METEOR-M2 3
        1 57166U 23091A   24127.50000000  .00000123  00000+0  70000-4 0  9990
        2 57166  98.7000 180.0000 0005000  90.0000 270.0000 14.23000000 45670

The element lines are not checked here; SGP4 interprets them when the
projection model is built.
"""

from pathlib import Path
from typing import List, Optional
from dataclasses import dataclass
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TLE:
    """A single two-line element set."""
    name: str
    line1: str
    line2: str

    @property
    def norad_id(self) -> int:
        """NORAD catalog number from line 1 (columns 3-7)."""
        return int(self.line1[2:7])


def parse_tle_lines(lines: List[str]) -> List[TLE]:
    """
    Parse TLE records from a list of text lines.

    Args:
        lines: Raw lines (blank lines are ignored)

    Returns:
        List of TLE records in file order. Records without a name line
        are named after their NORAD catalog number.
    """
    lines = [line.rstrip() for line in lines if line.strip()]
    tles = []
    name = None

    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith('1 ') and i + 1 < len(lines) and lines[i + 1].startswith('2 '):
            record_name = name if name is not None else line[2:7].strip()
            tles.append(TLE(name=record_name, line1=line, line2=lines[i + 1]))
            name = None
            i += 2
        else:
            # Space-Track 3LE files prefix the name line with "0 "
            name = line[2:].strip() if line.startswith('0 ') else line.strip()
            i += 1

    return tles


def parse_tle_file(filepath: str) -> List[TLE]:
    """
    Parse all TLE records in a file.

    Args:
        filepath: Path to TLE text file

    Returns:
        List of TLE records
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"TLE file not found: {filepath}")

    with open(path, 'r') as f:
        tles = parse_tle_lines(f.readlines())

    logger.info(f"Parsed {len(tles)} TLE records from {filepath}")
    return tles


def load_tle(filepath: str, name: Optional[str] = None) -> TLE:
    """
    Load a single TLE from a file.

    Args:
        filepath: Path to TLE text file
        name: Satellite name or NORAD id to select (case-insensitive).
            If omitted the first record is returned.

    Returns:
        Selected TLE record

    Raises:
        ValueError: If the file has no TLE records or the name is not found
    """
    tles = parse_tle_file(filepath)
    if not tles:
        raise ValueError(f"No TLE records in {filepath}")

    if name is None:
        return tles[0]

    wanted = name.strip().upper()
    for tle in tles:
        if tle.name.upper() == wanted or tle.line1[2:7].strip() == wanted:
            return tle

    raise ValueError(f"TLE '{name}' not found in {filepath}")
