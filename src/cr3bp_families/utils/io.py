"""
Plain-text persistence of orbit families.

Every file written here uses the same convention: one line per row, every
field left-justified in a column of fixed width, in scientific notation with
as many significant digits as needed to round-trip a float64.
"""

import logging
import os
from pathlib import Path

import numpy as np

from cr3bp_families.config import FIELD_WIDTH, ROUND_TRIP_DIGITS

logger = logging.getLogger(__name__)

FIELD_FORMAT = f"%-{FIELD_WIDTH}.{ROUND_TRIP_DIGITS - 1}e"

INITIAL_CONDITIONS_COLUMNS = 44
DIFFERENTIAL_CORRECTION_COLUMNS = 9


def format_row(values):
    """Format one row of numbers as a single fixed-width line (without newline)."""
    return "".join(FIELD_FORMAT % float(v) for v in values)


def write_rows(path, rows):
    """
    Write rows of numbers to a text file, replacing any existing file.

    Parameters
    ----------
    path : str or Path
        Destination file; missing parent directories are created.
    rows : iterable of array_like
        Rows to write, one line each.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        os.remove(path)
    with open(path, "w", encoding="utf8") as handle:
        for row in rows:
            handle.write(format_row(row) + "\n")


def family_file_paths(libration_point, orbit_type, output_dir):
    """
    Paths of the two files of a (libration point, orbit type) pair.

    Returns
    -------
    tuple of Path
        (initial conditions file, differential correction file)
    """
    label = getattr(orbit_type, "value", orbit_type)
    stem = f"L{libration_point}_{label}"
    output_dir = Path(output_dir)
    return (output_dir / f"{stem}_initial_conditions.txt",
            output_dir / f"{stem}_differential_correction.txt")


def write_family(family, libration_point, orbit_type, output_dir):
    """
    Write an orbit family and its correction diagnostics.

    Parameters
    ----------
    family : OrbitFamily
        Accumulated members and correction records, equal in number.
    libration_point : int
        Libration point index (1 or 2)
    orbit_type : OrbitType or str
        Orbit type, used in the file names
    output_dir : str or Path
        Directory receiving the two files

    Returns
    -------
    tuple of Path
        The two files written.
    """
    if len(family.members) != len(family.records):
        raise ValueError(
            f"Family has {len(family.members)} members but {len(family.records)} correction records")

    conditions_path, corrections_path = family_file_paths(libration_point, orbit_type, output_dir)
    write_rows(conditions_path, (member.as_row() for member in family.members))
    write_rows(corrections_path, (record.as_row() for record in family.records))

    logger.info("Wrote %d orbits to %s", len(family.members), conditions_path)
    return conditions_path, corrections_path


def read_family(libration_point, orbit_type, output_dir):
    """
    Load the two files written by write_family.

    Returns
    -------
    initial_conditions : ndarray
        Array of shape (n, 44): energy, period, initial state, monodromy
    differential_corrections : ndarray
        Array of shape (n, 9): iterations, half-period energy, half-period time,
        half-period state
    """
    conditions_path, corrections_path = family_file_paths(libration_point, orbit_type, output_dir)
    initial_conditions = np.loadtxt(conditions_path, ndmin=2)
    differential_corrections = np.loadtxt(corrections_path, ndmin=2)

    if initial_conditions.size == 0:
        initial_conditions = initial_conditions.reshape(0, INITIAL_CONDITIONS_COLUMNS)
    if differential_corrections.size == 0:
        differential_corrections = differential_corrections.reshape(0, DIFFERENTIAL_CORRECTION_COLUMNS)
    return initial_conditions, differential_corrections
