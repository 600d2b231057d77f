"""
Utilities for the orbit family computations.

- io: fixed-width text persistence of families and trajectories
"""

from .io import write_rows, write_family, read_family, family_file_paths, format_row

__all__ = [
    'write_rows',
    'write_family',
    'read_family',
    'family_file_paths',
    'format_row',
]
