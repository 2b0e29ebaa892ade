"""Job file I/O layer for polykit.

This module handles reading batch job files and writing their results.
It keeps JSON handling out of the factories and the domain models.

Key classes:
- JobReader: Load and validate job files
- ResultWriter: Save factory output
"""

from polykit.io.reader import JobReader
from polykit.io.writer import ResultWriter

__all__ = [
    "JobReader",
    "ResultWriter",
]
