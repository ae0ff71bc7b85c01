"""
Transfer package for moving price data between zip archives and the database.

The package is organized into:
- archive_handler: Reads and writes the zip envelope
- csv_reader: Parses and validates price CSV rows
- csv_writer: Serializes price records to CSV
- processors: Import and export pipelines
"""

from .archive_handler import extract, package
from .csv_reader import read_csv
from .csv_writer import write_csv
from .processors import import_archive, export_archive

__all__ = [
    "extract",
    "package",
    "read_csv",
    "write_csv",
    "import_archive",
    "export_archive",
]
