"""Detect activated vulnerable log4j (Log4Shell) inside Java Archives."""
from jarscan.errors import ArchiveFormatError, ArchiveIOError, LimitError, ScanError
from jarscan.jar import MAX_ZIP_DEPTH, MAX_ZIP_SIZE, Report, parse, parse_file

__version__ = "1.0.0"

__all__ = [
  "ArchiveFormatError",
  "ArchiveIOError",
  "LimitError",
  "MAX_ZIP_DEPTH",
  "MAX_ZIP_SIZE",
  "Report",
  "ScanError",
  "parse",
  "parse_file",
]
