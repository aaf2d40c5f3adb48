#
# file:     errors.py
#
#  Exceptions raised while scanning an archive. Any of them aborts the whole
#  scan; no partial report is produced.
#

PATH_SEPARATOR = " -> "


class ScanError(Exception):
  """
  Base class for scan failures.

  `path_chain` lists the entry paths from the outermost archive down to the
  entry that failed, it grows as the error propagates out of nested archives.
  """

  def __init__(self, message, path=None):
    super().__init__(message)
    self.message = message
    self.path_chain = [path] if path is not None else []

  def nest(self, parent):
    """Record that the failure happened inside the nested archive `parent`."""
    self.path_chain.insert(0, parent)
    return self

  def __str__(self):
    if not self.path_chain:
      return self.message
    return f"{PATH_SEPARATOR.join(self.path_chain)}: {self.message}"


class LimitError(ScanError):
  """Nesting depth or byte budget exceeded."""


class ArchiveIOError(ScanError):
  """Opening, reading or stat-ing an entry failed."""


class ArchiveFormatError(ScanError):
  """A zip container is corrupt beyond simply not being a zip file."""
