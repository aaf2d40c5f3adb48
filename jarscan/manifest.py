#
# file:     manifest.py
#
#  Extracts Main-Class and Implementation-Version from a META-INF/MANIFEST.MF
#  stream.
#
import logging
from typing import NamedTuple, Optional

log = logging.getLogger(__name__)

MAIN_CLASS_KEY = b"Main-Class"
VERSION_KEY = b"Implementation-Version"


class ManifestInfo(NamedTuple):
  """Fields found in a manifest, None when the key never occurred."""
  main_class: Optional[str] = None
  version: Optional[str] = None


def _value(v):
  return v.decode("utf-8", "replace").strip()


def parse_manifest(fobj):
  """
  Scan `fobj` (binary, readable) line by line and return a ManifestInfo.

  Only simple `Key: value` lines count: lines without a colon and lines with
  a second colon in the value are skipped. The last occurrence of a key wins.
  Read errors are not caught.
  """
  main_class = version = None
  for line in fobj:
    line = line.rstrip(b"\n")
    if line.endswith(b"\r"):
      line = line[:-1]
    k, sep, v = line.partition(b":")
    if not sep or b":" in v:
      continue
    if k == MAIN_CLASS_KEY:
      main_class = _value(v)
    elif k == VERSION_KEY:
      version = _value(v)
  return ManifestInfo(main_class, version)
