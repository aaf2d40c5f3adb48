#
# file:     jar.py
#
#  Walks a Java Archive and every archive nested inside it, looking for an
#  activated vulnerable log4j (Log4Shell, CVE-2021-44228) without running any
#  of its code.
#
#  Example usage:
#      >>> from jarscan import parse_file
#      >>> parse_file("app.jar")
#      Report(vulnerable=True, main_class='com.example.Main', version='1.2.3')
#
import io
import os
import zlib
import logging
import zipfile
from typing import NamedTuple

from jarscan.checker import Checker
from jarscan.errors import ArchiveFormatError, ArchiveIOError, LimitError, ScanError
from jarscan.fsys import ROOT, DirFS, NoSelfListingFS, ZipFS
from jarscan.manifest import parse_manifest

log = logging.getLogger(__name__)

###########
# Limits. The size budget only applies to nested archives and the class files
# read inside them, the outermost archive can be larger.
MAX_ZIP_DEPTH = 16
MAX_ZIP_SIZE = 4 << 30  # 4GiB

###########
# Java Archive Extensions (nested archives are only opened with these)
ARCHIVE_EXTENSIONS = frozenset([".jar", ".war", ".ear", ".zip", ".jmod"])
CLASS_EXTENSION = ".class"
MANIFEST_PATH = "META-INF/MANIFEST.MF"

# What can go wrong reading a member of a (possibly hostile) zip file
READ_ERRORS = (OSError, EOFError, zlib.error, zipfile.BadZipFile, RuntimeError, NotImplementedError)


class Report(NamedTuple):
  # A vulnerable log4j is bundled and its JNDI lookup is present. 2.15.0
  # counts as vulnerable.
  vulnerable: bool
  # From META-INF/MANIFEST.MF. `version` is the archive's own version, NOT
  # the version of log4j.
  main_class: str
  version: str


def parse(fs):
  """
  Scan the archive behind the filesystem handle `fs` and return a Report.

  Raises a ScanError subclass when the archive can't be scanned completely.
  """
  checker = Checker()
  check_archive(checker, fs, 0, 0)
  return Report(checker.bad(), checker.main_class, checker.version)


def parse_file(path):
  """Scan a JAR (path or binary file object), or an extracted directory tree."""
  if isinstance(path, (str, os.PathLike)) and os.path.isdir(path):
    return parse(DirFS(path))
  name = os.fspath(path) if isinstance(path, (str, os.PathLike)) else getattr(path, "name", None)
  try:
    zfile = zipfile.ZipFile(path)
  except (zipfile.BadZipFile, ValueError) as e:
    # ValueError: undecodable member names among others
    raise ArchiveFormatError(f"not a zip archive: {e}", name) from e
  except OSError as e:
    raise ArchiveIOError(f"opening archive: {e}", name) from e
  with zfile:
    return parse(ZipFS(zfile))


def ext(path):
  """Extension of the last path element, including the dot."""
  i = path.rfind(".")
  if i < 0 or "/" in path[i:]:
    return ""
  return path[i:]


def check_archive(checker, fs, depth, size):
  """
  Walk `fs` feeding `checker`. `size` is the byte budget already used by the
  chain of archives this one is nested in.
  """
  if depth > MAX_ZIP_DEPTH:
    raise LimitError(f"reached max zip depth of {MAX_ZIP_DEPTH}")
  walk(checker, NoSelfListingFS(fs), ROOT, depth, size)


def read_dir(fs, dirname):
  try:
    return fs.read_dir(dirname)
  except READ_ERRORS as e:
    raise ArchiveIOError(f"reading directory: {e}", dirname) from e


def walk(checker, fs, dirname, depth, size):
  """Visit the entries below `dirname` in lexical order, depth first."""
  # Explicit stack, member paths can be thousands of directories deep
  stack = [iter(read_dir(fs, dirname))]
  while stack:
    entry = next(stack[-1], None)
    if entry is None:
      stack.pop()
      continue
    if checker.done():
      log.debug(f"Verdict reached, skipping the rest of {dirname}")
      return
    if entry.is_dir:
      stack.append(iter(read_dir(fs, entry.path)))
    elif entry.is_regular:
      check_entry(checker, fs, entry, depth, size)


def check_entry(checker, fs, entry, depth, size):
  p = entry.path
  if p.endswith(CLASS_EXTENSION):
    # Already bad, nothing in another class can change that
    if checker.bad():
      return
    checker.check_class(p, read_class(fs, p, size))
  elif p == MANIFEST_PATH:
    checker.update_manifest(read_manifest(fs, p))
  elif ext(p) in ARCHIVE_EXTENSIONS:
    check_nested(checker, fs, entry, depth, size)


def read_class(fs, p, size):
  """Read a class entry, refusing it if it doesn't fit the remaining budget."""
  try:
    f = fs.open(p)
  except READ_ERRORS as e:
    raise ArchiveIOError(f"opening file: {e}", p) from e
  with f:
    try:
      fsize = fs.stat(p).size
    except READ_ERRORS as e:
      raise ArchiveIOError(f"stat file: {e}", p) from e
    # Unknown (0) sizes are read as is
    if fsize > 0 and fsize + size > MAX_ZIP_SIZE:
      raise LimitError(f"reading {fsize} bytes would exceed memory limit of {MAX_ZIP_SIZE} bytes", p)
    try:
      return f.read(fsize) if fsize > 0 else f.read()
    except READ_ERRORS as e:
      raise ArchiveIOError(f"reading file: {e}", p) from e


def read_manifest(fs, p):
  try:
    with fs.open(p) as mf:
      return parse_manifest(mf)
  except READ_ERRORS as e:
    raise ArchiveIOError(f"scanning manifest file: {e}", p) from e


def check_nested(checker, fs, entry, depth, size):
  """We've found a jar in a jar. Open it!"""
  p = entry.path
  try:
    fsize = fs.stat(p).size
  except READ_ERRORS as e:
    raise ArchiveIOError(f"stat archive inside archive: {e}", p) from e
  if size + fsize > MAX_ZIP_SIZE:
    raise LimitError(f"archive inside archive is greater than {MAX_ZIP_SIZE} bytes", p)

  try:
    with fs.open(p) as f:
      data = f.read()
  except READ_ERRORS as e:
    raise ArchiveIOError(f"reading file: {e}", p) from e

  fobj = io.BytesIO(data)
  if not zipfile.is_zipfile(fobj):
    log.debug(f"Not a zip file, skipping: {p}")
    return
  try:
    zfile = zipfile.ZipFile(fobj)
  except (zipfile.BadZipFile, OSError, EOFError, ValueError) as e:
    raise ArchiveFormatError(f"parsing archive: {e}", p) from e

  log.debug(f"Found nested archive: {p} (depth {depth + 1})")
  with zfile:
    try:
      check_archive(checker, ZipFS(zfile), depth + 1, size + fsize)
    except ScanError as e:
      e.nest(p)
      raise
