#
# file:     fsys.py
#
#  Read-only filesystem handles over an archive's entry tree.
#
#  A handle provides:
#    read_dir(name) -> list of Entry, sorted by name ("." is the root)
#    open(path)     -> binary file object of a regular entry
#    stat(path)     -> Entry
#
#  Paths are slash separated and relative to the root, without a leading "./".
#
import os
import stat
import logging
import posixpath
from typing import NamedTuple

log = logging.getLogger(__name__)

ROOT = "."


class Entry(NamedTuple):
  name: str
  path: str
  is_dir: bool
  is_regular: bool
  size: int


def join(dirname, name):
  if dirname == ROOT:
    return name
  return f"{dirname}/{name}"


def clean_name(name):
  """Normalize a zip member name, None if it is empty or escapes the root."""
  name = posixpath.normpath(name.replace("\\", "/")).lstrip("/")
  if name in ("", ROOT, "..") or name.startswith("../"):
    return None
  return name


class ZipFS:
  """
  Filesystem view of a zipfile.ZipFile.

  Zip archives don't have to store directory members, so directories are
  derived from the member paths.
  """

  def __init__(self, zfile):
    self.zfile = zfile
    self._files = {}
    self._dirs = {ROOT: set()}
    for zinfo in zfile.infolist():
      name = clean_name(zinfo.filename)
      if name is None:
        log.debug(f"Ignoring zip member: {zinfo.filename!r}")
        continue
      if zinfo.is_dir():
        self._dirs.setdefault(name, set())
      else:
        self._files[name] = zinfo
      self._add(name)

  def _add(self, path):
    parent = ROOT
    for name in path.split("/"):
      self._dirs.setdefault(parent, set()).add(name)
      parent = join(parent, name)

  def stat(self, path):
    # A path that is both a member and a parent of members is a directory
    if path in self._dirs:
      return Entry(posixpath.basename(path), path, True, False, 0)
    zinfo = self._files.get(path)
    if zinfo is None:
      raise FileNotFoundError(f"no such entry: {path}")
    return Entry(posixpath.basename(path), path, False, True, zinfo.file_size)

  def read_dir(self, name):
    children = self._dirs.get(name)
    if children is None:
      raise NotADirectoryError(f"not a directory: {name}")
    return [self.stat(join(name, child)) for child in sorted(children)]

  def open(self, path):
    if path in self._dirs:
      raise IsADirectoryError(f"is a directory: {path}")
    zinfo = self._files.get(path)
    if zinfo is None:
      raise FileNotFoundError(f"no such entry: {path}")
    return self.zfile.open(zinfo)


class DirFS:
  """Filesystem view of an entry tree already extracted to disk."""

  def __init__(self, root):
    self.root = os.fspath(root)

  def _full(self, path):
    if path == ROOT:
      return self.root
    return os.path.join(self.root, *path.split("/"))

  def _entry(self, path, st_mode, st_size):
    is_dir = stat.S_ISDIR(st_mode)
    is_regular = stat.S_ISREG(st_mode)
    return Entry(posixpath.basename(path), path, is_dir, is_regular, st_size if is_regular else 0)

  def stat(self, path):
    st = os.lstat(self._full(path))
    return self._entry(path, st.st_mode, st.st_size)

  def read_dir(self, name):
    entries = []
    with os.scandir(self._full(name)) as it:
      for entry in it:
        st = entry.stat(follow_symlinks=False)
        entries.append(self._entry(join(name, entry.name), st.st_mode, st.st_size))
    return sorted(entries, key=lambda e: e.name)

  def open(self, path):
    return open(self._full(path), "rb")


class NoSelfListingFS:
  """
  Wraps a handle so read_dir() never returns the queried directory as its own
  child. Some zip directory listings report "." inside ".", which would make
  the walk recurse into itself forever.
  """

  def __init__(self, fs):
    self.fs = fs

  def read_dir(self, name):
    return [e for e in self.fs.read_dir(name) if e.name != name]

  def open(self, path):
    return self.fs.open(path)

  def stat(self, path):
    return self.fs.stat(path)
