"""Builders for in-memory archives and synthetic class files."""
import io
import zipfile

from jarscan.fsys import ROOT, Entry, join

MAGIC = b"\xca\xfe\xba\xbe\x00\x00\x00\x34"

LOOKUP_PATH = "org/apache/logging/log4j/core/lookup/JndiLookup.class"
MANAGER_PATH = "org/apache/logging/log4j/core/net/JndiManager.class"

OLD_CONSTRUCTOR = b"<init>\x01\x00\x2c(Ljava/lang/String;Ljavax/naming/Context;)V"

LOOKUP_CLASS = MAGIC + b"\x01\x00\x2forg/apache/logging/log4j/core/lookup/JndiLookup"
# < 2.15: old constructor, no marker
MANAGER_OLD = MAGIC + b"\x01\x00\x06" + OLD_CONSTRUCTOR + b"\x00\x0c"
# 2.15: constructor changed, marker not there yet
MANAGER_2_15 = MAGIC + b"<init>\x01\x00\x30(Ljava/lang/String;Ljava/util/Properties;)V"
# >= 2.16
MANAGER_2_16 = MANAGER_2_15 + b"\x01\x00\x0disJndiEnabled"
# old constructor and marker, the constructor wins
MANAGER_OLD_AND_MARKER = MANAGER_OLD + b"\x01\x00\x0disJndiEnabled"


def manifest(**fields):
  lines = ["Manifest-Version: 1.0"]
  lines += [f"{k.replace('_', '-')}: {v}" for k, v in fields.items()]
  return ("\r\n".join(lines) + "\r\n").encode()


def make_zip(entries, compression=zipfile.ZIP_DEFLATED):
  """Zip `entries` ({path: bytes}) in memory and return the archive bytes."""
  buf = io.BytesIO()
  with zipfile.ZipFile(buf, "w", compression=compression) as zfile:
    for name, data in entries.items():
      zfile.writestr(name, data)
  return buf.getvalue()


def nest(data, levels, name="inner.jar"):
  for _ in range(levels):
    data = make_zip({name: data})
  return data


def open_zip(data):
  return zipfile.ZipFile(io.BytesIO(data))


class FakeFS:
  """
  Filesystem handle over a dict of {path: bytes}.

  `sizes` overrides declared sizes, opening a path in `broken` raises OSError
  and `extra` adds raw entries to a directory listing.
  """

  def __init__(self, files, sizes=None, broken=(), extra=None):
    self.files = files
    self.sizes = sizes or {}
    self.broken = set(broken)
    self.extra = extra or {}
    self.opened = []
    self.listed = []
    self.dirs = {ROOT: set()}
    for path in files:
      parts = path.split("/")
      for i in range(len(parts)):
        parent = "/".join(parts[:i]) or ROOT
        self.dirs.setdefault(parent, set()).add(parts[i])

  def stat(self, path):
    if path in self.dirs:
      return Entry(path.rpartition("/")[2], path, True, False, 0)
    if path not in self.files:
      raise FileNotFoundError(path)
    return Entry(path.rpartition("/")[2], path, False, True, self.sizes.get(path, len(self.files[path])))

  def read_dir(self, name):
    self.listed.append(name)
    entries = [self.stat(join(name, child)) for child in sorted(self.dirs[name])]
    return entries + self.extra.get(name, [])

  def open(self, path):
    self.opened.append(path)
    if path in self.broken:
      raise OSError(f"cannot open {path}")
    return io.BytesIO(self.files[path])


def bad_utf8_name_zip(name=b"AAAA.class"):
  """A zip whose member name is flagged UTF-8 but isn't valid UTF-8."""
  data = make_zip({name.decode(): b"x"})
  data = data.replace(name, b"\xff\xfe" + name[2:])
  cd = data.index(b"PK\x01\x02")
  flags = int.from_bytes(data[cd + 8:cd + 10], "little") | 0x800
  return data[:cd + 8] + flags.to_bytes(2, "little") + data[cd + 10:]


def deep_path(components=2000, name="X.class"):
  return "deep/" + "a/" * components + name
