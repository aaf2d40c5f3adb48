#
# file:     cli.py
#
#  Scan the filesystem for Java Archives that bundle an activated vulnerable
#  log4j (Log4Shell, CVE-2021-44228), including archives nested in archives.
#
#  Example usage to scan a path (defaults to /):
#      $ jarscan /path/to/scan
#
#  Or directly a JAR file:
#      $ jarscan /path/to/jarfile.jar
#
#  Exclude files or directories:
#      $ jarscan / --exclude "/*/.dontgohere" --exclude "/home/user/*.war"
#
import os
import sys
import time
import logging
import argparse
import platform
import datetime
import collections
import fnmatch

from pathlib import Path

import colorama

from jarscan import __version__
from jarscan.errors import ScanError
from jarscan.jar import ARCHIVE_EXTENSIONS, parse_file

BANNER = f"jarscan v{__version__} - find activated vulnerable log4j in Java Archives\n"

NO_COLOR = False

log = logging.getLogger(__name__)

HOSTNAME = platform.node()


def iter_scandir(path, stats=None, exclude=None):
  """
  Yields all files matching ARCHIVE_EXTENSIONS recursively in path
  """
  p = Path(path)
  if p.is_file():
    if stats is not None:
      stats["files"] += 1
    yield p
    return
  if stats is not None:
    stats["directories"] += 1
  for entry in scantree(path, stats=stats, exclude=exclude):
    if entry.is_symlink():
      continue
    elif entry.is_file() and os.path.splitext(entry.name)[1].lower() in ARCHIVE_EXTENSIONS:
      yield Path(entry.path)


def scantree(path, stats=None, exclude=None):
  """Recursively yield DirEntry objects for given directory."""
  exclude = exclude or []
  try:
    with os.scandir(path) as it:
      for entry in it:
        if any(fnmatch.fnmatch(entry.path, exclusion) for exclusion in exclude):
          continue
        if entry.is_dir(follow_symlinks=False):
          if stats is not None:
            stats["directories"] += 1
          yield from scantree(entry.path, stats=stats, exclude=exclude)
        else:
          if stats is not None:
            stats["files"] += 1
          yield entry
  except OSError as e:
    log.debug(e)


def _color(code, s):
  if NO_COLOR:
    return s
  return f"{code}{s}{colorama.Style.RESET_ALL}"


def red(s):
  return _color(colorama.Fore.RED, s)


def green(s):
  return _color(colorama.Fore.GREEN, s)


def yellow(s):
  return _color(colorama.Fore.YELLOW, s)


def magenta(s):
  return _color(colorama.Fore.MAGENTA, s)


def bold(s):
  return _color(colorama.Style.BRIGHT, s)


def now():
  return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0, tzinfo=None)


def scan_archive(path, stats, quiet=False):
  """Scan a single archive, print its status line and update `stats`."""
  stats["scanned"] += 1
  log.info(f"Found jar file: {path}")
  try:
    report = parse_file(path)
  except ScanError as e:
    stats["error"] += 1
    status, detail = yellow("ERROR"), yellow(str(e))
  else:
    if report.vulnerable:
      stats["vulnerable"] += 1
      status = red("VULNERABLE")
    else:
      stats["ok"] += 1
      if quiet:
        return
      status = green("OK")
    detail = " ".join(f"{k}={v}" for k, v in [("main_class", report.main_class), ("version", report.version)] if v)
  hostname = magenta(HOSTNAME)
  line = f"[{now()}] {hostname} {bold(status)}: {bold(str(path))}"
  if detail:
    line += f" [{detail}]"
  print(line)


def print_summary(stats):
  print("\nSummary:")
  print(f" Processed {stats['files']} files and {stats['directories']} directories")
  print(f" Scanned {stats['scanned']} archives")
  if stats["vulnerable"]:
    print("  Found {} vulnerable archives".format(stats["vulnerable"]))
  if stats["ok"]:
    print("  Found {} clean archives".format(stats["ok"]))
  if stats["error"]:
    print("  Failed to scan {} archives".format(stats["error"]))


def main(argv=None):
  parser = argparse.ArgumentParser(
    prog="jarscan",
    description=f"%(prog)s v{__version__} - Find Java Archives bundling activated vulnerable log4j (Log4Shell CVE-2021-44228)",
    epilog="Archives are scanned recursively, both on disk and nested inside other archives",
    formatter_class=argparse.ArgumentDefaultsHelpFormatter,
  )
  parser.add_argument(
    "path",
    metavar="PATH",
    nargs="*",
    default=["/"],
    help="Directory or file(s) to scan (recursively)",
  )
  parser.add_argument(
    "-v",
    "--verbose",
    action="count",
    default=0,
    help="verbose output (-v is info, -vv is debug)",
  )
  parser.add_argument(
    "-n", "--no-color", action="store_true", help="disable color output"
  )
  parser.add_argument(
    "-q",
    "--quiet",
    action="store_true",
    help="be more quiet, only prints vulnerable archives and errors",
  )
  parser.add_argument("-b", "--no-banner", action="store_true", help="disable banner")
  parser.add_argument(
    "-V", "--version", action="version", version=f"%(prog)s {__version__}"
  )
  parser.add_argument(
    "-e",
    "--exclude",
    action="append",
    help="exclude files/directories by pattern (can be used multiple times)",
    metavar="PATTERN",
  )
  args = parser.parse_args(argv)
  logging.basicConfig(
    format="%(asctime)s %(levelname)s %(message)s",
  )
  python_version = platform.python_version()
  pkg_log = logging.getLogger("jarscan")
  if args.verbose == 1:
    pkg_log.setLevel(logging.INFO)
    log.info(f"info logging enabled - jarscan {__version__} - Python {python_version}")
  elif args.verbose >= 2:
    pkg_log.setLevel(logging.DEBUG)
    log.debug(f"debug logging enabled - jarscan {__version__} - Python {python_version}")

  global NO_COLOR
  NO_COLOR = args.no_color
  colorama.just_fix_windows_console()

  stats = collections.Counter()
  start_time = time.monotonic()
  hostname = magenta(HOSTNAME)

  if not args.no_banner and not args.quiet:
    print(BANNER)
  for directory in args.path:
    if not args.quiet:
      print(f"[{now()}] {hostname} Scanning: {directory}")
    for p in iter_scandir(directory, stats=stats, exclude=args.exclude):
      scan_archive(p, stats, quiet=args.quiet)

  elapsed = time.monotonic() - start_time
  if not args.quiet:
    print(f"[{now()}] {hostname} Finished scan, elapsed time: {elapsed:.2f} seconds")
    print_summary(stats)
    print(f"\nElapsed time: {elapsed:.2f} seconds")
  return 1 if stats["vulnerable"] else 0


def run():
  try:
    return main()
  except KeyboardInterrupt:
    print("\nAborted!")
    return 130
