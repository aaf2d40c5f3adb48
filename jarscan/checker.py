#
# file:     checker.py
#
#  Verdict state accumulated over one scan, including every nested archive.
#
import logging

from jarscan.signature import matches_constructor_rule, matches_patched_marker

log = logging.getLogger(__name__)

###########
# Path substrings used to classify class entries
LOOKUP_CLASS = "JndiLookup.class"
MANAGER_CLASS = "JndiManager.class"
MANAGER_NAME = "JndiManager"


class Checker:
  """
  Mutable scan state. One instance per parse() call, never shared.

  The flags only go from False to True, except `is_patched_version` which
  follows the most recently seen JndiManager.class.
  """

  def __init__(self):
    # JndiLookup.class present (the lookup handler, removed by some mitigations)
    self.has_lookup_class = False
    # JndiManager with the pre-2.15 constructor
    self.has_old_constructor_signature = False
    # JndiManager.class seen, and whether it carries the 2.16 marker
    self.seen_manager_class = False
    self.is_patched_version = False

    self.main_class = ""
    self.version = ""

  def bad(self):
    """The vulnerability verdict."""
    return (self.has_lookup_class and self.has_old_constructor_signature) or (
      self.has_lookup_class and self.seen_manager_class and not self.is_patched_version
    )

  def done(self):
    """True once nothing left in the archive can change the report."""
    return self.bad() and self.main_class != ""

  def check_class(self, path, content):
    """Update the state with the bytes of the class entry at `path`."""
    if not self.has_lookup_class and LOOKUP_CLASS in path:
      log.debug(f"Found lookup class: {path}")
      self.has_lookup_class = True
    if not self.has_old_constructor_signature:
      self.has_old_constructor_signature = MANAGER_NAME in path and matches_constructor_rule(content)
      if self.has_old_constructor_signature:
        log.debug(f"Found old JndiManager constructor: {path}")
    if MANAGER_CLASS in path:
      self.seen_manager_class = True
      self.is_patched_version = matches_patched_marker(content)
      log.debug(f"Found manager class: {path} (patched={self.is_patched_version})")

  def update_manifest(self, info):
    """Overwrite main class and version with the fields `info` carries."""
    if info.main_class is not None:
      self.main_class = info.main_class
    if info.version is not None:
      self.version = info.version
