"""Tests for the byte signatures matched against JndiManager.class."""
import pytest

from jarscan.signature import (
  CONSTRUCTOR_PREFIX,
  CONSTRUCTOR_SUFFIX,
  matches_constructor_rule,
  matches_patched_marker,
)
from tests.fixtures import MANAGER_2_15, MANAGER_2_16, MANAGER_OLD


def _gapped(gap, lead=b""):
  return lead + CONSTRUCTOR_PREFIX + b"\x01" * gap + CONSTRUCTOR_SUFFIX


@pytest.mark.parametrize("gap", [0, 1, 2, 3])
def test_gap_up_to_three_bytes_matches(gap):
  assert matches_constructor_rule(_gapped(gap))


def test_gap_of_four_bytes_does_not_match():
  assert not matches_constructor_rule(_gapped(4))


def test_gap_is_measured_from_the_prefix_it_follows():
  """A prefix deep inside the content is held to the same gap."""
  lead = b"\xca\xfe\xba\xbe" + b"\x00" * 100
  assert matches_constructor_rule(_gapped(3, lead=lead))
  assert not matches_constructor_rule(_gapped(4, lead=lead))


def test_prefix_without_suffix():
  assert not matches_constructor_rule(b"\x00" + CONSTRUCTOR_PREFIX + b"\x01\x00\x05()V")


def test_suffix_before_prefix_only():
  assert not matches_constructor_rule(CONSTRUCTOR_SUFFIX + b"\x00" + CONSTRUCTOR_PREFIX)


def test_prefix_at_end_of_content():
  assert not matches_constructor_rule(b"\x00\x00" + CONSTRUCTOR_PREFIX)


def test_no_prefix():
  assert not matches_constructor_rule(b"")
  assert not matches_constructor_rule(CONSTRUCTOR_SUFFIX)


def test_later_prefix_matches_after_distant_one():
  content = CONSTRUCTOR_PREFIX + b"\x00" * 40 + _gapped(2)
  assert matches_constructor_rule(content)


def test_distant_suffix_only():
  content = CONSTRUCTOR_PREFIX + b"\x00" * 40 + CONSTRUCTOR_PREFIX + b"\x00" * 10 + CONSTRUCTOR_SUFFIX
  assert not matches_constructor_rule(content)


def test_manager_classes():
  assert matches_constructor_rule(MANAGER_OLD)
  assert not matches_constructor_rule(MANAGER_2_15)
  assert not matches_constructor_rule(MANAGER_2_16)


def test_patched_marker():
  assert matches_patched_marker(MANAGER_2_16)
  assert not matches_patched_marker(MANAGER_2_15)
  assert not matches_patched_marker(b"isJndi")
