import logging

import pytest


@pytest.fixture(autouse=True)
def debug_logging(caplog):
  """Run every test with the scanner's debug logging enabled."""
  caplog.set_level(logging.DEBUG, logger="jarscan")
