#
# file:     signature.py
#
#  Byte level detectors for log4j's JndiManager.class. Nothing here parses the
#  class file format, both checks work on the raw (decompressed) bytes.
#

###########
# Replicates the YARA rule from
# https://github.com/darkarnium/Log4j-CVE-Detect/blob/main/rules/vulnerability/log4j/CVE-2021-44228.yar
#
#   $JndiManagerConstructor = {
#       3c 69 6e 69 74 3e ?? ?? ?? 28 4c 6a 61 76 61 2f 6c 61 6e 67 2f 53 74 72 69
#       6e 67 3b 4c 6a 61 76 61 78 2f 6e 61 6d 69 6e 67 2f 43 6f 6e 74 65 78 74 3b
#       29 56
#   }
#
# i.e. "<init>" followed by "(Ljava/lang/String;Ljavax/naming/Context;)V".
CONSTRUCTOR_PREFIX = b"<init>"
CONSTRUCTOR_SUFFIX = b"(Ljava/lang/String;Ljavax/naming/Context;)V"

# Constant pool index operands between the two parts vary in length.
MAX_GAP = 3

###########
# JndiManager gained `isJndiEnabled` in 2.16, see
# https://github.com/apache/logging-log4j2/commit/44569090f1cf1e92c711fb96dfd18cd7dccc72ea
#
# Brittle: a later release renaming the method would look unpatched. The
# constructor rule above stays as the reliable check for < 2.15.
PATCHED_MARKER = b"isJndiEnabled"


def matches_constructor_rule(content):
  """Return True if `content` contains the pre-2.15 JndiManager constructor."""
  start = 0
  while True:
    i = content.find(CONSTRUCTOR_PREFIX, start)
    if i < 0:
      return False
    n = i + len(CONSTRUCTOR_PREFIX)
    if n >= len(content):
      return False
    j = content.find(CONSTRUCTOR_SUFFIX, n)
    if j < 0:
      return False
    # Absolute offsets: the bytes strictly between prefix and suffix
    if j - n <= MAX_GAP:
      return True
    start = n


def matches_patched_marker(content):
  """Return True if `content` contains the marker added by the 2.16 fix."""
  return PATCHED_MARKER in content
