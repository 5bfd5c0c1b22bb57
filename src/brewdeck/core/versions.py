"""Homebrew version ordering.

Homebrew appends a revision to a version when a formula is rebuilt without an
upstream release, e.g. ``3.2.4_4``. Ordering compares the dotted base first and
only then the revision.
"""


def split_revision(version: str) -> tuple[str, int]:
    """Split a version into (base, revision).

    "76.1_2" -> ("76.1", 2), "3.2.4" -> ("3.2.4", 0)
    """
    base, sep, revision = version.rpartition("_")
    if not sep:
        return version, 0
    try:
        return base, int(revision)
    except ValueError:
        return base, 0


def _numeric_parts(base: str) -> list[int]:
    parts = []
    for part in base.split("."):
        if part.isdigit():
            parts.append(int(part))
    return parts


def version_key(version: str) -> tuple[tuple[int, ...], int]:
    """Sortable key consistent with compare_versions."""
    base, revision = split_revision(version)
    parts = _numeric_parts(base)
    # Trailing zeros carry no weight: "1.0" == "1"
    while parts and parts[-1] == 0:
        parts.pop()
    return tuple(parts), revision


def compare_versions(a: str, b: str) -> int:
    """Compare two Homebrew versions.

    Returns -1 if a < b, 0 if equal, 1 if a > b.
    """
    key_a = version_key(a)
    key_b = version_key(b)
    if key_a < key_b:
        return -1
    if key_a > key_b:
        return 1
    return 0
