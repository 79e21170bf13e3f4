"""Input validation for the project record.

All predicates are pure.  ``sanitize`` is applied to every user-supplied value
before it is validated or written into a generated file.
"""

from __future__ import annotations

import re

_PROJECT_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_ACCOUNT_RE = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9-]*[A-Za-z0-9])?$")
_EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")

# ; < > & | ` $ ( ) { } [ ] ! \
UNSAFE_CHARACTERS = frozenset(";<>&|`$(){}[]!\\")


def validate_project_name(name: str) -> bool:
    """3-39 chars of letters, digits, ``-`` and ``_``, not starting or ending with ``-``/``_``."""
    if not 3 <= len(name) <= 39:
        return False
    if not _PROJECT_NAME_RE.fullmatch(name):
        return False
    return name[0] not in "-_" and name[-1] not in "-_"


def validate_account_handle(handle: str) -> bool:
    """GitHub-style handle: 1-39 alphanumerics with internal hyphens only."""
    return 1 <= len(handle) <= 39 and _ACCOUNT_RE.fullmatch(handle) is not None


def validate_repository_name(name: str) -> bool:
    """Project-name rules (charset, no leading/trailing ``-``/``_``), 1-100 chars."""
    if not 1 <= len(name) <= 100:
        return False
    if not _PROJECT_NAME_RE.fullmatch(name):
        return False
    return name[0] not in "-_" and name[-1] not in "-_"


def validate_email(email: str) -> bool:
    """Return ``True`` for a ``local@domain.tld`` address with a TLD of 2+ letters."""
    return _EMAIL_RE.fullmatch(email) is not None


def sanitize(value: str) -> str:
    """Trim surrounding whitespace and drop shell metacharacters.

    Examples::

        sanitize("  my-app ")       -> "my-app"
        sanitize("app; rm -rf /")   -> "app rm -rf /"
        sanitize("$(whoami)")       -> "whoami"
    """
    cleaned = "".join(ch for ch in value.strip() if ch not in UNSAFE_CHARACTERS)
    # Removing a leading metacharacter can expose whitespace; trim again so
    # sanitize(sanitize(s)) == sanitize(s).
    return cleaned.strip()
