"""
Input validation utilities for pckgi.

Validates npm package names before they are interpolated into registry
URLs.
"""

import re
from urllib.parse import quote

from pckgi.core.exceptions import ValidationError

# npm's name grammar: optional @scope/ prefix, URL-safe characters,
# no leading dot or underscore. Matching ignores case so legacy mixed-case
# names such as JSONStream still validate.
_PACKAGE_NAME_PATTERN = re.compile(
    r"^(?:@[a-z0-9~*-][a-z0-9~*._-]*/)?[a-z0-9~-][a-z0-9~._-]*$",
    re.IGNORECASE,
)

# Registry limit on package name length
MAX_PACKAGE_NAME_LENGTH = 214


def validate_package_name(name: str) -> str:
    """Validate an npm package name.

    Args:
        name: Package name to validate, optionally scoped (``@scope/name``).

    Returns:
        The name with surrounding whitespace removed.

    Raises:
        ValidationError: If the package name is invalid.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("package_name", name, "Package name cannot be empty")

    if len(name) > MAX_PACKAGE_NAME_LENGTH:
        raise ValidationError(
            "package_name",
            name[:50] + "...",
            f"Package name exceeds {MAX_PACKAGE_NAME_LENGTH} character limit",
        )

    if any(ord(c) < 32 or ord(c) == 127 or c.isspace() for c in name):
        raise ValidationError(
            "package_name", repr(name), "Package name contains whitespace or control characters"
        )

    if not _PACKAGE_NAME_PATTERN.match(name):
        raise ValidationError(
            "package_name",
            name,
            "Package name must contain only URL-safe characters "
            "and must not start with a dot or underscore",
        )

    return name


def encode_package_name_for_url(name: str) -> str:
    """URL-encode a package name for use in registry URLs.

    Scoped names keep their ``@`` and encode the slash: ``@types/node``
    becomes ``@types%2Fnode``.
    """
    return quote(name, safe="@")
