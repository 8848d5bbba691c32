"""Naming rules shared by arguments, fields and endpoints."""

import re

NAME_PATTERN = re.compile(r"^[a-z0-9_\-]+$", re.IGNORECASE)


def validate_name(definition, errors, kind: str) -> None:
    """Add MissingName / InvalidName for ``definition.name``."""
    name = definition.name
    if name is None or name == "":
        errors.add(definition, "MissingName", f"Names must be provided for {kind}s")
    elif not isinstance(name, str) or not NAME_PATTERN.match(name):
        errors.add(
            definition, "InvalidName",
            f"Names for {kind}s may only contain letters, numbers, underscores and hyphens",
        )
