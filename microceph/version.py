"""Version information set at build time."""

_VERSION = ""


def version() -> str:
    """Return the version string embedded by the build."""
    return _VERSION