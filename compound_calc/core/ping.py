"""Health-check payload for the API."""

from importlib.metadata import PackageNotFoundError, version


def get_ping_message() -> str:
    """Return a static ping message."""
    return "pong"


def get_service_version(distribution: str = "compound-calc") -> str:
    try:
        return version(distribution)
    except PackageNotFoundError:
        return "unknown"
