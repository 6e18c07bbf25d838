"""Client-side authentication and work-session reconciliation for the time-tracking service."""

from .client import TimeclockClient, build_client

__version__ = "0.1.0"

__all__ = ["TimeclockClient", "build_client", "__version__"]
