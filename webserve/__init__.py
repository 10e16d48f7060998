"""Static file server with SPA fallback and live reload."""
from .broadcaster import ChangeEvent, ReloadBroadcaster, Subscription
from .resolver import ListDirectory, NotFound, Resolution, ServeFile, resolve

__all__ = [
    "ChangeEvent",
    "ListDirectory",
    "NotFound",
    "ReloadBroadcaster",
    "Resolution",
    "ServeFile",
    "Subscription",
    "resolve",
]

__version__ = "0.1.0"
