"""Message transports."""

from .frames import split_frames
from .meshtastic_transport import MeshtasticTransport

__all__ = ["MeshtasticTransport", "split_frames"]
