"""
Adapters package for the web proxy.

Contains HTTP client wrappers for the two public upstream APIs
(MusicBrainz, Cover Art Archive). These adapters encapsulate:

- Base URLs and request shapes
- Per-call timeouts and the outbound rate gate
- Mapping of transport failures to shared errors

Status codes are left to the reshapers; adapters never retry.
"""

from .upstream import UpstreamClient
from .musicbrainz_client import MusicBrainzClient, build_user_agent
from .coverart_client import CoverArtClient

__all__ = [
    "UpstreamClient",
    "MusicBrainzClient",
    "CoverArtClient",
    "build_user_agent",
]
