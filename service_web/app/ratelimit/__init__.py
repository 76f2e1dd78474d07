"""
Rate limiting package for the web proxy.

Holds the single-lock rate gate that spaces outbound MusicBrainz calls.
"""

from .rate_gate import RateGate

__all__ = ["RateGate"]
