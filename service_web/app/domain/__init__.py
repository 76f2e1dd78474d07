"""
Request handling for the web proxy.

- router: precedence-ordered dispatch of ``/api/...`` paths
- reshapers: policies turning upstream responses into client responses
"""

from .router import ApiHandler, ApiRoute, RouteKind, resolve_api_route

__all__ = ["ApiHandler", "ApiRoute", "RouteKind", "resolve_api_route"]
