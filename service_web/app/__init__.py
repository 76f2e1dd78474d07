"""
Web Service package for mdlabels.

The service fronts the label designer's browser requests:
- Search: proxied to MusicBrainz behind a 50 req/s rate gate
- Artwork: proxied to the Cover Art Archive, raw, as base64 JSON, or as
  the metadata document
- Frontend: the built SPA with client-side routing fallback

Structure:
- app.main: FastAPI app, routes, and service wiring.
- app.adapters: HTTP clients for the upstream APIs.
- app.domain: API path dispatch and response reshaping.
- app.ratelimit: Outbound rate gate.
- app.assets: Static asset tree and SPA responder.
"""
