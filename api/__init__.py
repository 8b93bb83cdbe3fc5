"""
API Package Initialization

FastAPI application exposing task parsing and email triage over HTTP.

Design Considerations:
- Thin route handlers over a shared service layer
- Per-route rate limits on AI endpoints
- Consistent error envelopes
"""
