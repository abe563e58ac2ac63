# =============================================================================
# Models Package — Pydantic V2 Schemas
# =============================================================================
# Request/response schemas for the API. Internal records (DocumentRecord,
# ParsedReply) are plain dataclasses in app/services and never leave the
# service layer directly.
# =============================================================================
