# =============================================================================
# API Package — FastAPI Route Handlers
# =============================================================================
# Each module defines a FastAPI APIRouter for a specific feature:
#   - chat.py: POST /api/chat (context-augmented replies)
#   - upload.py: POST /api/file (document ingestion)
#   - speech.py: POST /api/tts (text-to-speech)
#   - deps.py: shared dependencies (store, providers)
# =============================================================================
