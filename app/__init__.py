# =============================================================================
# Holographic Assistant
# =============================================================================
# A chat backend that adds text from user-uploaded files to each prompt,
# splits emotion/tone metadata out of the model's reply, and proxies
# text-to-speech for the browser avatar.
#
# Package structure:
#   app/
#   ├── api/          → FastAPI route handlers (chat, upload, tts)
#   ├── models/       → Pydantic V2 request/response schemas
#   ├── services/     → Business logic (extraction, store, context, prompt,
#   │                    response parsing, chat and speech providers)
#   ├── config.py     → Pydantic Settings
#   ├── exceptions.py → Domain exceptions
#   └── main.py       → Application factory and lifespan
# =============================================================================
