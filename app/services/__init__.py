# =============================================================================
# Services Package — Business Logic
# =============================================================================
# Contains the core business logic, separated from API handlers:
#   - parser.py: PDF / plain-text extraction (Docling for PDFs)
#   - store.py: in-memory DocumentStore, one record per filename
#   - context.py: truncated per-document context block
#   - prompt.py: persona prompt with META sentinel instruction
#   - response_parser.py: reply / metadata split (never raises)
#   - llm.py: multi-provider chat completion (Gemini, Anthropic, OpenAI-compatible)
#   - speech.py: Google Cloud Text-to-Speech client
#   - assistant.py: upload and chat pipelines
# =============================================================================
