# =============================================================================
# Prompt Builder — Persona + Utterance + Document Context
# =============================================================================
#
# Produces the single text payload sent to the chat completion service.
# Layout, in order:
#   1. Persona and style framing
#   2. Instruction to finish with exactly one `META: {...}` line
#   3. The user's utterance
#   4. "Context from user files:" block (only when there is context)
#   5. The assistant-name cue the model completes from
#
# META_PREFIX is the sentinel the response parser looks for. Changing it
# here changes it there.
# =============================================================================

from __future__ import annotations

import json

from app.config import settings

META_PREFIX = "META:"
DEFAULT_META = {"emotion": "neutral", "tone": "calm"}
CONTEXT_HEADER = "Context from user files:"

PERSONA_TEMPLATE = """\
You are "{name}", a holographic AI assistant.
Be concise, intelligent, slightly futuristic but friendly.
Write like a natural human, avoid sounding canned, and do not repeat yourself.
At the very end, include a single line exactly:
{meta_line}"""


def meta_example_line() -> str:
    """The sentinel line shown to the model as the required format."""
    return f"{META_PREFIX} {json.dumps(DEFAULT_META, separators=(',', ':'))}"


def build_prompt(
    user: str,
    context: str = "",
    assistant_name: str | None = None,
) -> str:
    """
    Compose the full prompt for one chat turn.

    Args:
        user: The user's utterance. May be empty.
        context: Output of compose_context(). Omitted entirely when empty.
        assistant_name: Persona name. Defaults to settings.assistant_name.
    """
    name = assistant_name or settings.assistant_name
    framing = PERSONA_TEMPLATE.format(name=name, meta_line=meta_example_line())
    context_section = f"\n\n{CONTEXT_HEADER}\n{context}" if context else ""
    return f"{framing}\n\nUser: {user}{context_section}\n{name}:"
