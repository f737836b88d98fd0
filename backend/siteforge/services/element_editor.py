"""Claude-backed editor for a single template element."""

import json
import re
from typing import Any, Dict, List, Optional

import anthropic
from flask import current_app

SYSTEM_PROMPT = """You edit one HTML element of a generated business website.

You receive the element's current outer HTML, the user's instruction and the
earlier conversation about this element.

Rules:
- Return the COMPLETE replacement outer HTML for the element, nothing else.
- Keep every class that starts with "sf-" exactly as it is.
- Keep the same root tag unless the instruction explicitly asks to change it.
- Do not add <script> tags, inline event handlers or external stylesheets.
- If the instruction asks for something unsafe, unrelated to this element, or
  impossible with HTML/CSS alone, refuse.

Respond ONLY with JSON, no markdown fences:
{"rejected": false, "message": "<one short sentence for the user>", "html": "<outer html>"}
or
{"rejected": true, "message": "<why the edit is not allowed>"}
"""


class EditorUnavailable(RuntimeError):
    """No API key configured for the element editor."""


class EditorResponseError(ValueError):
    """The model answered with something that is not a usable edit."""


def get_client() -> anthropic.Anthropic:
    api_key = current_app.config.get("ANTHROPIC_API_KEY")
    if not api_key:
        raise EditorUnavailable("ANTHROPIC_API_KEY is not configured")
    return anthropic.Anthropic(api_key=api_key)


def build_messages(
    *,
    css_class: str,
    current_html: str,
    instruction: str,
    chat_history: List[Dict[str, str]],
) -> List[Dict[str, str]]:
    messages = [
        {"role": m["role"], "content": m["content"]}
        for m in chat_history
        if m.get("role") in ("user", "assistant") and m.get("content")
    ]

    # The API wants alternating turns starting with the user
    while messages and messages[0]["role"] != "user":
        messages.pop(0)

    prompt = (
        f"Element class: {css_class}\n\n"
        f"Current HTML:\n{current_html}\n\n"
        f"Instruction:\n{instruction}"
    )
    if messages and messages[-1]["role"] == "user":
        messages[-1] = {
            "role": "user",
            "content": messages[-1]["content"] + "\n\n" + prompt,
        }
    else:
        messages.append({"role": "user", "content": prompt})

    return messages


def parse_reply(text: str) -> Dict[str, Any]:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = re.sub(r"^```\w*\n?", "", cleaned)
        cleaned = re.sub(r"\n?```$", "", cleaned)

    try:
        reply = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise EditorResponseError(f"Editor returned invalid JSON: {exc}") from exc

    if not isinstance(reply, dict):
        raise EditorResponseError("Editor reply is not a JSON object")

    if reply.get("rejected"):
        return {
            "rejected": True,
            "message": reply.get("message") or "This edit is not allowed.",
            "edited_html": None,
        }

    html = reply.get("html")
    if not isinstance(html, str) or not html.strip():
        raise EditorResponseError("Editor reply has no html")

    return {
        "rejected": False,
        "message": reply.get("message") or "Edit applied.",
        "edited_html": html,
    }


def edit_element(
    *,
    css_class: str,
    current_html: str,
    instruction: str,
    chat_history: Optional[List[Dict[str, str]]] = None,
    client: Optional[anthropic.Anthropic] = None,
) -> Dict[str, Any]:
    """
    Ask the model to rewrite one element.

    Returns {"rejected", "message", "edited_html", "debug"}; debug carries the
    model id, prompt, messages and token usage for the editor's debug panel.
    """
    client = client or get_client()
    model = current_app.config["EDITOR_MODEL"]

    messages = build_messages(
        css_class=css_class,
        current_html=current_html,
        instruction=instruction,
        chat_history=chat_history or [],
    )

    response = client.messages.create(
        model=model,
        max_tokens=current_app.config["EDITOR_MAX_TOKENS"],
        system=SYSTEM_PROMPT,
        messages=messages,
    )

    text = "".join(
        block.text for block in response.content if getattr(block, "type", None) == "text"
    )

    if response.stop_reason == "max_tokens":
        raise EditorResponseError("Editor reply was truncated")

    result = parse_reply(text)
    result["debug"] = {
        "model": model,
        "system_prompt": SYSTEM_PROMPT,
        "messages": messages,
        "input_tokens": response.usage.input_tokens,
        "output_tokens": response.usage.output_tokens,
    }
    return result
