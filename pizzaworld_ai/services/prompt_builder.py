from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from pizzaworld_ai.models.assistant import BusinessContext, ChatExchange

IDENTITY = "You are the PizzaWorld business analyst assistant."
NUMBER_RULES = (
    "- Use ONLY the exact numbers listed under DATA, copied verbatim",
    "- Never calculate, estimate, round, or modify values",
    "- If the data needed is not listed, say \"I don't have that data\"",
    "- Keep the response under 150 words",
)
CATEGORY_GUIDANCE: Dict[str, str] = {
    "analytics": "- Focus on insights and recommendations",
    "support": "- Provide technical help and guidance",
}
DEFAULT_GUIDANCE = "- Be helpful and professional"
ELLIPSIS = "..."


def _clip(text: str, max_chars: int) -> str:
    text = text.strip()
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    return text[: max(max_chars - len(ELLIPSIS), 0)].rstrip() + ELLIPSIS


def build_prompt(
    user_query: str,
    context: BusinessContext,
    history: Sequence[ChatExchange],
    knowledge_snippet: Optional[str] = None,
    *,
    max_history: int = 10,
    message_max_chars: int = 500,
    snippet_max_chars: int = 1500,
) -> str:
    """Render the generation prompt. Same inputs always give the same text."""
    scope = context.scope_key.scope
    lines: List[str] = [IDENTITY]
    scope_line = f"User role: {scope.role}"
    if scope.scope_id:
        scope_line += f" ({scope.label})"
    lines.append(scope_line)

    if context.entries:
        lines.append("")
        lines.append("DATA (use exact values only):")
        lines.extend(f"- {entry.label}: {entry.value}" for entry in context.entries)

    lines.append("")
    lines.append("RULES:")
    lines.extend(NUMBER_RULES)
    lines.append(CATEGORY_GUIDANCE.get(context.category, DEFAULT_GUIDANCE))

    recent = list(history)[-max_history:] if max_history > 0 else []
    if recent:
        lines.append("")
        lines.append("PREVIOUS MESSAGES:")
        for exchange in recent:
            speaker = "User" if exchange.author == "user" else "Assistant"
            lines.append(f"{speaker}: {_clip(exchange.text, message_max_chars)}")

    if knowledge_snippet and knowledge_snippet.strip():
        lines.append("")
        lines.append("KNOWLEDGE SNIPPET:")
        lines.append(_clip(knowledge_snippet, snippet_max_chars))

    lines.append("")
    lines.append(f"Question: {_clip(user_query, message_max_chars)}")
    lines.append("")
    lines.append("Response:")
    return "\n".join(lines)
