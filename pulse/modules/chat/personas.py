"""
Agent personas and their system prompts.

Each persona reads a few rows about the user (see `reads`) and renders them
into a fixed prompt template. Prompt builders are pure: they take the rows
already fetched and never touch the database.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

Rows = Dict[str, Any]


def _name(profile: Optional[Dict[str, Any]]) -> str:
    return (profile or {}).get("full_name") or "the user"


def _guidelines(rows: Optional[List[Dict[str, Any]]]) -> str:
    if not rows:
        return ""
    lines = "\n".join(f"- {g.get('guideline_text', '')}" for g in rows)
    return f"\nCustom Guidelines:\n{lines}\n"


def _join(*parts: str) -> str:
    return "\n".join(p for p in parts if p)


def executive_assistant_prompt(rows: Rows) -> str:
    graph = rows.get("graph_context")
    performance = ""
    if graph:
        performance = (
            "\nCurrent Performance Context:\n"
            f"- Pulse Score: {graph.get('pulse_score') or 'N/A'}\n"
            f"- GANE Score: {graph.get('gane_score') or 'N/A'}\n"
            f"- MORO Score: {graph.get('moro_score') or 'N/A'}\n"
        )
    return _join(
        f"You are NOVA, an AI Executive Assistant for {_name(rows.get('profile'))}, a real estate professional.",
        "Your role is to help with:",
        "- Email management and drafting",
        "- Calendar scheduling and reminders",
        "- Task prioritization and organization",
        "- Meeting preparation",
        "- Follow-ups with clients and leads",
        _guidelines(rows.get("guidelines")),
        performance,
        "Be helpful, organized, and proactive. Always maintain a professional yet friendly tone.",
    )


def content_agent_prompt(rows: Rows) -> str:
    market = rows.get("market_config")
    market_focus = ""
    if market:
        property_types = market.get("property_types") or []
        market_focus = (
            f"\nMarket Focus: {market.get('city') or ''}, {market.get('state') or ''}\n"
            f"Specialization: {', '.join(property_types) if property_types else 'General Real Estate'}\n"
        )
    recent = rows.get("recent_content") or []
    recent_block = ""
    if recent:
        lines = "\n".join(f"- {c.get('content_type')}: \"{c.get('title') or 'Untitled'}\"" for c in recent)
        recent_block = f"\nRecent Content Performance:\n{lines}\n"
    return _join(
        f"You are SIRIUS, an AI Content Specialist for {_name(rows.get('profile'))}, a real estate professional.",
        "Your role is to help with:",
        "- Social media content creation and strategy",
        "- Blog post writing and SEO optimization",
        "- Email marketing campaigns",
        "- Video script writing",
        "- Content calendar planning",
        "- Engagement strategies",
        market_focus,
        _guidelines(rows.get("guidelines")),
        recent_block,
        "Be creative, engaging, and data-driven. Help create content that resonates with the target audience.",
    )


def transaction_coordinator_prompt(rows: Rows) -> str:
    transactions = rows.get("transactions") or []
    active = ""
    if transactions:
        lines = "\n".join(
            f"- {t.get('property_address')}: {t.get('transaction_type')} ({t.get('stage') or 'In Progress'})"
            for t in transactions
        )
        active = f"\nActive Transactions:\n{lines}\n"
    graph = rows.get("graph_context")
    performance = ""
    if graph:
        volume = graph.get("ytd_volume") or 0
        volume = f"{volume:,.0f}" if isinstance(volume, (int, float)) else str(volume)
        performance = (
            "\nPerformance Context:\n"
            f"- Current Pipeline: {graph.get('active_transactions') or 0} active deals\n"
            f"- YTD Volume: ${volume}\n"
        )
    return _join(
        f"You are VEGA, an AI Transaction Coordinator for {_name(rows.get('profile'))}, a real estate professional.",
        "Your role is to help with:",
        "- Transaction management and milestone tracking",
        "- Document coordination and compliance",
        "- Client communication and updates",
        "- Deadline management",
        "- Stakeholder coordination (buyers, sellers, lenders, attorneys)",
        active,
        _guidelines(rows.get("guidelines")),
        performance,
        "Be organized, detail-oriented, and proactive. Help ensure smooth transaction processes and timely closings.",
    )


@dataclass(frozen=True)
class Persona:
    agent_type: str
    name: str
    # extra context rows to fetch, beyond profile and guidelines
    reads: Tuple[str, ...]
    build_prompt: Callable[[Rows], str]


PERSONAS: Dict[str, Persona] = {
    "executive_assistant": Persona("executive_assistant", "NOVA", ("graph_context",), executive_assistant_prompt),
    "content_agent": Persona("content_agent", "SIRIUS", ("market_config", "recent_content"), content_agent_prompt),
    "transaction_coordinator": Persona(
        "transaction_coordinator", "VEGA", ("transactions", "graph_context"), transaction_coordinator_prompt
    ),
}
