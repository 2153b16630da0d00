"""Prompt builders shared across services."""


def build_expand_prompt(
    title: str,
    description: str,
    existing_titles: list[str],
    count: int,
) -> str:
    current = ", ".join(existing_titles) if existing_titles else "(none yet)"
    return f"""CONTEXT:
Timeline Title: {title}
Timeline Description: {description}
Current Events: {current}

TASK:
Generate {count} NEW and UNIQUE historical events for this timeline.
DO NOT repeat current events.
Provide "absImp" (Absolute Importance) as an integer from 1-100.

Return JSON only: {{ "events": [{{ "date": "YYYY-MM-DD", "title": "string", "description": "string", "imageurl": "Wikimedia file URL", "absImp": 1-100 }}] }}
"""


def build_research_prompt(topic: str, count: int) -> str:
    return (
        f'Comprehensive historical timeline: "{topic}". {count} events. '
        'JSON: {"events": [{"date": "YYYY-MM-DD", "title": "string", "description": "string", '
        '"imageurl": "Wikimedia file URL", "importance": 1-10}]}'
    )
