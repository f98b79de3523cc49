"""
Template rendering for workflow emails

Templates use {{entity.field}} tokens, e.g. "Hi {{patient.first_name}}".
Tokens are resolved against a context of plain dicts; a path that cannot be
resolved, or resolves to None, renders as an empty string.
"""

import re
from typing import Any, Optional

from ...models import Deal, Patient

CONTEXT_ENTITIES = ("patient", "deal")

TOKEN_PATTERN = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*)\s*\}\}")


def _resolve(context: dict, path: str) -> Any:
    value: Any = context
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
        if value is None:
            return None
    return value


def render(template: Optional[str], context: dict) -> str:
    """Replace every {{path.to.field}} token in template with its value from context"""
    if not template:
        return ""

    def _substitute(match: re.Match) -> str:
        value = _resolve(context, match.group(1))
        return "" if value is None else str(value)

    return TOKEN_PATTERN.sub(_substitute, template)


def find_tokens(template: Optional[str]) -> list[str]:
    """Token paths used by a template, in order of first appearance"""
    seen: list[str] = []
    for match in TOKEN_PATTERN.finditer(template or ""):
        if match.group(1) not in seen:
            seen.append(match.group(1))
    return seen


def unknown_tokens(*templates: Optional[str]) -> list[str]:
    """Tokens whose first segment is not an entity build_context provides"""
    unknown: list[str] = []
    for template in templates:
        for token in find_tokens(template):
            if token.split(".")[0] not in CONTEXT_ENTITIES and token not in unknown:
                unknown.append(token)
    return unknown


def build_context(patient: Optional[Patient], deal: Optional[Deal]) -> dict:
    """Flatten the patient and deal rows into the render context"""
    patient_ctx: dict = {}
    if patient is not None:
        full_name = " ".join(p for p in [patient.first_name, patient.last_name] if p)
        patient_ctx = {
            "id": patient.id,
            "first_name": patient.first_name,
            "last_name": patient.last_name,
            "full_name": full_name or None,
            "email": patient.email,
            "phone": patient.phone,
            "language_preference": patient.language_preference,
            "clinic_preference": patient.clinic_preference,
        }

    deal_ctx: dict = {}
    if deal is not None:
        deal_ctx = {
            "id": deal.id,
            "title": deal.title,
            "pipeline": deal.pipeline,
            "value": deal.value,
            "stage": deal.stage.name if deal.stage else None,
        }

    return {"patient": patient_ctx, "deal": deal_ctx}
