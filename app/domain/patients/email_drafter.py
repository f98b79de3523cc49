"""
One-off patient email drafting with the language model
"""

import json
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...config import CLINIC_NAME, EMAIL_DRAFT_TEMPERATURE
from ...models import Patient
from ...services.llm_client import LLMClient, MissingAPIKeyError
from ...shared.errors import CRMError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_TONE = "professional and reassuring"
DEFAULT_SUBJECT = "Clinic update"
DEFAULT_BODY = "Dear patient,\n\nThank you for your message."

SYSTEM_PROMPT = (
    f"You are an email assistant for {CLINIC_NAME}. You write concise, empathetic, "
    "medically appropriate emails to a single patient. Always output strict JSON with "
    "keys 'subject' and 'body' (plain text, no HTML)."
)


def patient_summary(patient: Patient) -> str:
    full_name = " ".join(part for part in (patient.first_name, patient.last_name) if part)
    lines = []
    if full_name:
        lines.append(f"Name: {full_name}")
    if patient.email:
        lines.append(f"Email: {patient.email}")
    if patient.phone:
        lines.append(f"Phone: {patient.phone}")
    return "\n".join(lines) if lines else "Basic identity and contact details are not available."


def build_user_prompt(patient: Patient, description: str, tone: str) -> str:
    greeting_name = patient.first_name or "patient"
    return f"""
We are composing a one-off email to this specific patient.

Patient details:
{patient_summary(patient)}

Goal / context for the email:
{description}

Tone: {tone}.

Requirements:
- Output STRICT JSON only, no markdown, with shape: {{"subject": string, "body": string}}.
- 'body' must be plain text suitable for pasting into an email textarea; use paragraphs separated by blank lines.
- Start with a natural greeting to the patient (for example, "Dear {greeting_name},").
- Do NOT include an email signature or clinic contact information; that will be appended separately.
"""


def parse_email_reply(raw: Optional[str]) -> tuple[str, str]:
    """
    Read {subject, body} from the model output, keeping defaults for blank
    fields. Non-JSON output becomes the body as-is.
    """
    raw = raw or ""
    subject, body = DEFAULT_SUBJECT, DEFAULT_BODY

    try:
        parsed = json.loads(raw)
    except ValueError:
        if raw.strip():
            body = raw.strip()
        return subject, body

    if isinstance(parsed, dict):
        if isinstance(parsed.get("subject"), str) and parsed["subject"].strip():
            subject = parsed["subject"].strip()
        if isinstance(parsed.get("body"), str) and parsed["body"].strip():
            body = parsed["body"].strip()

    return subject, body


class PatientEmailDrafter:
    def __init__(self, db: Session, llm: LLMClient):
        self.db = db
        self.llm = llm

    def generate(
        self, patient_id: Optional[str], description: Optional[str], tone: Optional[str] = None
    ) -> dict:
        if not self.llm.is_configured:
            raise MissingAPIKeyError()

        patient_id = (patient_id or "").strip()
        description = (description or "").strip()
        tone = (tone or DEFAULT_TONE).strip()
        if not patient_id or not description:
            raise ValidationError("patientId and description are required")

        patient = self.db.query(Patient).filter(Patient.id == patient_id).first()
        if not patient:
            raise NotFoundError("Patient not found")

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_user_prompt(patient, description, tone)},
        ]

        try:
            _, content = self.llm.complete(messages, EMAIL_DRAFT_TEMPERATURE)
        except CRMError:
            raise
        except Exception as e:
            logger.error(f"❌ Error generating patient email via OpenAI: {e}", exc_info=True)
            raise CRMError("Failed to generate email") from e

        subject, body = parse_email_reply(content)
        logger.info(f"✉️ Email drafted for patient {patient.id}")
        return {"subject": subject, "body": body}
