import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base


def generate_id():
    """Generate a UUID primary key, matching the hosted datastore's row ids"""
    return str(uuid.uuid4())


def utcnow():
    # Client-side timestamps keep insertion order stable within the same second
    return datetime.utcnow()


class StaffUser(Base):
    """Clinic staff member mirrored from the identity provider"""

    __tablename__ = "staff_users"

    id = Column(String(36), primary_key=True, default=generate_id)
    firebase_uid = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    conversations = relationship(
        "ChatConversation", back_populates="user", cascade="all, delete-orphan"
    )


class Patient(Base):
    __tablename__ = "patients"

    id = Column(String(36), primary_key=True, default=generate_id)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(50), nullable=True)
    gender = Column(String(50), nullable=True)
    dob = Column(Date, nullable=True)
    marital_status = Column(String(50), nullable=True)
    nationality = Column(String(100), nullable=True)
    street_address = Column(String(255), nullable=True)
    postal_code = Column(String(20), nullable=True)
    town = Column(String(100), nullable=True)
    profession = Column(String(255), nullable=True)
    current_employer = Column(String(255), nullable=True)
    source = Column(String(100), nullable=True)  # How the patient found the clinic
    notes = Column(Text, nullable=True)
    avatar_url = Column(String(500), nullable=True)
    # CRM preferences
    language_preference = Column(String(50), nullable=True)
    clinic_preference = Column(String(100), nullable=True)
    lifecycle_stage = Column(String(50), nullable=True)  # lead, patient, ...
    contact_owner_name = Column(String(255), nullable=True)
    contact_owner_email = Column(String(255), nullable=True)
    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    insurances = relationship(
        "PatientInsurance",
        back_populates="patient",
        cascade="all, delete-orphan",
        order_by="PatientInsurance.created_at.desc()",
    )
    appointments = relationship("Appointment", back_populates="patient")
    deals = relationship("Deal", back_populates="patient")


class PatientInsurance(Base):
    __tablename__ = "patient_insurances"

    id = Column(String(36), primary_key=True, default=generate_id)
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=False, index=True)
    provider_name = Column(String(255), nullable=True)
    card_number = Column(String(100), nullable=True)
    insurance_type = Column(String(50), nullable=True)  # basic, supplementary
    created_at = Column(DateTime, default=utcnow)

    patient = relationship("Patient", back_populates="insurances")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=generate_id)
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=True, index=True)
    title = Column(String(255), nullable=True)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=True)
    status = Column(
        String(20), default="scheduled", nullable=False
    )  # scheduled, confirmed, completed, cancelled, no_show
    reason = Column(String(500), nullable=True)
    location = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    patient = relationship("Patient", back_populates="appointments")


class ServiceCategory(Base):
    __tablename__ = "service_categories"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    services = relationship("Service", back_populates="category")


class Service(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=generate_id)
    category_id = Column(String(36), ForeignKey("service_categories.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    base_price = Column(Float, nullable=True)  # CHF
    created_at = Column(DateTime, default=utcnow)

    category = relationship("ServiceCategory", back_populates="services")


class DealStage(Base):
    """A named step of a deal pipeline; rows are maintained outside this API"""

    __tablename__ = "deal_stages"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    type = Column(String(50), nullable=True)  # lead, consultation, surgery, closed...
    sort_order = Column(Integer, default=0, nullable=False)


class Deal(Base):
    __tablename__ = "deals"

    id = Column(String(36), primary_key=True, default=generate_id)
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=True, index=True)
    stage_id = Column(String(36), ForeignKey("deal_stages.id"), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    pipeline = Column(String(100), nullable=True)  # e.g. Geneva
    value = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    patient = relationship("Patient", back_populates="deals")
    stage = relationship("DealStage")


class Workflow(Base):
    __tablename__ = "workflows"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    trigger_type = Column(String(50), nullable=False, index=True)  # deal_stage_changed
    active = Column(Boolean, default=True, nullable=False)
    # {"from_stage_id": str | None, "to_stage_id": str, "pipeline": str | None}
    config = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=utcnow)

    # Actions are removed explicitly by the service, in the same transaction
    actions = relationship(
        "WorkflowAction",
        order_by="WorkflowAction.sort_order",
        viewonly=True,
    )


class WorkflowAction(Base):
    __tablename__ = "workflow_actions"

    id = Column(String(36), primary_key=True, default=generate_id)
    workflow_id = Column(String(36), ForeignKey("workflows.id"), nullable=False, index=True)
    action_type = Column(String(50), nullable=False)  # draft_email_patient
    # {"subject_template", "body_template", "send_mode", "delay_minutes",
    #  "recurring_every_days", "recurring_times"}
    config = Column(JSON, nullable=False, default=dict)
    sort_order = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime, default=utcnow)


class PatientEmailDraft(Base):
    """Email rendered by a workflow action, waiting for staff review"""

    __tablename__ = "patient_email_drafts"

    id = Column(String(36), primary_key=True, default=generate_id)
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=True, index=True)
    deal_id = Column(String(36), ForeignKey("deals.id"), nullable=True)
    workflow_id = Column(String(36), nullable=True)  # Not a FK: drafts outlive deleted workflows
    to_email = Column(String(255), nullable=True)
    subject = Column(String(500), nullable=False)
    body = Column(Text, nullable=False)
    status = Column(String(20), default="draft", nullable=False)  # draft, sent, discarded
    send_mode = Column(String(20), default="immediate", nullable=False)
    scheduled_for = Column(DateTime, nullable=True)
    recurring_every_days = Column(Integer, nullable=True)
    recurring_times = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=utcnow)


class ChatConversation(Base):
    __tablename__ = "chat_conversations"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("staff_users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow)

    user = relationship("StaffUser", back_populates="conversations")
    messages = relationship(
        "ChatMessage",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="ChatMessage.created_at",
    )


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(String(36), primary_key=True, default=generate_id)
    conversation_id = Column(
        String(36), ForeignKey("chat_conversations.id"), nullable=False, index=True
    )
    role = Column(String(20), nullable=False)  # user, assistant
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    conversation = relationship("ChatConversation", back_populates="messages")
