import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.dialects.postgresql.types import TIMESTAMP
from sqlalchemy.orm import declarative_base, relationship

# Define naming conventions for constraints and indexes
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)
Base = declarative_base(metadata=metadata)

ROLE_USER = "user"
ROLE_ADMIN = "admin"

ASSESSMENT_TYPES = ("disc", "behavior", "hexaco")

STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=ROLE_USER)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    responses = relationship("AssessmentResponse", back_populates="user", cascade="all, delete-orphan")
    results = relationship("AssessmentResult", back_populates="user", cascade="all, delete-orphan")


class Profile(Base):
    """Public profile data. Rows created by the LinkedIn webhook may have no user yet."""
    __tablename__ = "profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=True, unique=True)
    email = Column(String(255), unique=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    first_name = Column(String(120), nullable=True)
    last_name = Column(String(120), nullable=True)
    company = Column(String(255), nullable=True)
    position = Column(String(255), nullable=True)
    linkedin_url = Column(String(512), nullable=True)
    headline = Column(String(512), nullable=True)
    location = Column(String(255), nullable=True)
    about = Column(Text, nullable=True)
    profile_image_url = Column(String(1024), nullable=True)
    languages = Column(String(512), nullable=True)
    profile_id = Column(String(64), nullable=True)  # LinkedIn's own id
    public_id = Column(String(255), nullable=True)
    urn = Column(String(255), nullable=True)
    experiences = Column(JSON, nullable=True)
    education_summary = Column(JSON, nullable=True)
    skills = Column(JSON, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="profile")
    education = relationship("Education", back_populates="profile", cascade="all, delete-orphan")
    experience = relationship("Experience", back_populates="profile", cascade="all, delete-orphan")


class Company(Base):
    __tablename__ = "companies"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=True)
    domain = Column(String(255), unique=True, nullable=False)
    industry = Column(String(255), nullable=True)
    employee_range = Column(String(64), nullable=True)
    linkedin_url = Column(String(512), nullable=True)
    logo_url = Column(String(1024), nullable=True)
    website = Column(String(512), nullable=True)
    year_founded = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    hq_city = Column(String(120), nullable=True)
    hq_country = Column(String(120), nullable=True)
    hq_region = Column(String(120), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class Education(Base):
    __tablename__ = "education"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    profile_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    degree = Column(String(255), nullable=False, default="")
    field_of_study = Column(String(255), nullable=True)
    school = Column(String(255), nullable=False, default="")
    school_linkedin_url = Column(String(512), nullable=True)
    school_logo_url = Column(String(1024), nullable=True)
    date_range = Column(String(64), nullable=True)
    start_month = Column(String(16), nullable=True)
    start_year = Column(Integer, nullable=True)
    end_month = Column(String(16), nullable=True)
    end_year = Column(Integer, nullable=True)
    activities = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    profile = relationship("Profile", back_populates="education")

    __table_args__ = (
        UniqueConstraint("profile_id", "school", "degree", name="uq_education_profile_school_degree"),
    )


class Experience(Base):
    __tablename__ = "experience"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    profile_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    company_name = Column(String(255), nullable=False, default="")
    company_logo_url = Column(String(1024), nullable=True)
    job_title = Column(String(255), nullable=False, default="")
    start_month = Column(String(16), nullable=True)
    start_year = Column(Integer, nullable=True)
    end_month = Column(String(16), nullable=True)
    end_year = Column(Integer, nullable=True)
    is_current = Column(Boolean, nullable=False, default=False)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    skills = Column(Text, nullable=True)
    job_type = Column(String(64), nullable=True)
    duration = Column(String(64), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    profile = relationship("Profile", back_populates="experience")

    __table_args__ = (
        UniqueConstraint("profile_id", "company_name", "job_title", name="uq_experience_profile_company_title"),
    )


class WebhookLog(Base):
    __tablename__ = "webhook_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    webhook_type = Column(String(32), nullable=False)
    profile_id = Column(UUID(as_uuid=True), nullable=True)
    request_data = Column(JSON, nullable=True)
    status = Column(String(16), nullable=False)
    error_message = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow)


class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    type = Column(String(20), nullable=False)  # one of ASSESSMENT_TYPES
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    estimated_time_minutes = Column(Integer, nullable=False, default=15)
    question_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class DiscQuestion(Base):
    __tablename__ = "disc_questions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    question_number = Column(Integer, unique=True, nullable=False)
    option_d = Column(Text, nullable=False)
    option_i = Column(Text, nullable=False)
    option_s = Column(Text, nullable=False)
    option_c = Column(Text, nullable=False)


class AssessmentResponse(Base):
    __tablename__ = "assessment_responses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    assessment_id = Column(UUID(as_uuid=True), ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False, default=STATUS_IN_PROGRESS)
    responses = Column(JSON, nullable=False, default=lambda: {"answers": {}})
    started_at = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow)
    completed_at = Column(TIMESTAMP(timezone=True), nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    user = relationship("User", back_populates="responses")
    assessment = relationship("Assessment")
    result = relationship("AssessmentResult", back_populates="response", uselist=False)


class AssessmentResult(Base):
    __tablename__ = "assessment_results"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    response_id = Column(
        UUID(as_uuid=True), ForeignKey("assessment_responses.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    assessment_id = Column(UUID(as_uuid=True), ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False)
    results = Column(JSON, nullable=False)
    pdf_url = Column(String(1024), nullable=True)
    ai_analysis = Column(JSON, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    user = relationship("User", back_populates="results")
    assessment = relationship("Assessment")
    response = relationship("AssessmentResponse", back_populates="result")
