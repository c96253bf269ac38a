"""Enum definitions for application constants."""

from enum import Enum


class JobType(str, Enum):
    """Types of background jobs."""

    IMPORT_CUSTOM_EMOJIS = "import_custom_emojis"
    MODERATE_NOTE = "moderate_note"


class JobStatus(str, Enum):
    """Status of background jobs."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class IffyConfidenceThreshold(str, Enum):
    """Instance-wide sensitivity for Iffy moderation results."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NoteVisibility(str, Enum):
    PUBLIC = "public"
    HOME = "home"
    FOLLOWERS = "followers"
    SPECIFIED = "specified"


DEFAULT_JOB_STATUS = JobStatus.PENDING
DEFAULT_IFFY_CONFIDENCE_THRESHOLD = IffyConfidenceThreshold.MEDIUM
META_SINGLETON_ID = "x"
