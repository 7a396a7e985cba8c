from enum import Enum


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    SCHOOL_ADMIN = "school_admin"
    TEACHER = "teacher"
    STUDENT = "student"
    JUDGE = "judge"


class ResultsStatus(str, Enum):
    NOT_STARTED = "not_started"
    SCORING_OPEN = "scoring_open"
    SCORING_LOCKED = "scoring_locked"
    REVIEW = "review"
    PUBLISHED = "published"


class SubmissionStatus(str, Enum):
    PENDING = "pending"  # Awaiting judges
    REVIEWED = "reviewed"  # Scored by at least one judge
    AWARDED = "awarded"  # Badge issued on publication


class MediaType(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"
    IMAGE = "image"
    DOCUMENT = "document"


class BadgeTier(str, Enum):
    GOLD = "gold"
    SILVER = "silver"
    BRONZE = "bronze"
    PARTICIPANT = "participant"
