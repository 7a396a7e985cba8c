from .enums import UserRole, ResultsStatus, SubmissionStatus, MediaType, BadgeTier
from .role import Role
from .school import School
from .user import User, User2Roles
from .event import Event, EventJudge
from .criterion import EvaluationCriterion
from .submission import Submission, SubmissionVote
from .evaluation import SubmissionScore, SubmissionResult
from .badge import Badge
from .site_setting import SiteSetting
from .notification import Notification

__all__ = [
    'UserRole',
    'ResultsStatus',
    'SubmissionStatus',
    'MediaType',
    'BadgeTier',
    'Role',
    'School',
    'User',
    'User2Roles',
    'Event',
    'EventJudge',
    'EvaluationCriterion',
    'Submission',
    'SubmissionVote',
    'SubmissionScore',
    'SubmissionResult',
    'Badge',
    'SiteSetting',
    'Notification'
]
