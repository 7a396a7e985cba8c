from .auth import router as auth_router
from .users import router as users_router
from .schools import router as schools_router
from .events import router as events_router
from .criteria import router as criteria_router
from .submissions import router as submissions_router
from .evaluations import router as evaluations_router
from .results import router as results_router
from .badges import router as badges_router
from .votes import router as votes_router
from .cms import router as cms_router
from .notifications import router as notifications_router

__all__ = [
    'auth_router',
    'users_router',
    'schools_router',
    'events_router',
    'criteria_router',
    'submissions_router',
    'evaluations_router',
    'results_router',
    'badges_router',
    'votes_router',
    'cms_router',
    'notifications_router'
]
