from enum import Enum
from typing import Dict, FrozenSet, Iterable

from fastapi import Depends, HTTPException, status

from competeedu.auth.jwt import get_current_user
from competeedu.models import User
from competeedu.models.enums import UserRole


class Action(str, Enum):
    MANAGE_EVENTS = "manage_events"
    MANAGE_RUBRIC = "manage_rubric"
    MANAGE_JUDGES = "manage_judges"
    MANAGE_USERS = "manage_users"
    MANAGE_SCHOOLS = "manage_schools"
    ASSIGN_JUDGES = "assign_judges"
    CHANGE_RESULTS_STATUS = "change_results_status"
    COMPUTE_RESULTS = "compute_results"
    PUBLISH_RESULTS = "publish_results"
    MANAGE_SITE_SETTINGS = "manage_site_settings"
    VIEW_ALL_SCORES = "view_all_scores"
    VIEW_RESULTS_DRAFT = "view_results_draft"
    VIEW_EVENT_SUBMISSIONS = "view_event_submissions"
    SUBMIT_SCORE = "submit_score"
    CREATE_SUBMISSION = "create_submission"
    SEND_NOTIFICATIONS = "send_notifications"


_ADMIN_ONLY = frozenset({UserRole.SUPER_ADMIN})

POLICY: Dict[Action, FrozenSet[UserRole]] = {
    Action.MANAGE_EVENTS: _ADMIN_ONLY,
    Action.MANAGE_RUBRIC: _ADMIN_ONLY,
    Action.MANAGE_JUDGES: _ADMIN_ONLY,
    Action.MANAGE_USERS: _ADMIN_ONLY,
    Action.MANAGE_SCHOOLS: _ADMIN_ONLY,
    Action.ASSIGN_JUDGES: _ADMIN_ONLY,
    Action.CHANGE_RESULTS_STATUS: _ADMIN_ONLY,
    Action.COMPUTE_RESULTS: _ADMIN_ONLY,
    Action.PUBLISH_RESULTS: _ADMIN_ONLY,
    Action.MANAGE_SITE_SETTINGS: _ADMIN_ONLY,
    Action.VIEW_ALL_SCORES: _ADMIN_ONLY,
    Action.VIEW_RESULTS_DRAFT: _ADMIN_ONLY,
    Action.VIEW_EVENT_SUBMISSIONS: frozenset({UserRole.JUDGE, UserRole.SUPER_ADMIN}),
    Action.SUBMIT_SCORE: frozenset({UserRole.JUDGE}),
    Action.CREATE_SUBMISSION: frozenset({UserRole.STUDENT}),
    Action.SEND_NOTIFICATIONS: frozenset({UserRole.SUPER_ADMIN, UserRole.SCHOOL_ADMIN}),
}


def is_authorized(role_names: Iterable[str], action: Action) -> bool:
    """Whether any of the given roles may perform the action"""
    allowed = POLICY.get(action, frozenset())
    names = set(role_names)
    return any(role.value in names for role in allowed)


def authorize(user: User, action: Action) -> None:
    if not is_authorized(user.role_names, action):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Insufficient permissions for '{action.value}'"
        )


def require_action(action: Action):
    """Dependency factory: resolves the current user and checks the policy"""
    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        authorize(current_user, action)
        return current_user

    return dependency
