"""Orchestration layer - soft-delete lifecycle, locker and membership state machines."""

from src.orchestration.lifecycle import Transition, apply_transition, transition_rules
from src.orchestration.locker_actions import apply_locker_action
from src.orchestration.membership import MembershipActor, can_transition, transition_member

__all__ = [
    "MembershipActor",
    "Transition",
    "apply_locker_action",
    "apply_transition",
    "can_transition",
    "transition_member",
    "transition_rules",
]
