"""
Validation Core - rules and ordered rule sets.
"""

from src.kernel.validation.rules import (
    ActorHasNoRoleRule,
    ActorIdentityEqualsRule,
    ActorRoleRule,
    ActorStateRule,
    CircleMembershipStatusRule,
    CommentParentRule,
    ContentsAdminRule,
    EntityIsDeletedRule,
    EntityIsNotDeletedRule,
    LockerActivityRule,
    LockerStateRule,
    Rule,
    SchemaConstraintRule,
)
from src.kernel.validation.rule_set import RuleSet, evaluate_rules

__all__ = [
    "ActorHasNoRoleRule",
    "ActorIdentityEqualsRule",
    "ActorRoleRule",
    "ActorStateRule",
    "CircleMembershipStatusRule",
    "CommentParentRule",
    "ContentsAdminRule",
    "EntityIsDeletedRule",
    "EntityIsNotDeletedRule",
    "LockerActivityRule",
    "LockerStateRule",
    "Rule",
    "RuleSet",
    "SchemaConstraintRule",
    "evaluate_rules",
]
