"""
Ordered rule evaluation (the validation bucket).

Call sites order cheap, structural checks (account state) before specific
ones (ownership, membership) so that the first failure is the most relevant
diagnosis. Evaluation stops at that first failure.
"""

from typing import Iterable, List, Sequence

from src.kernel.errors import DomainError
from src.kernel.validation.rules import Rule
from src.logging_config import get_logger

logger = get_logger(__name__)


def evaluate_rules(rules: Sequence[Rule]) -> None:
    """
    Run rules in order and raise the first failure.

    Rules after the first failing one are never checked. An empty
    sequence passes.
    """
    for rule in rules:
        try:
            rule.check()
        except DomainError as exc:
            logger.debug(
                "Rule failed",
                extra={"rule": type(rule).__name__, "kind": exc.kind.value},
            )
            raise


class RuleSet:
    """
    Ordered, append-only collection of rules for one decision.

    Usage:
        RuleSet.of(
            ActorStateRule(actor.state),
            ActorHasNoRoleRule(actor.roles),
        ).add(EntityIsDeletedRule(board.is_deleted, EntityKind.BOARD)).evaluate()
    """

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: List[Rule] = list(rules)

    @classmethod
    def of(cls, *rules: Rule) -> "RuleSet":
        return cls(rules)

    def add(self, rule: Rule) -> "RuleSet":
        """Append a rule and return this set for chaining."""
        self._rules.append(rule)
        return self

    def extend(self, rules: Iterable[Rule]) -> "RuleSet":
        self._rules.extend(rules)
        return self

    @property
    def rules(self) -> tuple:
        return tuple(self._rules)

    def evaluate(self) -> None:
        """Evaluate all rules; raises the first failure. Safe to call again."""
        evaluate_rules(self.rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"<RuleSet {[type(rule).__name__ for rule in self._rules]}>"
