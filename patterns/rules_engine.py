"""Pure-function rules engine pattern.

Rules are stateless functions: (entity, context) -> RuleResult.
No database, no side effects. This makes them:
- Trivially testable (pure input/output)
- Composable (chain multiple rules)
- Auditable (deterministic, explainable)

evaluate_in_order() composes them lazily and stops at the first failure, so
the reported failure is deterministic when several rules would fail at once.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class RuleResult:
    """Outcome of a single rule evaluation."""

    passed: bool
    rule_name: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class RuleSetResult:
    """Aggregate outcome of multiple rules."""

    results: list[RuleResult]
    all_passed: bool = field(init=False)
    failed: list[RuleResult] = field(init=False)

    def __post_init__(self):
        self.failed = [r for r in self.results if not r.passed]
        self.all_passed = len(self.failed) == 0

    @property
    def first_failure(self) -> RuleResult | None:
        return self.failed[0] if self.failed else None


# ---------------------------------------------------------------------------
# Rule composition
# ---------------------------------------------------------------------------

def evaluate_in_order(checks: Iterable[Callable[[], RuleResult]]) -> RuleSetResult:
    """Run deferred rules in order, stopping at the first failure.

    Example::

        result = evaluate_in_order([
            lambda: check_minimum_order(promotion, cart_total),
            lambda: check_category_match(promotion, cart_items),
        ])
        if not result.all_passed:
            return result.first_failure.message

    Rules after the first failure are never called.
    """
    results: list[RuleResult] = []
    for check in checks:
        outcome = check()
        results.append(outcome)
        if not outcome.passed:
            break
    return RuleSetResult(results=results)
