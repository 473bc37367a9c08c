"""Authorization decision.

The engine's only output. A Decision is immutable and deterministic for a
given catalog, binding snapshot and clock reading, which is what makes it
safe to cache.

Usage:
    decision = await engine.evaluate(subject_id, "node.view", node_id)
    if not decision.allowed:
        raise HTTPException(status_code=403, detail="Permission denied")

    decision.as_response()  # {"allowed": False, "reason": "no_matching_binding"}
"""

from dataclasses import dataclass
from typing import Any

from scopeguard.domain.entities.role_binding import RoleBinding
from scopeguard.domain.enums import DecisionOutcome, DecisionReason


@dataclass(frozen=True, slots=True, kw_only=True)
class Decision:
    """Outcome of one authorization check.

    Attributes:
        outcome: ALLOW or DENY.
        reason: GRANTED for allows, one of the deny reasons otherwise.
        matched_binding: Most specific binding that granted access
            (allows only).
    """

    outcome: DecisionOutcome
    reason: DecisionReason
    matched_binding: RoleBinding | None = None

    def __post_init__(self) -> None:
        if (self.outcome is DecisionOutcome.ALLOW) != (
            self.reason is DecisionReason.GRANTED
        ):
            raise ValueError(
                f"Reason '{self.reason.value}' is inconsistent with outcome "
                f"'{self.outcome.value}'"
            )

    @classmethod
    def allow(cls, matched_binding: RoleBinding) -> "Decision":
        return cls(
            outcome=DecisionOutcome.ALLOW,
            reason=DecisionReason.GRANTED,
            matched_binding=matched_binding,
        )

    @classmethod
    def deny(cls, reason: DecisionReason) -> "Decision":
        return cls(outcome=DecisionOutcome.DENY, reason=reason)

    @property
    def allowed(self) -> bool:
        return self.outcome is DecisionOutcome.ALLOW

    @property
    def cacheable(self) -> bool:
        """Store outages are transient and never cached."""
        return self.reason is not DecisionReason.STORE_UNAVAILABLE

    def as_response(self) -> dict[str, Any]:
        """Inbound contract shape: ``{"allowed": bool, "reason": str}``."""
        return {"allowed": self.allowed, "reason": self.reason.value}

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "reason": self.reason.value,
            "matched_binding": (
                self.matched_binding.to_dict() if self.matched_binding else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Decision":
        matched = data.get("matched_binding")
        return cls(
            outcome=DecisionOutcome(data["outcome"]),
            reason=DecisionReason(data["reason"]),
            matched_binding=RoleBinding.from_dict(matched) if matched else None,
        )
