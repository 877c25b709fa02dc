"""Error taxonomy for the binding engine.

Failures inside an initialization cycle are captured as data rather than
raised: every outcome, skipped write and degraded field carries one of the
kinds below together with a human-readable reason.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    """Classification of engine failures."""

    ROOT_NOT_FOUND = "root_not_found"
    SUBCOMPONENT_NOT_FOUND = "subcomponent_not_found"
    MEMBER_NOT_FOUND = "member_not_found"
    TYPE_COERCION_FAILURE = "type_coercion_failure"
    WRITE_REJECTED = "write_rejected"
    INTERNAL = "internal"


@dataclass(frozen=True)
class Issue:
    """A single degraded (component, field) pair.

    Attributes:
        component: Logical component name
        field: Field name, or "" when the whole component is affected
        kind: Failure classification
        reason: Diagnostic message
    """
    component: str
    field: str
    kind: ErrorKind
    reason: str

    def __str__(self) -> str:
        target = f"{self.component}.{self.field}" if self.field else self.component
        return f"{target}: {self.kind.value} ({self.reason})"
