from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class SweepResult:
    """Counters for a per-employee batch run.

    One employee failing never stops the run; ``errors`` keeps a short
    description per failure.
    """

    processed: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    cancelled: bool = False
    errors: List[str] = field(default_factory=list)

    def record_failure(self, user_id: int, exc: BaseException) -> None:
        self.failed += 1
        self.errors.append(f"user {user_id}: {exc}")
