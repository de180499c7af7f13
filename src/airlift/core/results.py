"""Per-item results accumulated by the export and import stages"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ItemResult:
    """Outcome for one image or archive"""

    item: str
    ok: bool
    # step that failed, or the last step on success
    step: str
    message: Optional[str] = None


@dataclass
class StageSummary:
    """Results of one pipeline stage"""

    stage: str
    results: List[ItemResult] = field(default_factory=list)

    def succeed(self, item: str, step: str, message: Optional[str] = None) -> ItemResult:
        result = ItemResult(item=item, ok=True, step=step, message=message)
        self.results.append(result)
        return result

    def fail(self, item: str, step: str, message: Optional[str] = None) -> ItemResult:
        result = ItemResult(item=item, ok=False, step=step, message=message)
        self.results.append(result)
        return result

    @property
    def attempted(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for result in self.results if result.ok)

    @property
    def failed(self) -> List[ItemResult]:
        return [result for result in self.results if not result.ok]

    def __str__(self) -> str:
        return f"{self.stage}: {self.succeeded}/{self.attempted} succeeded"
