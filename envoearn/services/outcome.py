# envoearn/services/outcome.py
import logging
from dataclasses import dataclass, field
from typing import Any, List

logger = logging.getLogger(__name__)


@dataclass
class Outcome:
    """Result of a primary transition plus any best-effort effects that failed.

    `result` is the record the primary step produced. A non-empty `warnings`
    list means the transition stuck but something attached to it did not.
    """

    result: Any
    warnings: List[str] = field(default_factory=list)

    @property
    def fully_succeeded(self) -> bool:
        return not self.warnings

    def warn(self, message: str, *args) -> None:
        text = message % args if args else message
        logger.error(text)
        self.warnings.append(text)
