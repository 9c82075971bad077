import logging
from dataclasses import dataclass, field
from typing import List, Optional

from miniapp_schema.config import DEFAULT_CONFIG, ValidatorConfig
from miniapp_schema.ir.errors import ValidationIssue

logger = logging.getLogger(__name__)


@dataclass
class ValidationContext:
    # Allow-lists and limits (authoritative for this run)
    config: ValidatorConfig = field(default_factory=lambda: DEFAULT_CONFIG)

    # Envelope base URL, threaded to dynamic and relative http actions
    base_url: Optional[str] = None

    # Soft findings that do not abort validation
    warnings: List[ValidationIssue] = field(default_factory=list)

    def add_warning(self, code: str, message: str, path: Optional[str] = None):
        logger.warning("%s%s", message, f" (at {path})" if path else "")
        self.warnings.append(
            ValidationIssue(level="warning", code=code, message=message, path=path)
        )


def ensure_context(context: Optional[ValidationContext]) -> ValidationContext:
    return context if context is not None else ValidationContext()
