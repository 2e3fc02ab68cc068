"""Runtime configuration model for the escalation pipeline.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_DATA_ROOT, DEFAULT_PAGE_SIZE
from core.errors import EscalationConfigError


@dataclass(frozen=True)
class EscalationConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for document collections.
        s3_region: Optional default AWS region for S3 reads.
        s3_profile: Optional AWS profile for boto3 session initialization.
        vocabulary_path: Optional YAML file overriding built-in dictionaries.
        page_size: Default page size for record listings.
    """

    data_root: Path
    s3_region: str | None
    s3_profile: str | None
    vocabulary_path: Path | None
    page_size: int

    @classmethod
    def from_env(cls) -> "EscalationConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            EscalationConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("ESCALATIONS_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        vocabulary_value = os.getenv("ESCALATIONS_VOCABULARY_FILE")
        page_size_value = os.getenv("ESCALATIONS_PAGE_SIZE", str(DEFAULT_PAGE_SIZE))
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            s3_region=os.getenv("ESCALATIONS_S3_REGION"),
            s3_profile=os.getenv("ESCALATIONS_S3_PROFILE"),
            vocabulary_path=(
                Path(vocabulary_value).expanduser().resolve() if vocabulary_value else None
            ),
            page_size=_parse_page_size(page_size_value),
        )


def _parse_page_size(raw_value: str) -> int:
    """Parse the page size environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed positive page size.

    Raises:
        EscalationConfigError: If value is not a positive integer.
    """
    try:
        page_size = int(raw_value)
    except ValueError as error:
        raise EscalationConfigError(
            "Invalid ESCALATIONS_PAGE_SIZE value: "
            f"expected integer, got '{raw_value}'. "
            "Set ESCALATIONS_PAGE_SIZE to a positive number."
        ) from error
    if page_size <= 0:
        raise EscalationConfigError(
            f"Invalid ESCALATIONS_PAGE_SIZE value: {page_size} must be positive. "
            "Set ESCALATIONS_PAGE_SIZE to a positive number."
        )
    return page_size
