"""
Report-writer seam.

The narrative report is produced by an external text generator. This module
builds the payload it receives (computed assessments only, never raw input)
and checks that what comes back is usable text. The text itself is opaque.
"""

import logging
from typing import Any, Callable, Dict, Optional

from classification import classify_assessment
from core import assessment_to_record
from shared_models import Assessment

logger = logging.getLogger(__name__)

ReportWriter = Callable[[Dict[str, Any]], str]


class ReportGenerationError(Exception):
    """Raised when the report writer fails or returns no text"""

    pass


def build_report_context(
    current: Assessment, previous: Optional[Assessment] = None
) -> Dict[str, Any]:
    """
    Payload handed to the report writer.

    Returns:
        dict: 'current' and 'previous' records (previous may be None),
        'methodology' (body-fat method and BMR formula of the current
        record) and 'classifications' of the current record.
    """
    return {
        "current": assessment_to_record(current),
        "previous": assessment_to_record(previous) if previous is not None else None,
        "methodology": {
            "fat_method": current.fat_method.value,
            "tmb_method": current.tmb_method.value,
        },
        "classifications": classify_assessment(current),
    }


def generate_report(
    writer: ReportWriter,
    current: Assessment,
    previous: Optional[Assessment] = None,
) -> str:
    """
    Calls the report writer and returns its text unchanged.

    Raises:
        ReportGenerationError: If the writer raises, or returns something
            that is not a non-empty string.
    """
    context = build_report_context(current, previous)
    try:
        text = writer(context)
    except Exception as e:
        logger.error(f"Report writer failed for assessment {current.id}: {e}")
        raise ReportGenerationError(f"Report writer failed: {e}") from e

    if not isinstance(text, str) or not text.strip():
        raise ReportGenerationError(
            f"Report writer returned no text for assessment {current.id}"
        )
    return text
