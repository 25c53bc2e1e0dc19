"""Per-row transform execution with local rejection handling.

A row that raises ``RecordRejectedError`` is turned into a dead-letter
entry; every other row still flows through, so a single malformed
record never aborts the batch.
"""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

from core.errors import RecordRejectedError
from core.logging_config import get_logger
from core.types import RejectedRow, StagedRow

_LOGGER = get_logger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


def reject_row(row: StagedRow, error: RecordRejectedError) -> RejectedRow:
    """Build a dead-letter entry from a rejection error."""
    _LOGGER.debug(
        "record_rejected",
        table_name=row.table_name,
        row_number=row.row_number,
        reason=str(error),
    )
    return RejectedRow(
        table_name=row.table_name,
        row_number=row.row_number,
        reason=str(error),
        values=dict(row.values),
    )


def apply_row_transform(
    items: Iterable[InputT],
    transform: Callable[[InputT], OutputT],
    row_of: Callable[[InputT], StagedRow],
) -> tuple[list[OutputT], list[RejectedRow]]:
    """Apply a per-row transform and collect rejections.

    Args:
        items: Inputs in processing order.
        transform: Per-row mapping that may raise ``RecordRejectedError``.
        row_of: Returns the staged row an input came from.

    Returns:
        Pair of transformed outputs and rejected rows.
    """
    outputs: list[OutputT] = []
    rejected: list[RejectedRow] = []
    for item in items:
        try:
            outputs.append(transform(item))
        except RecordRejectedError as error:
            rejected.append(reject_row(row_of(item), error))
    return outputs, rejected
