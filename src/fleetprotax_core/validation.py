"""Boundary validation of raw entry records.

Records arrive as plain dicts (from a form, a storage backend or an
import). This module turns them into typed entries before they reach the
calculators. A bad record is excluded and reported; it never aborts the
rest of the batch.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError
from .models import EquipmentEntry, ExpenseEntry, MonthlyEmployerExpense, TripEntry

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", TripEntry, EquipmentEntry, ExpenseEntry, MonthlyEmployerExpense)


class RejectedRecord(BaseModel):
    """A raw record that failed validation, with every reason."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0, description="Position of the record in the input batch")
    record_id: Optional[str] = None
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class ParsedRecords(Generic[ModelT]):
    """Valid entries and rejected records from one batch."""

    valid: tuple[ModelT, ...] = ()
    rejected: tuple[RejectedRecord, ...] = ()

    @property
    def all_valid(self) -> bool:
        return not self.rejected


def _format_errors(error: PydanticValidationError) -> list[str]:
    messages = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "record"
        messages.append(f"{location}: {detail['msg']}")
    return messages


def validate_record(raw: Mapping[str, Any], model: type[ModelT]) -> ModelT:
    """Validate a single raw record.

    Args:
        raw: Record as a mapping (snake_case or camelCase keys)
        model: Entry model to build

    Returns:
        Typed entry

    Raises:
        ValidationError: With the first failing field and all messages in details
    """
    try:
        return model.model_validate(raw)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ValidationError(
            f"Invalid {model.__name__}: {first['msg']}",
            field=field,
            value=first.get("input") if not isinstance(first.get("input"), Mapping) else None,
            constraint=first["type"],
            details={"errors": _format_errors(e)},
        ) from e


def parse_records(raw_records: Iterable[Mapping[str, Any]], model: type[ModelT]) -> ParsedRecords[ModelT]:
    """Validate a batch, keeping the good records and flagging the bad ones."""
    valid: list[ModelT] = []
    rejected: list[RejectedRecord] = []

    for index, raw in enumerate(raw_records):
        try:
            valid.append(model.model_validate(raw))
        except PydanticValidationError as e:
            record_id = raw.get("id") if isinstance(raw, Mapping) else None
            rejected.append(
                RejectedRecord(
                    index=index,
                    record_id=None if record_id is None else str(record_id),
                    errors=tuple(_format_errors(e)),
                )
            )

    if rejected:
        logger.warning(
            "records_rejected",
            model=model.__name__,
            rejected=len(rejected),
            accepted=len(valid),
        )

    return ParsedRecords(valid=tuple(valid), rejected=tuple(rejected))
