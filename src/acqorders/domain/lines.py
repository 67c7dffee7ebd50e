"""Line reconciliation: three-way diff of line items and line numbering.

Pure functions, no I/O. Inputs are never mutated; the plan holds renumbered
copies ready for the orchestrator to dispatch.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from logging import getLogger
from typing import TYPE_CHECKING, Final

from acqorders.domain.errors import ErrorCode, ValidationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from acqorders.domain.model import LineItem

log = getLogger(__name__)

PO_LINE_NUMBER_PATTERN: Final = re.compile(r"^([A-Za-z0-9]{5,16})(-[0-9]{1,3})$")
MAX_LINE_SEQUENCE: Final = 999


@dataclass(slots=True)
class LinePlan:
    """Disjoint create/update/delete sets for one reconciliation run.

    ``lines`` lists the incoming lines (renumbered) in request order; the
    entries of ``to_create`` and ``to_update`` are the same objects.
    """

    lines: list[LineItem] = field(default_factory=list["LineItem"])
    to_create: list[LineItem] = field(default_factory=list["LineItem"])
    to_update: list[LineItem] = field(default_factory=list["LineItem"])
    to_delete: list[LineItem] = field(default_factory=list["LineItem"])
    unparseable: list[str] = field(default_factory=list[str])

    @property
    def is_empty(self) -> bool:
        return not (self.to_create or self.to_update or self.to_delete)


def line_number_suffix(number: str | None) -> str | None:
    """Return the ``-<sequence>`` suffix of a well-formed line number."""

    if number is None:
        return None
    match = PO_LINE_NUMBER_PATTERN.match(number)
    return match.group(2) if match else None


def build_line_number(stored_number: str | None, po_number: str) -> str | None:
    """Renumber ``stored_number`` under ``po_number``, or ``None`` if unparseable."""

    suffix = line_number_suffix(stored_number)
    if suffix is None:
        return None
    return f"{po_number}{suffix}"


def plan_line_changes(
    incoming: Sequence[LineItem],
    stored: Sequence[LineItem],
    po_number: str,
) -> LinePlan:
    """Classify ``incoming`` against ``stored`` by line id and renumber."""

    stored_by_id = {line.id: line for line in stored if line.id is not None}
    incoming_ids = {line.id for line in incoming if line.id is not None}

    new_count = sum(1 for line in incoming if line.id not in stored_by_id)
    new_numbers = iter(_new_line_numbers(new_count, stored, po_number))

    plan = LinePlan()
    for line in incoming:
        stored_line = stored_by_id.get(line.id) if line.id is not None else None
        if stored_line is None:
            created = replace(line, po_line_number=next(new_numbers))
            plan.to_create.append(created)
            plan.lines.append(created)
            continue
        updated = replace(line, po_line_number=_renumber(stored_line, po_number, plan))
        plan.to_update.append(updated)
        plan.lines.append(updated)

    plan.to_delete.extend(line for line in stored if line.id not in incoming_ids)
    return plan


def plan_renumbering(stored: Sequence[LineItem], po_number: str) -> LinePlan:
    """Renumber every stored line under ``po_number``; nothing is created or deleted."""

    plan = LinePlan()
    for line in stored:
        updated = replace(line, po_line_number=_renumber(line, po_number, plan))
        plan.to_update.append(updated)
        plan.lines.append(updated)
    return plan


def _renumber(stored_line: LineItem, po_number: str, plan: LinePlan) -> str | None:
    number = build_line_number(stored_line.po_line_number, po_number)
    if number is not None:
        return number
    log.warning(
        "PO line %s has invalid or missing number %r; keeping it unchanged",
        stored_line.id,
        stored_line.po_line_number,
    )
    if stored_line.id is not None:
        plan.unparseable.append(stored_line.id)
    return stored_line.po_line_number


def _new_line_numbers(count: int, stored: Sequence[LineItem], po_number: str) -> list[str]:
    # A single new line takes the bare PO number; storage assigns its sequence.
    if count <= 1:
        return [po_number] * count
    start = max(_sequences(stored), default=0) + 1
    last = start + count - 1
    if last > MAX_LINE_SEQUENCE:
        raise ValidationError(
            code=ErrorCode.LINE_SEQUENCE_EXCEEDED, poNumber=po_number, sequence=str(last)
        )
    return [f"{po_number}-{sequence}" for sequence in range(start, start + count)]


def _sequences(lines: Sequence[LineItem]) -> list[int]:
    sequences: list[int] = []
    for line in lines:
        suffix = line_number_suffix(line.po_line_number)
        if suffix is not None:
            sequences.append(int(suffix[1:]))
    return sequences
