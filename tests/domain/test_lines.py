from __future__ import annotations

import logging

import pytest

from acqorders.domain.errors import ErrorCode, ValidationError
from acqorders.domain.lines import (
    build_line_number,
    line_number_suffix,
    plan_line_changes,
    plan_renumbering,
)
from tests.support.fakes import make_line


@pytest.mark.parametrize(
    ("stored", "expected"),
    [
        ("PO10001-1", "NEWPO22-1"),
        ("ABCDE-12", "NEWPO22-12"),
        ("abcdefghijklmnop-999", "NEWPO22-999"),
    ],
)
def test_build_line_number_reuses_sequence_suffix(stored: str, expected: str) -> None:
    assert build_line_number(stored, "NEWPO22") == expected


@pytest.mark.parametrize("stored", [None, "PO1-1", "PO10001", "PO10001-1234", "PO 10001-1"])
def test_build_line_number_rejects_malformed_numbers(stored: str | None) -> None:
    assert build_line_number(stored, "NEWPO22") is None


def test_renumbering_is_idempotent() -> None:
    once = build_line_number("PO10001-3", "PO20002")
    twice = build_line_number(once, "PO20002")

    assert once == twice == "PO20002-3"


def test_line_number_suffix_includes_dash() -> None:
    assert line_number_suffix("PO10001-7") == "-7"


def test_plan_classifies_lines_by_id() -> None:
    stored = [
        make_line("line-a", number="PO10001-1"),
        make_line("line-b", number="PO10001-2"),
    ]
    incoming = [make_line("line-a"), make_line(None, title="New")]

    plan = plan_line_changes(incoming, stored, "PO10001")

    assert [line.id for line in plan.to_update] == ["line-a"]
    assert [line.title for line in plan.to_create] == ["New"]
    assert [line.id for line in plan.to_delete] == ["line-b"]


def test_plan_sets_are_disjoint_and_cover_all_ids() -> None:
    stored = [make_line(f"line-{i}", number=f"PO10001-{i}") for i in range(1, 5)]
    incoming = [make_line("line-2"), make_line("line-3"), make_line("line-9")]

    plan = plan_line_changes(incoming, stored, "PO10001")

    create_ids = {line.id for line in plan.to_create}
    update_ids = {line.id for line in plan.to_update}
    delete_ids = {line.id for line in plan.to_delete}
    assert not (create_ids & update_ids or create_ids & delete_ids or update_ids & delete_ids)
    assert create_ids | update_ids | delete_ids == {
        line.id for line in [*incoming, *stored]
    }


def test_plan_renumbers_updates_under_new_po_number() -> None:
    stored = [make_line("line-a", number="PO10001-4")]

    plan = plan_line_changes([make_line("line-a", number="PO10001-4")], stored, "PO20002")

    assert plan.to_update[0].po_line_number == "PO20002-4"
    assert plan.lines == plan.to_update


def test_plan_keeps_unparseable_numbers_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    stored = [make_line("line-a", number="legacy")]

    with caplog.at_level(logging.WARNING):
        plan = plan_line_changes([make_line("line-a")], stored, "PO20002")

    assert plan.to_update[0].po_line_number == "legacy"
    assert plan.unparseable == ["line-a"]
    assert "line-a" in caplog.text


def test_single_new_line_takes_bare_po_number() -> None:
    plan = plan_line_changes([make_line(None)], [], "PO10001")

    assert [line.po_line_number for line in plan.to_create] == ["PO10001"]


def test_multiple_new_lines_continue_stored_sequence() -> None:
    stored = [make_line("line-a", number="PO10001-2")]
    incoming = [make_line("line-a"), make_line(None, title="x"), make_line(None, title="y")]

    plan = plan_line_changes(incoming, stored, "PO10001")

    assert [line.po_line_number for line in plan.to_create] == ["PO10001-3", "PO10001-4"]


def test_plan_does_not_mutate_inputs() -> None:
    stored = [make_line("line-a", number="PO10001-1")]
    incoming = [make_line("line-a", number="PO10001-1")]

    plan_line_changes(incoming, stored, "PO20002")

    assert incoming[0].po_line_number == "PO10001-1"
    assert stored[0].po_line_number == "PO10001-1"


def test_plan_renumbering_only_updates() -> None:
    stored = [
        make_line("line-a", number="PO10001-1"),
        make_line("line-b", number="PO10001-2"),
    ]

    plan = plan_renumbering(stored, "PO20002")

    assert not plan.to_create
    assert not plan.to_delete
    assert [line.po_line_number for line in plan.to_update] == ["PO20002-1", "PO20002-2"]


def test_empty_plan() -> None:
    assert plan_line_changes([], [], "PO10001").is_empty


def test_new_line_sequences_stop_at_999() -> None:
    stored = [make_line("line-1", number="PO10001-998")]
    incoming = [make_line("line-1"), make_line(), make_line()]

    with pytest.raises(ValidationError) as excinfo:
        plan_line_changes(incoming, stored, "PO10001")

    assert excinfo.value.error.code is ErrorCode.LINE_SEQUENCE_EXCEEDED
    assert excinfo.value.error.parameters["sequence"] == "1000"


def test_new_line_sequences_may_reach_999() -> None:
    stored = [make_line("line-1", number="PO10001-997")]
    incoming = [make_line("line-1"), make_line(), make_line()]

    plan = plan_line_changes(incoming, stored, "PO10001")

    assert [line.po_line_number for line in plan.to_create] == ["PO10001-998", "PO10001-999"]
