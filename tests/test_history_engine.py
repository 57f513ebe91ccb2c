"""
Tests — process history engine.

Covers:
    - create_process seeding (timelines, id, coercion, required fields)
    - apply_update phase / location timelines
    - log_history gate, no-op updates, append-only + single open interval
    - field merge, id protection, attachment concatenation
    - legacy records (missing location / timelines, ``fase`` key)
"""

import copy

import pytest

from process_tracker.core.exceptions import LocationDecodeError, ValidationError
from process_tracker.models.process import (
    Attachment,
    HistoryEntry,
    Location,
    LocationEntry,
    Process,
)
from process_tracker.services.history_engine import apply_update, create_process

T0 = "2024-01-10T09:00:00.000Z"
T1 = "2024-02-01T14:30:00.000Z"
T2 = "2024-03-05T08:15:30.250Z"
T3 = "2024-04-20T17:45:00.000Z"


def _draft(t0, **extra):
    data = {"phase": "Draft", "location": {"sector": "A", "responsible": "X"}}
    data.update(extra)
    return create_process(data, t0, lambda: 1700000000000)


def _open_entries(timeline):
    return [i for i, entry in enumerate(timeline) if entry.end_date is None]


# ═════════════════════════════════════════════════════════════════════════════
# create_process
# ═════════════════════════════════════════════════════════════════════════════

class TestCreateProcess:
    def test_seeds_both_timelines_with_one_open_entry(self, t0):
        process = _draft(t0)
        assert process.id == 1700000000000
        assert process.creation_date == T0
        assert process.history == [HistoryEntry(phase="Draft", start_date=T0, end_date=None)]
        assert process.location_history == [
            LocationEntry(sector="A", responsible="X", start_date=T0, end_date=None)
        ]
        assert process.attachments == []

    def test_location_sent_as_json_text_is_decoded(self, t0):
        process = create_process(
            {"phase": "Draft", "location": '{"sector": "Legal", "responsible": "Ana"}'},
            t0, lambda: 5,
        )
        assert process.location == Location(sector="Legal", responsible="Ana")
        assert process.location_history[0].sector == "Legal"

    def test_value_text_parsed_to_float(self, t0):
        assert _draft(t0, value="1500.75").value == 1500.75

    @pytest.mark.parametrize("raw", [None, ""])
    def test_missing_or_empty_value_defaults_to_zero(self, t0, raw):
        process = _draft(t0) if raw is None else _draft(t0, value=raw)
        assert process.value == 0.0

    def test_bad_value_rejected(self, t0):
        with pytest.raises(ValidationError) as exc:
            _draft(t0, value="twelve")
        assert "value" in exc.value.details

    def test_id_from_input_is_ignored(self, t0):
        assert _draft(t0, id=42).id == 1700000000000

    def test_extra_fields_are_kept(self, t0):
        process = _draft(t0, processNumber="PN-7/2024", contractDate="2024-03-15")
        assert process.extra["processNumber"] == "PN-7/2024"
        assert process.contract_date == "2024-03-15"
        assert process.to_dict()["processNumber"] == "PN-7/2024"

    def test_attachments_seeded(self, t0):
        process = _draft(t0, attachments=[
            {"filename": "1-a.pdf", "originalname": "a.pdf", "path": "/u/1-a.pdf"},
        ])
        assert process.attachments == [Attachment("1-a.pdf", "a.pdf", "/u/1-a.pdf")]

    def test_phase_and_location_required(self, t0):
        with pytest.raises(ValidationError) as exc:
            create_process({}, t0, lambda: 1)
        assert set(exc.value.details) == {"phase", "location"}

    def test_malformed_location_text_fails_fast(self, t0):
        with pytest.raises(LocationDecodeError):
            create_process({"phase": "Draft", "location": "{sector: A"}, t0, lambda: 1)

    def test_legacy_fase_key_accepted(self, t0):
        process = create_process(
            {"fase": "Draft", "location": {"sector": "A", "responsible": "X"}}, t0, lambda: 1,
        )
        assert process.phase == "Draft"
        assert "fase" not in process.to_dict()


# ═════════════════════════════════════════════════════════════════════════════
# apply_update — timelines
# ═════════════════════════════════════════════════════════════════════════════

class TestPhaseHistory:
    def test_phase_change_closes_and_opens(self, t0, t1):
        updated = apply_update(_draft(t0), {"phase": "Review"}, True, t1)
        assert updated.phase == "Review"
        assert [h.to_dict() for h in updated.history] == [
            {"phase": "Draft", "startDate": T0, "endDate": T1},
            {"phase": "Review", "startDate": T1, "endDate": None},
        ]

    def test_phase_change_without_location_leaves_location_history(self, t0, t1):
        before = _draft(t0)
        updated = apply_update(before, {"phase": "Review"}, True, t1)
        assert updated.location_history == before.location_history

    def test_empty_phase_is_treated_as_absent(self, t0, t1):
        updated = apply_update(_draft(t0), {"phase": ""}, True, t1)
        assert updated.phase == "Draft"
        assert len(updated.history) == 1

    def test_empty_history_is_appended_to_without_error(self, t0, t1):
        legacy = Process(id=9, phase="Draft", location=Location("A", "X"))
        updated = apply_update(legacy, {"phase": "Review"}, True, t1)
        assert [h.to_dict() for h in updated.history] == [
            {"phase": "Review", "startDate": T1, "endDate": None},
        ]


class TestLocationHistory:
    def test_sector_change_closes_and_opens(self, t0, t2):
        updated = apply_update(
            _draft(t0), {"location": {"sector": "B", "responsible": "X"}}, True, t2,
        )
        assert [h.to_dict() for h in updated.location_history] == [
            {"sector": "A", "responsible": "X", "startDate": T0, "endDate": T2},
            {"sector": "B", "responsible": "X", "startDate": T2, "endDate": None},
        ]
        assert updated.location == Location("B", "X")

    def test_responsible_change_alone_counts(self, t0, t2):
        updated = apply_update(
            _draft(t0), {"location": {"sector": "A", "responsible": "Y"}}, True, t2,
        )
        assert len(updated.location_history) == 2

    def test_location_as_json_text(self, t0, t2):
        updated = apply_update(
            _draft(t0), {"location": '{"sector": "B", "responsible": "Y"}'}, True, t2,
        )
        assert updated.location_history[-1].sector == "B"

    def test_missing_existing_location_triggers_append(self, t1):
        legacy = Process(id=9, phase="Draft")
        updated = apply_update(legacy, {"location": {"sector": "B", "responsible": "Y"}}, True, t1)
        assert [h.to_dict() for h in updated.location_history] == [
            {"sector": "B", "responsible": "Y", "startDate": T1, "endDate": None},
        ]

    def test_malformed_location_text_raises(self, t0, t1):
        with pytest.raises(LocationDecodeError):
            apply_update(_draft(t0), {"location": "not json"}, True, t1)

    def test_location_must_be_an_object(self, t0, t1):
        with pytest.raises(LocationDecodeError):
            apply_update(_draft(t0), {"location": "[1, 2]"}, True, t1)


class TestGateAndNoOp:
    def test_unchanged_phase_and_location_is_noop(self, t0, t1):
        before = _draft(t0)
        updated = apply_update(
            before,
            {"phase": "Draft", "location": {"sector": "A", "responsible": "X"}},
            True, t1,
        )
        assert [h.to_dict() for h in updated.history] == [h.to_dict() for h in before.history]
        assert [h.to_dict() for h in updated.location_history] == [
            h.to_dict() for h in before.location_history
        ]

    def test_log_history_false_keeps_timelines_but_merges(self, t0, t1):
        before = _draft(t0)
        updated = apply_update(
            before,
            {"phase": "Review", "location": {"sector": "B", "responsible": "Y"}, "value": "10"},
            False, t1,
        )
        assert updated.history == before.history
        assert updated.location_history == before.location_history
        assert updated.phase == "Review"
        assert updated.location == Location("B", "Y")
        assert updated.value == 10.0

    def test_log_history_must_be_bool(self, t0, t1):
        with pytest.raises(ValidationError):
            apply_update(_draft(t0), {"phase": "Review"}, "true", t1)


# ═════════════════════════════════════════════════════════════════════════════
# apply_update — invariants across sequences
# ═════════════════════════════════════════════════════════════════════════════

class TestAppendOnly:
    UPDATES = [
        {"phase": "Review"},
        {"location": {"sector": "B", "responsible": "Y"}},
        {"phase": "Review", "location": {"sector": "B", "responsible": "Y"}},
        {"phase": "Contracted", "location": {"sector": "C", "responsible": "Z"}},
        {"value": "99"},
        {"phase": "Archived"},
    ]

    def test_history_never_shrinks_or_rewrites(self, t0, t1, t2, t3):
        clocks = [t1, t1, t2, t2, t3, t3]
        process = _draft(t0)
        for update, now in zip(self.UPDATES, clocks):
            before = copy.deepcopy(process)
            process = apply_update(process, update, True, now)

            assert len(process.history) >= len(before.history)
            assert len(process.location_history) >= len(before.location_history)
            for old, new in zip(before.history, process.history):
                assert (old.phase, old.start_date) == (new.phase, new.start_date)
                if not old.is_open:
                    assert new.end_date == old.end_date
            for old, new in zip(before.location_history, process.location_history):
                assert (old.sector, old.responsible, old.start_date) == (
                    new.sector, new.responsible, new.start_date
                )
                if not old.is_open:
                    assert new.end_date == old.end_date

    def test_exactly_one_open_entry_and_it_is_last(self, t0, t1, t2, t3):
        clocks = [t1, t1, t2, t2, t3, t3]
        process = _draft(t0)
        for update, now in zip(self.UPDATES, clocks):
            process = apply_update(process, update, True, now)
            assert _open_entries(process.history) == [len(process.history) - 1]
            assert _open_entries(process.location_history) == [len(process.location_history) - 1]
            assert process.history[-1].phase == process.phase
            assert process.location_history[-1].sector == process.location.sector
            assert process.location_history[-1].responsible == process.location.responsible

    def test_closed_entries_end_after_they_start(self, t0, t1, t2, t3):
        process = _draft(t0)
        for update, now in zip(self.UPDATES, [t1, t1, t2, t2, t3, t3]):
            process = apply_update(process, update, True, now)
        for entry in process.history[:-1] + process.location_history[:-1]:
            assert entry.end_date is not None
            assert entry.end_date >= entry.start_date

    def test_existing_process_is_not_mutated(self, t0, t1):
        before = _draft(t0)
        snapshot = before.to_dict()
        apply_update(before, {"phase": "Review", "value": 3}, True, t1)
        assert before.to_dict() == snapshot


# ═════════════════════════════════════════════════════════════════════════════
# apply_update — merge
# ═════════════════════════════════════════════════════════════════════════════

class TestMerge:
    def test_id_is_never_overwritten(self, t0, t1):
        updated = apply_update(_draft(t0), {"id": 1, "phase": "Review"}, True, t1)
        assert updated.id == 1700000000000

    def test_engine_owned_fields_ignored(self, t0, t1):
        before = _draft(t0)
        updated = apply_update(
            before,
            {"history": [], "locationHistory": [], "creationDate": "1999-01-01"},
            True, t1,
        )
        assert updated.history == before.history
        assert updated.location_history == before.location_history
        assert updated.creation_date == T0

    def test_absent_fields_retained(self, t0, t1):
        before = _draft(t0, value=250, processNumber="PN-1", contractDate="2024-01-02")
        updated = apply_update(before, {"object": "Laptops"}, True, t1)
        assert updated.value == 250.0
        assert updated.extra == {"processNumber": "PN-1", "object": "Laptops"}
        assert updated.contract_date == "2024-01-02"

    def test_empty_value_becomes_zero(self, t0, t1):
        updated = apply_update(_draft(t0, value=250), {"value": ""}, True, t1)
        assert updated.value == 0.0

    def test_attachments_are_concatenated_in_order(self, t0, t1):
        first = Attachment("1-a.pdf", "a.pdf", "/u/1-a.pdf")
        before = _draft(t0, attachments=[first])
        new = [Attachment("2-b.pdf", "b.pdf", "/u/2-b.pdf"), Attachment("2-c.pdf", "c.pdf", "/u/2-c.pdf")]
        updated = apply_update(before, {"attachments": new}, True, t1)
        assert [a.stored_filename for a in updated.attachments] == ["1-a.pdf", "2-b.pdf", "2-c.pdf"]


# ═════════════════════════════════════════════════════════════════════════════
# Scenario
# ═════════════════════════════════════════════════════════════════════════════

def test_full_lifecycle(t0, t1, t2):
    process = _draft(t0)
    assert [h.to_dict() for h in process.history] == [
        {"phase": "Draft", "startDate": T0, "endDate": None},
    ]

    process = apply_update(process, {"phase": "Review"}, True, t1)
    assert [h.to_dict() for h in process.history] == [
        {"phase": "Draft", "startDate": T0, "endDate": T1},
        {"phase": "Review", "startDate": T1, "endDate": None},
    ]

    phase_history = copy.deepcopy(process.history)
    process = apply_update(process, {"location": {"sector": "B", "responsible": "Y"}}, True, t2)
    assert process.history == phase_history
    assert [h.to_dict() for h in process.location_history] == [
        {"sector": "A", "responsible": "X", "startDate": T0, "endDate": T2},
        {"sector": "B", "responsible": "Y", "startDate": T2, "endDate": None},
    ]
