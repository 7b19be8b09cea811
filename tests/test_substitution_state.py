"""Tests for the substitution reducer and schedule derivation."""

from datetime import date

from bizdesk.domain.entities import (
    COMBINED,
    FREE,
    AdditionalEntry,
    ClassSchedule,
    PeriodEntry,
    SubstitutionRecord,
    Teacher,
)
from bizdesk.domain.store import Store
from bizdesk.domain.substitution_state import (
    DAYS,
    DEFAULT_PERIODS,
    DEFAULT_TIME_SLOTS,
    Action,
    ActionType,
    empty_teacher_schedule,
    generate_teacher_schedule_from_timetable,
    initial_state,
    normalize_teacher_name,
    substitution_reducer,
    teacher_names_match,
)


def make_teacher(teacher_id, name):
    return Teacher(id=teacher_id, name=name, subject="", post="", contact_number="")


def make_class(class_id, name, cells):
    """Class with ``cells`` mapping (day, period) -> PeriodEntry."""
    schedule = {}
    for (day, period), entry in cells.items():
        schedule.setdefault(day, {})[period] = entry
    return ClassSchedule(id=class_id, class_name=name, schedule=schedule)


class TestReducer:
    """Tests for substitution_reducer."""

    def test_initial_state_defaults(self):
        state = initial_state()
        assert state.teachers == ()
        assert state.classes == ()
        assert state.substitutions == ()
        assert state.periods == DEFAULT_PERIODS
        assert state.time_slots == DEFAULT_TIME_SLOTS
        assert len(state.periods) == len(state.time_slots) == 8
        assert state.loading is False

    def test_set_loading(self):
        state = substitution_reducer(initial_state(), Action(ActionType.SET_LOADING, True))
        assert state.loading is True

    def test_teacher_lifecycle(self):
        state = initial_state()
        a = make_teacher(1, "A")
        b = make_teacher(2, "B")
        state = substitution_reducer(state, Action(ActionType.SET_TEACHERS, [a]))
        state = substitution_reducer(state, Action(ActionType.ADD_TEACHER, b))
        assert [t.name for t in state.teachers] == ["A", "B"]

        renamed = make_teacher(1, "A2")
        state = substitution_reducer(state, Action(ActionType.UPDATE_TEACHER, renamed))
        assert [t.name for t in state.teachers] == ["A2", "B"]

        state = substitution_reducer(state, Action(ActionType.DELETE_TEACHER, 1))
        assert [t.id for t in state.teachers] == [2]

    def test_set_teachers_twice_gives_same_state(self):
        teachers = [make_teacher(1, "A"), make_teacher(2, "B")]
        once = substitution_reducer(initial_state(), Action(ActionType.SET_TEACHERS, teachers))
        twice = substitution_reducer(once, Action(ActionType.SET_TEACHERS, teachers))
        assert twice == once

    def test_delete_teacher_keeps_classes_and_substitutions(self):
        record = SubstitutionRecord(
            id=1,
            date=date(2024, 7, 15),
            absent_teacher="A",
            period="1",
            original_class="XI-A",
            original_subject="English",
            substitute_teacher="B",
        )
        class_a = make_class(1, "XI-A", {("Monday", "1"): PeriodEntry("English", "A")})
        state = initial_state()
        state = substitution_reducer(
            state, Action(ActionType.SET_TEACHERS, [make_teacher(1, "A"), make_teacher(2, "B")])
        )
        state = substitution_reducer(state, Action(ActionType.SET_CLASSES, [class_a]))
        state = substitution_reducer(state, Action(ActionType.SET_SUBSTITUTIONS, [record]))

        after = substitution_reducer(state, Action(ActionType.DELETE_TEACHER, 1))
        assert [t.id for t in after.teachers] == [2]
        assert after.classes == state.classes
        assert after.substitutions == (record,)

    def test_update_unknown_id_leaves_state_equal(self):
        state = substitution_reducer(
            initial_state(), Action(ActionType.SET_TEACHERS, [make_teacher(1, "A")])
        )
        after = substitution_reducer(state, Action(ActionType.UPDATE_TEACHER, make_teacher(9, "Z")))
        assert after == state

    def test_class_lifecycle(self):
        state = initial_state()
        state = substitution_reducer(state, Action(ActionType.ADD_CLASS, make_class(1, "XI-A", {})))
        state = substitution_reducer(state, Action(ActionType.ADD_CLASS, make_class(2, "XI-B", {})))
        state = substitution_reducer(
            state, Action(ActionType.UPDATE_CLASS, make_class(2, "XII-B", {}))
        )
        assert [c.class_name for c in state.classes] == ["XI-A", "XII-B"]
        state = substitution_reducer(state, Action(ActionType.DELETE_CLASS, 1))
        assert [c.id for c in state.classes] == [2]

    def test_add_substitution_appends(self):
        record = SubstitutionRecord(
            id=1,
            date=date(2024, 7, 15),
            absent_teacher="A",
            period="1",
            original_class="XI-A",
            original_subject="English",
            substitute_teacher="B",
        )
        state = substitution_reducer(initial_state(), Action(ActionType.ADD_SUBSTITUTION, record))
        assert state.substitutions == (record,)

    def test_periods_and_time_slots(self):
        state = substitution_reducer(initial_state(), Action(ActionType.SET_PERIODS, ["1", "2"]))
        state = substitution_reducer(state, Action(ActionType.ADD_PERIOD, "3"))
        assert state.periods == ("1", "2", "3")

        state = substitution_reducer(state, Action(ActionType.SET_TIME_SLOTS, ["8:00"]))
        state = substitution_reducer(state, Action(ActionType.UPDATE_TIME_SLOT, (2, "10:00")))
        assert state.time_slots == ("8:00", "", "10:00")

    def test_unknown_action_returns_same_state(self):
        state = initial_state()
        assert substitution_reducer(state, Action("NOT_AN_ACTION")) is state

    def test_reducer_does_not_mutate_input(self):
        state = initial_state()
        substitution_reducer(state, Action(ActionType.ADD_TEACHER, make_teacher(1, "A")))
        assert state.teachers == ()


class TestTeacherNames:
    """Tests for teacher name matching."""

    def test_normalize(self):
        assert normalize_teacher_name("  Priya   RATHORE ") == "priya rathore"

    def test_match_ignores_case_and_spacing(self):
        assert teacher_names_match("Priya Rathore", " priya  rathore")

    def test_blank_timetable_name_never_matches(self):
        assert not teacher_names_match("Priya", "")
        assert not teacher_names_match("Priya", "   ")

    def test_different_names_do_not_match(self):
        assert not teacher_names_match("Priya", "Pri")


class TestScheduleDerivation:
    """Tests for generate_teacher_schedule_from_timetable."""

    periods = ("1", "2")

    def test_empty_schedule_is_all_free(self):
        schedule = empty_teacher_schedule(self.periods)
        assert set(schedule) == set(DAYS)
        assert all(cell == FREE for cells in schedule.values() for cell in cells.values())

    def test_primary_teacher_gets_class_name(self):
        teachers = [make_teacher(1, "Priya Rathore")]
        classes = [make_class(1, "XI-A", {("Monday", "1"): PeriodEntry("English", "priya rathore")})]
        (derived,) = generate_teacher_schedule_from_timetable(teachers, classes, self.periods)
        assert derived.schedule["Monday"]["1"] == "XI-A"
        assert derived.schedule["Monday"]["2"] == FREE
        assert derived.schedule["Tuesday"]["1"] == FREE

    def test_unmatched_teacher_is_ignored(self):
        teachers = [make_teacher(1, "Priya")]
        classes = [make_class(1, "XI-A", {("Monday", "1"): PeriodEntry("English", "Someone")})]
        (derived,) = generate_teacher_schedule_from_timetable(teachers, classes, self.periods)
        assert derived.schedule == empty_teacher_schedule(self.periods)

    def test_double_booking_later_class_wins(self):
        teachers = [make_teacher(1, "Priya")]
        classes = [
            make_class(1, "XI-A", {("Monday", "1"): PeriodEntry("English", "Priya")}),
            make_class(2, "XI-B", {("Monday", "1"): PeriodEntry("English", "Priya")}),
        ]
        (derived,) = generate_teacher_schedule_from_timetable(teachers, classes, self.periods)
        assert derived.schedule["Monday"]["1"] == "XI-B"

    def test_split_entry_assigns_second_teacher(self):
        teachers = [make_teacher(1, "Priya"), make_teacher(2, "Neha")]
        entry = PeriodEntry(
            "English", "Priya", additional_entries=(AdditionalEntry("Hindi", "Neha"),)
        )
        classes = [make_class(1, "XI-A", {("Monday", "1"): entry})]
        priya, neha = generate_teacher_schedule_from_timetable(teachers, classes, self.periods)
        assert priya.schedule["Monday"]["1"] == "XI-A"
        assert neha.schedule["Monday"]["1"] == "XI-A"

    def test_combined_entry_lists_every_class(self):
        teachers = [make_teacher(1, "Neha")]
        entry = PeriodEntry(
            "PE",
            "",
            additional_entries=(
                AdditionalEntry("PE", "Neha", type=COMBINED, combined_classes=("XI-B", "XI-C")),
            ),
        )
        classes = [make_class(1, "XI-A", {("Friday", "2"): entry})]
        (neha,) = generate_teacher_schedule_from_timetable(teachers, classes, self.periods)
        assert neha.schedule["Friday"]["2"] == "XI-A+XI-B+XI-C"

    def test_additional_entry_appends_to_occupied_cell(self):
        teachers = [make_teacher(1, "Neha")]
        classes = [
            make_class(1, "XI-A", {("Monday", "1"): PeriodEntry("Maths", "Neha")}),
            make_class(
                2,
                "XI-B",
                {
                    ("Monday", "1"): PeriodEntry(
                        "English", "Other", additional_entries=(AdditionalEntry("Maths", "Neha"),)
                    )
                },
            ),
        ]
        (neha,) = generate_teacher_schedule_from_timetable(teachers, classes, self.periods)
        assert neha.schedule["Monday"]["1"] == "XI-A+XI-B"

    def test_periods_outside_settings_are_ignored(self):
        teachers = [make_teacher(1, "Priya")]
        classes = [make_class(1, "XI-A", {("Monday", "9"): PeriodEntry("English", "Priya")})]
        (derived,) = generate_teacher_schedule_from_timetable(teachers, classes, self.periods)
        assert "9" not in derived.schedule["Monday"]

    def test_sync_action_rederives_schedules(self):
        state = initial_state()
        state = substitution_reducer(
            state, Action(ActionType.SET_TEACHERS, [make_teacher(1, "Priya")])
        )
        state = substitution_reducer(
            state,
            Action(
                ActionType.SET_CLASSES,
                [make_class(1, "XI-A", {("Monday", "1"): PeriodEntry("English", "Priya")})],
            ),
        )
        state = substitution_reducer(state, Action(ActionType.SYNC_TEACHER_SCHEDULES))
        assert state.teachers[0].schedule["Monday"]["1"] == "XI-A"

        # Clearing the cell frees the teacher again on the next sync
        state = substitution_reducer(
            state, Action(ActionType.SET_CLASSES, [make_class(1, "XI-A", {})])
        )
        state = substitution_reducer(state, Action(ActionType.SYNC_TEACHER_SCHEDULES))
        assert state.teachers[0].schedule["Monday"]["1"] == FREE

    def test_sync_is_deterministic(self):
        state = initial_state()
        state = substitution_reducer(
            state,
            Action(ActionType.SET_TEACHERS, [make_teacher(1, "Priya"), make_teacher(2, "Neha")]),
        )
        state = substitution_reducer(
            state,
            Action(
                ActionType.SET_CLASSES,
                [
                    make_class(1, "XI-A", {("Monday", "1"): PeriodEntry("English", "Priya")}),
                    make_class(
                        2,
                        "XI-B",
                        {
                            ("Monday", "1"): PeriodEntry("Maths", "Neha"),
                            ("Tuesday", "3"): PeriodEntry(
                                "PE",
                                "Neha",
                                additional_entries=(AdditionalEntry("Yoga", "Priya"),),
                            ),
                        },
                    ),
                ],
            ),
        )
        first = substitution_reducer(state, Action(ActionType.SYNC_TEACHER_SCHEDULES))
        second = substitution_reducer(state, Action(ActionType.SYNC_TEACHER_SCHEDULES))
        assert first == second
        assert substitution_reducer(first, Action(ActionType.SYNC_TEACHER_SCHEDULES)) == first


class TestStore:
    """Tests for the reducer-backed store."""

    def test_dispatch_updates_state_and_notifies(self):
        store = Store(substitution_reducer, initial_state())
        seen = []
        unsubscribe = store.subscribe(seen.append)

        new_state = store.dispatch(Action(ActionType.SET_LOADING, True))
        assert store.state is new_state
        assert seen == [new_state]

        unsubscribe()
        store.dispatch(Action(ActionType.SET_LOADING, False))
        assert len(seen) == 1
        assert store.state.loading is False
