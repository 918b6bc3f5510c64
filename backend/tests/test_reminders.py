"""Schedule reminders: thresholds, the two show stages and one-way flags."""
from datetime import datetime

from conftest import park_time

from ridealert.services.reminders import ReminderStage, evaluate_reminders
from ridealert.services.types import DaySchedule, Dining, LightningLane, Show


def show_at(hour, minute, travel):
    return Show(id="s1", label="Fantasmic!", target_time=park_time(2025, 6, 14, hour, minute), travel_time_minutes=travel)


class TestShowReminders:
    def test_first_stage_fires_at_target_minus_travel(self):
        schedule = DaySchedule(shows=[show_at(14, 0, 20)])
        assert evaluate_reminders(schedule, park_time(2025, 6, 14, 13, 39)) == []
        hits = evaluate_reminders(schedule, park_time(2025, 6, 14, 13, 40))
        assert [h.stage for h in hits] == [ReminderStage.REMINDER]
        assert schedule.shows[0].notified is True
        assert schedule.shows[0].final_warning_notified is False

    def test_final_warning_fires_five_minutes_before(self):
        schedule = DaySchedule(shows=[show_at(14, 0, 20)])
        evaluate_reminders(schedule, park_time(2025, 6, 14, 13, 40))
        assert evaluate_reminders(schedule, park_time(2025, 6, 14, 13, 54)) == []
        hits = evaluate_reminders(schedule, park_time(2025, 6, 14, 13, 56))
        assert [h.stage for h in hits] == [ReminderStage.FINAL_WARNING]
        assert schedule.shows[0].final_warning_notified is True

    def test_both_stages_in_one_call_with_short_travel(self):
        schedule = DaySchedule(shows=[show_at(14, 0, 3)])
        hits = evaluate_reminders(schedule, park_time(2025, 6, 14, 13, 58))
        assert [h.stage for h in hits] == [ReminderStage.REMINDER, ReminderStage.FINAL_WARNING]

    def test_flags_never_reset_by_evaluator(self):
        schedule = DaySchedule(shows=[show_at(14, 0, 20)])
        evaluate_reminders(schedule, park_time(2025, 6, 14, 13, 57))
        # clock moving backwards must not re-arm anything
        assert evaluate_reminders(schedule, park_time(2025, 6, 14, 12, 0)) == []
        assert evaluate_reminders(schedule, park_time(2025, 6, 14, 15, 0)) == []
        assert schedule.shows[0].notified and schedule.shows[0].final_warning_notified


class TestSingleStageItems:
    def test_dining_and_lightning_lane(self):
        schedule = DaySchedule(
            dining=[Dining(id="d1", label="Blue Bayou", target_time=park_time(2025, 6, 14, 18, 0), travel_time_minutes=15)],
            lightning_lanes={
                "R9": LightningLane(id="R9", label="Space Mountain", target_time=park_time(2025, 6, 14, 17, 50)),
            },
        )
        hits = evaluate_reminders(schedule, park_time(2025, 6, 14, 17, 44))
        assert hits == []
        hits = evaluate_reminders(schedule, park_time(2025, 6, 14, 17, 45))
        assert [h.item.id for h in hits] == ["d1"]
        hits = evaluate_reminders(schedule, park_time(2025, 6, 14, 17, 50))
        assert [h.item.id for h in hits] == ["R9"]
        assert all(h.stage is ReminderStage.REMINDER for h in hits)

    def test_order_is_shows_dining_lightning_lanes(self):
        t = park_time(2025, 6, 14, 12, 0)
        schedule = DaySchedule(
            shows=[Show(id="s", label="Show", target_time=t, travel_time_minutes=10)],
            dining=[Dining(id="d", label="Lunch", target_time=t)],
            lightning_lanes={"L": LightningLane(id="L", label="Ride", target_time=t)},
        )
        hits = evaluate_reminders(schedule, park_time(2025, 6, 14, 11, 50))
        assert [h.item.id for h in hits] == ["s"]
        hits = evaluate_reminders(schedule, t)
        assert [(h.item.id, h.stage) for h in hits] == [
            ("s", ReminderStage.FINAL_WARNING),
            ("d", ReminderStage.REMINDER),
            ("L", ReminderStage.REMINDER),
        ]

    def test_malformed_items_are_skipped(self):
        schedule = DaySchedule(
            dining=[
                Dining(id="naive", label="x", target_time=datetime(2025, 6, 14, 9, 0)),
                Dining(id="neg", label="x", target_time=park_time(2025, 6, 14, 9, 0), travel_time_minutes=-5),
                Dining(id="ok", label="x", target_time=park_time(2025, 6, 14, 9, 0)),
            ]
        )
        hits = evaluate_reminders(schedule, park_time(2025, 6, 14, 10, 0))
        assert [h.item.id for h in hits] == ["ok"]
