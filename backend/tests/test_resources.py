"""Tests for the resource allocation summary."""
from lifedash.planning.resources import load_level, summarize_resources, utilization
from lifedash.schemas.profile import LoadLevel
from lifedash.schemas.project import Project, Routine


class TestUtilization:

    def test_ratio(self):
        assert utilization(10, 20) == 0.5

    def test_capped_at_two(self):
        assert utilization(100, 20) == 2

    def test_zero_capacity(self):
        assert utilization(10, 0) == 0

    def test_load_levels(self):
        assert load_level(0.8) == LoadLevel.COMFORTABLE
        assert load_level(0.81) == LoadLevel.FULL
        assert load_level(1.0) == LoadLevel.FULL
        assert load_level(1.2) == LoadLevel.OVERLOADED


class TestSummary:

    def test_sums_allocations(self):
        projects = [
            Project(id="p1", title="A", allocated_hours_per_week=6,
                    routines=[Routine(id="r1", target_hours_per_week=2)]),
            Project(id="p2", title="B", allocated_hours_per_week=9),
        ]
        summary = summarize_resources(projects, 20)
        assert summary.total_allocated == 15
        assert summary.utilization == 0.75
        assert summary.utilization_percent == 75
        assert summary.load_level == LoadLevel.COMFORTABLE
        assert summary.projects[0].routine_hours_per_week == 2

    def test_percent_is_not_capped(self):
        summary = summarize_resources([Project(id="p1", allocated_hours_per_week=50)], 20)
        assert summary.utilization == 2
        assert summary.utilization_percent == 250
        assert summary.load_level == LoadLevel.OVERLOADED

    def test_no_projects(self):
        summary = summarize_resources([], 20)
        assert summary.total_allocated == 0
        assert summary.utilization_percent == 0
        assert summary.projects == []
