from __future__ import annotations

import numpy as np
import pytest

from kanban_forecast.common.seeding import NumpyRandomIndexSource
from kanban_forecast.forecasting.config import ProjectConfiguration, RoadmapConfiguration
from kanban_forecast.forecasting.domain.errors import InvalidStateError
from kanban_forecast.forecasting.priors.throughput import input_samples_from_values
from kanban_forecast.forecasting.simulator.monte_carlo import MonteCarloTimeTillCompletionEstimator


class _FirstIndexSource:
    def random_index(self, count: int) -> int:
        return 0


def _config(*projects: tuple[str, int, int]) -> RoadmapConfiguration:
    return RoadmapConfiguration(
        projects=[
            ProjectConfiguration(name=n, number_of_work_items_to_be_completed=w, priority_weight=p)
            for n, w, p in projects
        ]
    )


@pytest.mark.parametrize("number_of_simulations", [0, -1])
def test_rejects_invalid_number_of_simulations(number_of_simulations: int) -> None:
    with pytest.raises(ValueError, match="number_of_simulations"):
        MonteCarloTimeTillCompletionEstimator(number_of_simulations, 1, [], _FirstIndexSource())


@pytest.mark.parametrize("maximum_number_of_iterations", [0, -1])
def test_rejects_invalid_iteration_cap(maximum_number_of_iterations: int) -> None:
    with pytest.raises(ValueError, match="maximum_number_of_iterations"):
        MonteCarloTimeTillCompletionEstimator(1, maximum_number_of_iterations, [], _FirstIndexSource())


def test_rejects_missing_samples_or_random_source() -> None:
    with pytest.raises(TypeError, match="input_samples"):
        MonteCarloTimeTillCompletionEstimator(1, 1, None, _FirstIndexSource())  # type: ignore[arg-type]
    with pytest.raises(TypeError, match="random_source"):
        MonteCarloTimeTillCompletionEstimator(1, 1, [], None)  # type: ignore[arg-type]


def test_empty_samples_only_fail_when_estimating() -> None:
    estimator = MonteCarloTimeTillCompletionEstimator(1, 1, [], _FirstIndexSource())

    with pytest.raises(InvalidStateError, match="At least 1 datapoint"):
        estimator.estimate(_config(("Project", 10, 0)))


def test_every_trial_starts_from_the_configured_backlog() -> None:
    estimator = MonteCarloTimeTillCompletionEstimator(
        number_of_simulations=2,
        maximum_number_of_iterations=25,
        input_samples=input_samples_from_values([2.0]),
        random_source=_FirstIndexSource(),
    )
    config = _config(("Project", 10, 0))

    estimations = estimator.estimate(config)

    assert len(estimations) == 2
    assert estimations.is_full
    for i in range(2):
        roadmap_estimate, (project_estimate,) = estimations.get_estimations_for_simulation(i)
        assert roadmap_estimate.identifier == "Roadmap"
        assert roadmap_estimate.estimated_number_of_working_days_required == 5.0
        assert not roadmap_estimate.is_indeterminate
        assert project_estimate.identifier == "Project"
        assert project_estimate.estimated_number_of_working_days_required == 5.0
        assert not project_estimate.is_indeterminate
    assert config.projects[0].number_of_work_items_to_be_completed == 10


def test_three_per_day_against_ten_items() -> None:
    estimator = MonteCarloTimeTillCompletionEstimator(3, 25, input_samples_from_values([3.0]), _FirstIndexSource())

    estimations = estimator.estimate(_config(("Project", 10, 0)))

    for e in estimations.roadmap_estimations:
        assert e.estimated_number_of_working_days_required == pytest.approx(3.333333, abs=1e-6)
        assert not e.is_indeterminate
    for e in estimations[0]:
        assert e.estimated_number_of_working_days_required == pytest.approx(3.333333, abs=1e-6)


def test_zero_throughput_makes_every_trial_indeterminate_at_the_cap() -> None:
    estimator = MonteCarloTimeTillCompletionEstimator(5, 7, input_samples_from_values([0.0]), _FirstIndexSource())

    estimations = estimator.estimate(_config(("Project", 10, 0)))

    assert all(e.is_indeterminate for e in estimations.roadmap_estimations)
    assert all(e.estimated_number_of_working_days_required == 7 for e in estimations.roadmap_estimations)


def test_columns_follow_priority_order_and_are_stable_across_trials() -> None:
    rng = NumpyRandomIndexSource(rng=np.random.default_rng(3))
    estimator = MonteCarloTimeTillCompletionEstimator(
        50, 200, input_samples_from_values([1.0, 2.0, 5.0]), rng
    )

    estimations = estimator.estimate(_config(("low", 6, 0), ("high", 4, 3), ("mid", 5, 1)))

    assert estimations.project_identifiers == ("high", "mid", "low")
    for i in range(len(estimations)):
        roadmap_estimate, project_estimates = estimations.get_estimations_for_simulation(i)
        assert [e.identifier for e in project_estimates] == ["high", "mid", "low"]
        if not roadmap_estimate.is_indeterminate:
            days = roadmap_estimate.estimated_number_of_working_days_required
            assert 15 / 5.0 - 1e-9 <= days <= 15 / 1.0 + 1e-9
            # Finishing order follows priority, so the roadmap ends with the lowest tier.
            assert project_estimates[-1].estimated_number_of_working_days_required == pytest.approx(days)


def test_seeded_runs_are_reproducible() -> None:
    def run(seed: int) -> list[float]:
        estimator = MonteCarloTimeTillCompletionEstimator(
            20, 100, input_samples_from_values([0.0, 1.0, 3.0]), NumpyRandomIndexSource.from_seed(seed)
        )
        estimations = estimator.estimate(_config(("A", 8, 1), ("B", 8, 1)))
        return [e.estimated_number_of_working_days_required for e in estimations.roadmap_estimations]

    assert run(42) == run(42)


def test_progress_callback_is_called_per_simulation() -> None:
    calls: list[tuple[int, int]] = []
    estimator = MonteCarloTimeTillCompletionEstimator(3, 10, input_samples_from_values([1.0]), _FirstIndexSource())

    estimator.estimate(_config(("Project", 2, 0)), on_simulation_completed=lambda done, total: calls.append((done, total)))

    assert calls == [(1, 3), (2, 3), (3, 3)]
