from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from kanban_forecast.forecasting.domain.roadmap import (
    DEFAULT_PROJECT_NAME,
    DEFAULT_ROADMAP_LABEL,
    Project,
    Roadmap,
)


def _expand(path: str) -> Path:
    return Path(os.path.expanduser(path)).resolve()


def _read_toml(path: Path) -> dict[str, Any]:
    """Parse a TOML file; syntax errors are reported with the file they came from."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"{path} is not valid TOML: {exc}") from exc


class ProjectConfiguration(BaseModel):
    """User-facing description of one project of the roadmap."""

    name: str = Field(default=DEFAULT_PROJECT_NAME)
    number_of_work_items_to_be_completed: int = Field(
        default=10,
        ge=1,
        description="Project must have at least 1 work item to be completed.",
    )
    priority_weight: int = Field(
        default=0,
        description="The higher the value, the more priority it gets in being worked on.",
    )

    @field_validator("name")
    @classmethod
    def _name_must_be_specified(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name must be specified.")
        return value

    def to_project(self) -> Project:
        return Project(
            self.number_of_work_items_to_be_completed,
            self.priority_weight,
            self.name,
        )


class RoadmapConfiguration(BaseModel):
    """Ordered, uniquely named project descriptions for a forecast.

    `to_roadmap()` builds a brand new `Roadmap` every call; the configuration
    itself is never mutated by a simulation.
    """

    label: str = Field(default=DEFAULT_ROADMAP_LABEL)
    projects: list[ProjectConfiguration] = Field(min_length=1)

    @field_validator("projects")
    @classmethod
    def _names_must_be_unique(cls, value: list[ProjectConfiguration]) -> list[ProjectConfiguration]:
        seen: set[str] = set()
        for p in value:
            if p.name in seen:
                raise ValueError(
                    f"Roadmap cannot contain multiple projects with the same name: '{p.name}'."
                )
            seen.add(p.name)
        return value

    @classmethod
    def single_project(cls, number_of_work_items: int) -> "RoadmapConfiguration":
        return cls(projects=[ProjectConfiguration(number_of_work_items_to_be_completed=number_of_work_items)])

    @property
    def total_number_of_work_items(self) -> int:
        return sum(p.number_of_work_items_to_be_completed for p in self.projects)

    def to_roadmap(self) -> Roadmap:
        return Roadmap([p.to_project() for p in self.projects], label=self.label)


class ForecastConfig(BaseModel):
    number_of_simulations: int = Field(default=10, ge=1)
    maximum_number_of_iterations: int = Field(
        default=25,
        ge=1,
        description="Cap on simulated working days per trial.",
    )
    rng_seed: int | None = Field(
        default=None,
        description="Seed for reproducible runs. Leave unset for fresh randomness.",
    )
    input_samples_path: str = Field(
        default="",
        description="';'-delimited file with a 'NumberOfCompletedWorkItems' column.",
    )
    output_path: str = Field(default="", description="Where to write the estimations CSV.")
    include_project_columns: bool = Field(
        default=True,
        description="Export per-project columns next to the roadmap columns.",
    )
    roadmap: RoadmapConfiguration = Field(
        default_factory=lambda: RoadmapConfiguration.single_project(10),
    )

    @classmethod
    def load(cls, path: Path) -> "ForecastConfig":
        raw = _read_toml(path)
        return cls.model_validate(raw)

    def resolved_input_samples_path(self) -> Path | None:
        return _expand(self.input_samples_path) if self.input_samples_path else None

    def resolved_output_path(self) -> Path | None:
        return _expand(self.output_path) if self.output_path else None


EXAMPLE_CONFIG_TOML = """\
# Monte Carlo forecast configuration.
number_of_simulations = 1000
maximum_number_of_iterations = 250
# rng_seed = 7
input_samples_path = "throughput.csv"
output_path = "estimations.csv"
include_project_columns = true

[roadmap]
label = "Roadmap"

[[roadmap.projects]]
name = "Checkout redesign"
number_of_work_items_to_be_completed = 12
priority_weight = 2

[[roadmap.projects]]
name = "Search improvements"
number_of_work_items_to_be_completed = 20
priority_weight = 1

[[roadmap.projects]]
name = "Reporting"
number_of_work_items_to_be_completed = 8
priority_weight = 1
"""
