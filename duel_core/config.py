from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CombatConfig(BaseModel):
    """Tunable combat and movement parameters of a single agent.

    Distances are in world units, durations in seconds of simulated time.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_health: int = Field(100, gt=0)
    bullet_damage: int = Field(10, ge=0)
    ammo_per_clip: int = Field(10, gt=0)
    low_ammo: int = Field(3, ge=0)
    low_health: int = Field(30, ge=0)
    reload_time: float = Field(3.0, gt=0)
    shot_interval: float = Field(0.2, ge=0)
    hit_chance: float = Field(0.5, ge=0.0, le=1.0)

    dist_to_start_shooting: float = Field(7.0, gt=0)
    dist_to_hide: float = Field(5.0, ge=0)

    move_speed: float = Field(3.5, gt=0)
    eye_height: float = Field(1.6, gt=0)
    arrive_radius: float = Field(0.5, gt=0)
    # Longest a crisp agent keeps running for cover before its HIDE exits apply.
    hide_commit_time: float = Field(1.5, ge=0)

    @model_validator(mode="after")
    def _check_thresholds(self) -> "CombatConfig":
        if self.low_ammo >= self.ammo_per_clip:
            raise ValueError("low_ammo must be smaller than ammo_per_clip")
        if self.low_health >= self.max_health:
            raise ValueError("low_health must be smaller than max_health")
        return self

    def with_overrides(self, **overrides) -> "CombatConfig":
        """Return a validated copy with ``overrides`` applied."""
        return CombatConfig.model_validate({**self.model_dump(), **overrides})


# The fuzzy side reloads faster than the crisp side by default.
FUZZY_DEFAULTS = CombatConfig(reload_time=2.0)
CRISP_DEFAULTS = CombatConfig()
