from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from duel_core.config import CRISP_DEFAULTS, FUZZY_DEFAULTS, CombatConfig


class DuelOverrides(BaseModel):
    """Config overrides for a duel.

    Top-level keys apply to both agents; the ``fsm`` and ``fuzzy`` objects
    override a single side on top of that::

        {"bullet_damage": 8, "fuzzy": {"reload_time": 3.0}}
    """

    model_config = ConfigDict(extra="allow")

    fsm: Dict[str, Any] = Field(default_factory=dict)
    fuzzy: Dict[str, Any] = Field(default_factory=dict)

    @property
    def shared(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})

    def resolve(self) -> Tuple[CombatConfig, CombatConfig]:
        shared = self.shared
        return (
            CRISP_DEFAULTS.with_overrides(**{**shared, **self.fsm}),
            FUZZY_DEFAULTS.with_overrides(**{**shared, **self.fuzzy}),
        )


def load_overrides(path: Optional[str | Path]) -> DuelOverrides:
    if path is None:
        return DuelOverrides()
    return DuelOverrides.model_validate_json(Path(path).read_text(encoding="utf-8"))
