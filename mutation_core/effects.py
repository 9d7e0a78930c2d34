from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .catalog import MutationType

GLASSCORN = 'glasscorn'
MAGIC_JERRYBEAN = 'magic_jerrybean'


@dataclass(frozen=True)
class GrowthRule:
    """Standard crop: grows one stage per tick up to max, scores once fully grown."""
    tag: Optional[str] = None

    def initial_stage(self, mtype: MutationType, simulation: bool) -> int:
        if not simulation or mtype.is_mutated:
            return mtype.max_growth_stage
        return 0

    def advance(self, mtype: MutationType, stage: int) -> int:
        if stage < mtype.max_growth_stage:
            return stage + 1
        return stage

    def score(self, mtype: MutationType, stage: int, base: float, evaluating: bool) -> float:
        if evaluating or mtype.max_growth_stage == 0 or stage >= mtype.max_growth_stage:
            return base
        return 0


@dataclass(frozen=True)
class GlasscornRule(GrowthRule):
    """Regrows after harvest: 1 -> ... -> max-1 -> 1, harvestable at stages 7 and 8."""
    tag: Optional[str] = GLASSCORN
    harvest_stages: Tuple[int, ...] = (7, 8)

    def advance(self, mtype: MutationType, stage: int) -> int:
        if stage >= mtype.max_growth_stage - 1:
            return 1
        return stage + 1

    def score(self, mtype: MutationType, stage: int, base: float, evaluating: bool) -> float:
        if evaluating or stage in self.harvest_stages:
            return base
        return 0


@dataclass(frozen=True)
class MagicJerrybeanRule(GrowthRule):
    """Starts at stage 120 and pays base * floor(stage / 15)."""
    tag: Optional[str] = MAGIC_JERRYBEAN
    start_stage: int = 120
    stage_step: int = 15

    def initial_stage(self, mtype: MutationType, simulation: bool) -> int:
        if not simulation:
            return mtype.max_growth_stage
        return self.start_stage

    def score(self, mtype: MutationType, stage: int, base: float, evaluating: bool) -> float:
        return base * (stage // self.stage_step)


STANDARD = GrowthRule()

_RULES: Dict[str, GrowthRule] = {
    GLASSCORN: GlasscornRule(),
    MAGIC_JERRYBEAN: MagicJerrybeanRule(),
}


def rule_for(mtype: MutationType) -> GrowthRule:
    """Unknown or missing effect tags fall back to the standard rule."""
    if mtype.special_effect is None:
        return STANDARD
    return _RULES.get(mtype.special_effect, STANDARD)
