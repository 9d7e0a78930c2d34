from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

DEFAULT_CATEGORY = 'basecrop'
MUTATED = 'mutated'
DEFAULT_MAX_GROWTH_STAGE = 1
VALID_SIZES = (1, 2, 3)


@dataclass(frozen=True)
class SpawnCondition:
    """At least `min_count` ring cells must hold a piece of `type_id`."""
    type_id: int
    min_count: int


@dataclass(frozen=True)
class MutationType:
    """A single catalog entry, normalized from config.json."""
    id: int
    name: str
    size: int
    params: Tuple[float, ...]
    conditions: Tuple[SpawnCondition, ...] = field(default_factory=tuple)
    image: Optional[str] = None
    category: str = DEFAULT_CATEGORY
    max_growth_stage: int = DEFAULT_MAX_GROWTH_STAGE
    special_effect: Optional[str] = None

    @property
    def spawns(self) -> bool:
        return len(self.conditions) > 0

    @property
    def is_mutated(self) -> bool:
        return self.category == MUTATED

    def param(self, index: int) -> float:
        if 0 <= index < len(self.params):
            return self.params[index]
        return 0


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _first_present(*values: Any) -> Any:
    for v in values:
        if v is not None:
            return v
    return None


def _normalize_conditions(raw: Any) -> Tuple[SpawnCondition, ...]:
    if not isinstance(raw, (list, tuple)):
        return tuple()
    out: List[SpawnCondition] = []
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        type_id = _as_int(_first_present(item.get('id'), item.get('requiredTypeId')), -1)
        amount = _as_int(_first_present(item.get('amount'), item.get('minCount')), 0)
        out.append(SpawnCondition(type_id=type_id, min_count=amount))
    return tuple(out)


def normalize_mutation(entry: Mapping[str, Any], score_params: Iterable[str], index: Optional[int] = None) -> MutationType:
    """Builds a MutationType from a raw config entry.

    Score values are read from `entry['scores'][param]` first, then from a
    top-level `entry[param]` (older config files), defaulting to 0. Spawn
    conditions come from `conditions` or `spawnCondition.conditions`.
    `index` (the entry's position in the catalog) wins over an explicit `id`.
    """
    scores = entry.get('scores')
    if not isinstance(scores, Mapping):
        scores = {}
    params: List[float] = []
    for p in score_params:
        value = _as_number(_first_present(scores.get(p), entry.get(p)))
        params.append(value if value is not None else 0)

    raw_conditions = entry.get('conditions')
    if raw_conditions is None:
        spawn = entry.get('spawnCondition')
        if isinstance(spawn, Mapping):
            raw_conditions = spawn.get('conditions')

    size = _as_int(entry.get('size'), 1)
    if size not in VALID_SIZES:
        size = 1

    type_id = index if index is not None else _as_int(entry.get('id'), 0)
    category = entry.get('category')
    effect = entry.get('specialEffect')
    return MutationType(
        id=type_id,
        name=str(_first_present(entry.get('name'), f"#{type_id + 1}")),
        size=size,
        params=tuple(params),
        conditions=_normalize_conditions(raw_conditions),
        image=entry.get('image'),
        category=category if isinstance(category, str) else DEFAULT_CATEGORY,
        max_growth_stage=max(0, _as_int(entry.get('maxGrowthStage'), DEFAULT_MAX_GROWTH_STAGE)),
        special_effect=effect if isinstance(effect, str) else None,
    )


@dataclass(frozen=True)
class Catalog:
    """All mutation types plus the configured score parameters."""
    types: Tuple[MutationType, ...]
    score_params: Tuple[str, ...]
    score_param_names: Dict[str, str] = field(default_factory=dict)

    def get(self, type_id: int) -> Optional[MutationType]:
        if isinstance(type_id, bool) or not isinstance(type_id, int):
            return None
        if 0 <= type_id < len(self.types) and self.types[type_id].id == type_id:
            return self.types[type_id]
        for t in self.types:
            if t.id == type_id:
                return t
        return None

    def __len__(self) -> int:
        return len(self.types)

    def __iter__(self):
        return iter(self.types)

    def spawnable(self) -> List[MutationType]:
        return [t for t in self.types if t.spawns]

    def param_name(self, index: int) -> str:
        if not (0 <= index < len(self.score_params)):
            return '—'
        key = self.score_params[index]
        return self.score_param_names.get(key, key)


def load_catalog(config: Mapping[str, Any]) -> Catalog:
    """Normalizes a parsed configuration document. Never raises on bad fields."""
    raw_params = config.get('scoreParams') if isinstance(config, Mapping) else None
    score_params = tuple(str(p) for p in raw_params) if isinstance(raw_params, (list, tuple)) else tuple()
    raw_names = config.get('scoreParamNames') if isinstance(config, Mapping) else None
    names = {str(k): str(v) for k, v in raw_names.items()} if isinstance(raw_names, Mapping) else {}
    entries = _first_present(config.get('cards'), config.get('mutations')) if isinstance(config, Mapping) else None
    if not isinstance(entries, (list, tuple)):
        entries = []
    types = tuple(
        normalize_mutation(entry, score_params, i)
        for i, entry in enumerate(entries)
        if isinstance(entry, Mapping)
    )
    return Catalog(types=types, score_params=score_params, score_param_names=names)
