"""
handcarousel: tuning defaults (presets)

Values mirror the playground carousel feel: 0.22 swipe threshold with a
500ms lockout, 0.15 pull-to-select with a 2s lockout, spring (100, 20)
for rotation and (300, 25) for the pull.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields, is_dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class PresetName(str, Enum):
    DEFAULT = "Default"
    STEADY = "Steady"


@dataclass(frozen=True)
class FilterTuning:
    trail_alpha: float = 0.1          # trailing anchor follow rate per sample
    swipe_threshold: float = 0.22     # normalized |x - anchor| to fire
    swipe_cooldown_ms: int = 500
    pull_threshold: float = 0.15      # normalized y below the fist anchor
    pull_gain: float = 1500.0         # normalized delta -> visual units
    rest_x: float = 0.5               # horizontal anchor while not tracking


@dataclass(frozen=True)
class PointerTuning:
    rotation_per_unit: float = 0.3    # degrees per horizontal pointer unit
    resistance_start: float = 50.0    # free pull on locked items
    resistance_factor: float = 0.1
    release_threshold: float = 100.0  # pull needed on pointer-up to select


@dataclass(frozen=True)
class SpringParams:
    stiffness: float
    damping: float
    mass: float = 1.0
    rest_delta: float = 0.01
    rest_speed: float = 0.01


@dataclass(frozen=True)
class DropTuning:
    drop_value: float = 1200.0
    gesture_duration_ms: int = 600
    pointer_duration_ms: int = 500


@dataclass(frozen=True)
class SelectionTuning:
    cooldown_ms: int = 2000
    notice_ms: int = 2000             # "coming soon" after a rejected select


@dataclass(frozen=True)
class LayoutTuning:
    fade_start_deg: float = 80.0
    fade_end_deg: float = 110.0
    min_brightness: float = 0.65
    brightness_falloff_deg: float = 150.0
    drop_fade_start: float = 200.0
    drop_fade_span: float = 300.0


@dataclass(frozen=True)
class Preset:
    name: PresetName
    filter: FilterTuning = FilterTuning()
    pointer: PointerTuning = PointerTuning()
    rotation_spring: SpringParams = SpringParams(stiffness=100.0, damping=20.0)
    pull_spring: SpringParams = SpringParams(stiffness=300.0, damping=25.0)
    drop: DropTuning = DropTuning()
    selection: SelectionTuning = SelectionTuning()
    layout: LayoutTuning = LayoutTuning()


DEFAULT_PRESET = Preset(name=PresetName.DEFAULT)

# Wider swipe gate and longer lockout for tremor-prone hands
STEADY_PRESET = Preset(
    name=PresetName.STEADY,
    filter=FilterTuning(trail_alpha=0.08, swipe_threshold=0.28, swipe_cooldown_ms=700, pull_threshold=0.18),
)

PRESETS = {
    PresetName.DEFAULT: DEFAULT_PRESET,
    PresetName.STEADY: STEADY_PRESET,
}


# ------------------------------------------------------------
# Optional JSON profile overrides
# ------------------------------------------------------------

def _profile_path() -> Path:
    return Path.home() / ".config" / "handcarousel" / "profile.json"


def load_profile(path: Optional[Path] = None) -> Optional[dict]:
    p = Path(path) if path is not None else _profile_path()
    if not p.exists():
        return None
    data = json.loads(p.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"profile {p} must hold a JSON object")
    logger.info("Loaded tuning profile from %s", p)
    return data


def _merge(section, overrides: dict):
    known = {f.name: f for f in fields(section)}
    changes = {}
    for key, value in overrides.items():
        if key not in known:
            logger.debug("Ignoring unknown profile key %s.%s", type(section).__name__, key)
            continue
        current = getattr(section, key)
        where = f"{type(section).__name__}.{key}"
        if is_dataclass(current):
            if not isinstance(value, dict):
                raise ValueError(f"profile section {where} must be an object, got {value!r}")
            changes[key] = _merge(current, value)
            continue
        if isinstance(value, (dict, list)):
            raise ValueError(f"profile value {where} must be a scalar, got {value!r}")
        try:
            # coerce to the default's type (int/float/bool/Enum)
            changes[key] = type(current)(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"profile value {where}={value!r} is invalid: {e}") from e
    return replace(section, **changes)


def apply_profile(preset: Preset, profile: Optional[dict]) -> Preset:
    """
    Return a copy of `preset` with profile overrides applied.

    Profile layout follows the preset, e.g.
        {"filter": {"swipe_threshold": 0.25}, "selection": {"cooldown_ms": 1500}}
    """
    if not profile:
        return preset
    return _merge(preset, profile)
