"""Style profile (de)serialization and key-value persistence."""
import json
import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

from posterizer.types import (
    MalformedProfileError,
    MotifPack,
    ParameterSet,
    RGBColor,
    StyleProfile,
)

logger = logging.getLogger(__name__)

PROFILE_STORAGE_KEY = "posterizerpro.profile"

STAT_FIELDS = {
    "meanSaturation": "mean_saturation",
    "saturationStd": "saturation_std",
    "edgeDensity": "edge_density",
    "contrastIndex": "contrast_index",
}

SUGGESTED_FIELDS = {
    "outlineWeight": "outline_weight",
    "saturationBoost": "saturation_boost",
    "halftoneDensity": "halftone_density",
    "burstStrength": "burst_strength",
    "styleIntensity": "style_intensity",
}


def profile_to_dict(profile: StyleProfile) -> Dict[str, Any]:
    """Plain-data form of a profile using the exchange format's field names."""
    data: Dict[str, Any] = {
        "name": profile.name,
        "palette": [{"r": c.r, "g": c.g, "b": c.b} for c in profile.palette],
    }
    for key, attr in STAT_FIELDS.items():
        data[key] = getattr(profile, attr)

    suggested = {key: getattr(profile.suggested, attr) for key, attr in SUGGESTED_FIELDS.items()}
    suggested["motifPack"] = profile.suggested.motif_pack.value
    suggested["applyPalette"] = profile.suggested.apply_palette_transfer
    data["suggested"] = suggested
    return data


def _require(data: Dict[str, Any], key: str, where: str) -> Any:
    if key not in data:
        raise MalformedProfileError(f"Missing field '{key}' in {where}")
    return data[key]


def _unit_number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedProfileError(f"Field '{key}' must be a number, got {value!r}")
    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        raise MalformedProfileError(f"Field '{key}' must be in [0, 1], got {value!r}")
    return float(value)


def _channel(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedProfileError(f"Palette channel '{key}' must be a number, got {value!r}")
    if not math.isfinite(value) or value != int(value) or not 0 <= value <= 255:
        raise MalformedProfileError(
            f"Palette channel '{key}' must be an integer in [0, 255], got {value!r}"
        )
    return int(value)


def profile_from_dict(data: Any, base: Optional[ParameterSet] = None) -> StyleProfile:
    """
    Validate plain data and build a profile.

    Suggested values must lie in [0, 1] and are then clamped into each
    parameter's own range. Parameters the exchange format does not carry
    (halftone toggle, background) come from `base`.

    Raises:
        MalformedProfileError: On missing fields, wrong types or
            out-of-range values
    """
    if not isinstance(data, dict):
        raise MalformedProfileError(f"Profile must be an object, got {type(data).__name__}")

    name = _require(data, "name", "profile")
    if not isinstance(name, str):
        raise MalformedProfileError(f"Field 'name' must be a string, got {name!r}")

    raw_palette = _require(data, "palette", "profile")
    if not isinstance(raw_palette, list):
        raise MalformedProfileError("Field 'palette' must be a list")
    palette = []
    for entry in raw_palette:
        if not isinstance(entry, dict):
            raise MalformedProfileError(f"Palette entry must be an object, got {entry!r}")
        palette.append(RGBColor(*(
            _channel(_require(entry, ch, "palette entry"), ch) for ch in ("r", "g", "b")
        )))

    stats = {
        attr: _unit_number(_require(data, key, "profile"), key)
        for key, attr in STAT_FIELDS.items()
    }

    raw_suggested = _require(data, "suggested", "profile")
    if not isinstance(raw_suggested, dict):
        raise MalformedProfileError("Field 'suggested' must be an object")
    values = {
        attr: _unit_number(_require(raw_suggested, key, "suggested"), key)
        for key, attr in SUGGESTED_FIELDS.items()
    }
    motif = _require(raw_suggested, "motifPack", "suggested")
    try:
        values["motif_pack"] = MotifPack(motif)
    except ValueError:
        raise MalformedProfileError(f"Unknown motif pack {motif!r}") from None
    apply_flag = _require(raw_suggested, "applyPalette", "suggested")
    if not isinstance(apply_flag, bool):
        raise MalformedProfileError(f"Field 'applyPalette' must be a boolean, got {apply_flag!r}")
    values["apply_palette_transfer"] = apply_flag

    return StyleProfile(
        name=name,
        palette=tuple(palette),
        suggested=replace(base or ParameterSet(), **values),
        **stats,
    )


def profile_to_json(profile: StyleProfile) -> str:
    return json.dumps(profile_to_dict(profile), indent=2)


def profile_from_json(text: str, base: Optional[ParameterSet] = None) -> StyleProfile:
    """Parse a JSON profile. Invalid JSON is reported as a malformed profile."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedProfileError(f"Profile is not valid JSON: {e}") from e
    return profile_from_dict(data, base)


class MemoryStore:
    """In-process key-value store."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """Key-value store persisted as a single JSON object on disk."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        """
        Raises:
            MalformedProfileError: If the file is not a JSON object
        """
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except ValueError as e:
            raise MalformedProfileError(f"Store file {self.path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise MalformedProfileError(
                f"Store file {self.path} must hold a JSON object, got {type(data).__name__}"
            )
        return data

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)


def save_profile(store, profile: StyleProfile, key: str = PROFILE_STORAGE_KEY) -> None:
    """Persist a profile into any object with `set(key, value)`."""
    store.set(key, profile_to_json(profile))
    logger.debug(f"Saved profile '{profile.name}' under key {key!r}")


def load_profile(
    store, key: str = PROFILE_STORAGE_KEY, base: Optional[ParameterSet] = None
) -> Optional[StyleProfile]:
    """
    Load a profile from any object with `get(key)`.

    Returns None when nothing is stored under `key`.

    Raises:
        MalformedProfileError: If the stored data is not a valid profile
    """
    raw = store.get(key)
    if raw is None:
        return None
    return profile_from_json(raw, base)
