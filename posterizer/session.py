"""Stateful front end tying parameters, profiles and persistence together."""
import logging
from typing import Optional, Sequence

import numpy as np

from posterizer.pipeline import StylizePipeline
from posterizer.profile import analyze
from posterizer.profile_io import (
    MemoryStore,
    PROFILE_STORAGE_KEY,
    load_profile,
    profile_from_json,
    profile_to_json,
    save_profile,
)
from posterizer.types import ParameterSet, PixelBuffer, ProfileConfig, StyleProfile

logger = logging.getLogger(__name__)


class StyleSession:
    """
    Holds the active parameters and profile.

    With `auto_apply` on, every profile that becomes active (analyzed,
    imported or loaded) replaces the active parameters with its
    suggestion. Failed imports and loads leave the session untouched.
    """

    def __init__(
        self,
        params: Optional[ParameterSet] = None,
        store=None,
        auto_apply: bool = True,
        config: Optional[ProfileConfig] = None,
        rng: Optional[np.random.Generator] = None,
        storage_key: str = PROFILE_STORAGE_KEY,
    ):
        self.params = params or ParameterSet()
        self.profile: Optional[StyleProfile] = None
        self.store = store if store is not None else MemoryStore()
        self.auto_apply = auto_apply
        self.config = config or ProfileConfig()
        self.rng = rng
        self.storage_key = storage_key

    def apply_suggested(self, suggested: ParameterSet) -> None:
        self.params = suggested

    def _activate(self, profile: StyleProfile) -> StyleProfile:
        self.profile = profile
        if self.auto_apply:
            self.apply_suggested(profile.suggested)
        return profile

    def analyze(self, references: Sequence[PixelBuffer]) -> StyleProfile:
        """Analyze references, activate and persist the resulting profile."""
        profile = analyze(references, self.config, self.rng, base=self.params)
        self._activate(profile)
        save_profile(self.store, profile, self.storage_key)
        return profile

    def import_profile(self, text: str) -> StyleProfile:
        """
        Import a JSON profile, activate and persist it.

        Raises:
            MalformedProfileError: If `text` is not a valid profile
        """
        profile = profile_from_json(text, base=self.params)
        self._activate(profile)
        save_profile(self.store, profile, self.storage_key)
        logger.info(f"Imported profile '{profile.name}'")
        return profile

    def export_profile(self) -> Optional[str]:
        if self.profile is None:
            return None
        return profile_to_json(self.profile)

    def load_saved(self) -> Optional[StyleProfile]:
        """Activate the persisted profile, if any."""
        profile = load_profile(self.store, self.storage_key, base=self.params)
        if profile is None:
            return None
        return self._activate(profile)

    def stylize(self, source: PixelBuffer) -> PixelBuffer:
        """Stylize with the active parameters and profile palette."""
        palette = self.profile.palette if self.profile is not None else None
        return StylizePipeline(self.params, rng=self.rng).process(source, palette)
