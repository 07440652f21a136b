"""Tests for reference-set profile analysis."""
import numpy as np
import pytest

from posterizer.profile import analyze, downsample, fit_within, image_statistics
from posterizer.types import (
    EmptyInputError,
    MotifPack,
    ParameterSet,
    PixelBuffer,
    ProfileConfig,
    RGBColor,
)


def split_array(width: int, height: int) -> np.ndarray:
    """Black left half, white right half."""
    image = np.zeros((height, width, 3), dtype=np.uint8)
    image[:, width // 2:] = 255
    return image


class TestFitWithin:
    """Test aspect-preserving downsampling."""

    def test_landscape(self):
        """Test a wide image fits the box width."""
        assert fit_within(1000, 500, 256, 256) == (256, 128)

    def test_no_upscale(self):
        """Test small images keep their size."""
        assert fit_within(100, 50, 256, 256) == (100, 50)

    def test_minimum_one_pixel(self):
        """Test extreme aspect ratios keep at least one pixel."""
        assert fit_within(1000, 1, 256, 256) == (256, 1)

    def test_downsample(self):
        """Test buffers are resized only when too large."""
        small = PixelBuffer.blank(20, 10)
        assert downsample(small, 256) is small

        large = PixelBuffer.from_array(np.zeros((300, 512, 3), dtype=np.uint8))
        assert downsample(large, 256).size == (256, 150)


class TestImageStatistics:
    """Test per-image statistics."""

    def test_flat_gray(self, flat_image):
        """Test a flat gray image has no saturation, contrast or edges."""
        stats = image_statistics(flat_image, ProfileConfig())

        assert stats.mean_saturation == 0.0
        assert stats.saturation_std == 0.0
        assert stats.contrast_index == 0.0
        assert stats.edge_density == 0.0
        assert len(stats.samples) == 32 * 24

    def test_split_contrast(self):
        """Test half black, half white has lightness std of 0.5."""
        image = PixelBuffer.from_array(split_array(40, 20))
        stats = image_statistics(image, ProfileConfig())

        assert stats.contrast_index == pytest.approx(0.5)
        assert stats.edge_density == pytest.approx(2 * 18 / 800)

    def test_sample_cap(self):
        """Test large images are downsampled and sampled at a stride."""
        image = PixelBuffer.from_array(np.zeros((300, 512, 3), dtype=np.uint8))
        stats = image_statistics(image, ProfileConfig())

        # 256 x 150 after downsampling, stride 38400 // 4000 = 9
        assert len(stats.samples) == len(range(0, 256 * 150, 9))


class TestAnalyze:
    """Test analyze()."""

    def test_empty_references(self):
        """Test that no references is an explicit failure."""
        with pytest.raises(EmptyInputError):
            analyze([])

    def test_flat_gray_profile(self, flat_image):
        """Test profile and suggestion for a flat gray reference."""
        profile = analyze([flat_image], rng=np.random.default_rng(0))

        assert profile.name == "CustomProfile"
        assert len(profile.palette) == 6
        assert all(c == RGBColor(128, 128, 128) for c in profile.palette)
        assert profile.mean_saturation == 0.0
        assert profile.contrast_index == 0.0

        suggested = profile.suggested
        assert suggested.outline_weight == pytest.approx(0.4)
        assert suggested.saturation_boost == pytest.approx(0.5)  # clamped from 0.56
        assert suggested.halftone_density == pytest.approx(0.05)
        assert suggested.burst_strength == pytest.approx(0.3)
        assert suggested.style_intensity == pytest.approx(0.6)
        assert suggested.motif_pack is MotifPack.PSYCHEDELIA
        assert suggested.apply_palette_transfer is True

    def test_statistics_are_averaged(self, flat_image):
        """Test aggregate statistics are the mean over references."""
        split = PixelBuffer.from_array(split_array(40, 20))
        config = ProfileConfig()

        profile = analyze([flat_image, split], config, rng=np.random.default_rng(0))
        a = image_statistics(flat_image, config)
        b = image_statistics(split, config)

        assert profile.edge_density == pytest.approx((a.edge_density + b.edge_density) / 2)
        assert profile.contrast_index == pytest.approx((a.contrast_index + b.contrast_index) / 2)
        assert profile.saturation_std == pytest.approx((a.saturation_std + b.saturation_std) / 2)

    def test_warm_reference_suggests_flames(self):
        """Test a saturated red reference leans warm."""
        red = PixelBuffer.from_array(np.full((16, 16, 3), [220, 30, 20], dtype=np.uint8))
        profile = analyze([red], ProfileConfig(n_colors=3), rng=np.random.default_rng(0))

        assert profile.mean_saturation > 0.7
        assert profile.suggested.motif_pack is MotifPack.FLAMES

    def test_cool_reference_suggests_waves(self):
        """Test a saturated blue reference leans cool."""
        blue = PixelBuffer.from_array(np.full((16, 16, 3), [20, 120, 230], dtype=np.uint8))
        profile = analyze([blue], ProfileConfig(n_colors=3), rng=np.random.default_rng(0))

        assert profile.suggested.motif_pack is MotifPack.WAVES

    def test_config_and_base(self, flat_image):
        """Test config name/size and base parameters carry through."""
        base = ParameterSet(halftone_enabled=False, transparent_background=True)
        profile = analyze(
            [flat_image], ProfileConfig(n_colors=3, name="Surf"), rng=np.random.default_rng(0), base=base
        )

        assert profile.name == "Surf"
        assert len(profile.palette) == 3
        assert profile.suggested.halftone_enabled is False
        assert profile.suggested.transparent_background is True
