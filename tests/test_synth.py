"""Tests for halftone, burst and motif synthesis."""
import math

import numpy as np
import pytest

from posterizer.burst import burst_opacity, burst_rays, ray_count, render_burst
from posterizer.halftone import (
    halftone_centers,
    halftone_opacity,
    halftone_radius,
    halftone_spacing,
    render_halftone,
)
from posterizer.motifs import (
    cubic_bezier,
    generate_motifs,
    motif_opacity,
    render_motifs,
)
from posterizer.types import MotifPack


class TestHalftone:
    """Test the halftone dot lattice."""

    def test_spacing_strictly_decreases(self):
        """Test that dots get denser across the legal density range."""
        densities = [i / 20 + 0.001 for i in range(8)] + [0.4]
        spacings = [halftone_spacing(d) for d in densities]

        assert spacings[0] == 12
        assert spacings[-1] == 4
        assert all(a > b for a, b in zip(spacings, spacings[1:]))

    def test_radius_and_opacity(self):
        """Test dot radius and opacity formulas."""
        assert halftone_radius(12) == 3
        assert halftone_radius(4) == 1
        assert halftone_radius(2) == 1
        assert halftone_opacity(0.0) == pytest.approx(0.15)
        assert halftone_opacity(0.4) == pytest.approx(0.25)

    def test_lattice_origin(self):
        """Test that the lattice starts at (radius, radius)."""
        xs, ys = halftone_centers(50, 30, 0.0)
        np.testing.assert_array_equal(xs, [3, 15, 27, 39])
        np.testing.assert_array_equal(ys, [3, 15, 27])

    def test_render(self):
        """Test dot coverage at a center and between dots."""
        mask = render_halftone(50, 30, 0.0)

        assert mask.shape == (30, 50)
        assert mask[3, 3] == 1.0
        assert mask[9, 9] == 0.0

    def test_deterministic(self):
        """Test identical output for identical inputs."""
        np.testing.assert_array_equal(render_halftone(64, 48, 0.2), render_halftone(64, 48, 0.2))


class TestBurst:
    """Test radial sunburst rays."""

    def test_ray_count(self):
        """Test ray count formula."""
        assert ray_count(0.0) == 16
        assert ray_count(0.5) == 48
        assert ray_count(1.0) == 80

    def test_noop_when_weak(self):
        """Test that strength <= 0.01 draws nothing."""
        assert burst_rays(100, 100, 0.01) == []
        assert not render_burst(100, 100, 0.0).any()

    def test_rays_start_at_radius_20(self):
        """Test that rays leave the center untouched."""
        rays = burst_rays(200, 100, 0.5)

        assert len(rays) == 48
        for x1, y1, x2, y2 in rays:
            assert math.hypot(x1 - 100, y1 - 50) == pytest.approx(20)
            assert math.hypot(x2 - 100, y2 - 50) == pytest.approx(200)

        mask = render_burst(200, 100, 0.5)
        assert mask[50, 100] == 0.0
        assert mask.sum() > 0

    def test_opacity(self):
        """Test burst opacity scales with strength."""
        assert burst_opacity(0.8) == pytest.approx(0.2)

    def test_overlapping_rays_darken(self):
        """Test crowded rays near the center stack beyond one ray's opacity."""
        alpha = render_burst(200, 100, 1.0)

        assert alpha.max() > burst_opacity(1.0) + 0.1
        # a lone ray far from the center carries exactly the burst opacity
        assert alpha[50, 199] == pytest.approx(burst_opacity(1.0))


class TestMotifs:
    """Test motif packs."""

    @pytest.mark.parametrize("intensity,expected", [(0.0, 3), (0.5, 5), (1.0, 8)])
    def test_wave_count(self, intensity, expected):
        """Test number of wave curls."""
        assert len(generate_motifs(300, 200, MotifPack.WAVES, intensity)) == expected

    @pytest.mark.parametrize("intensity,expected", [(0.0, 25), (0.5, 45), (1.0, 65)])
    def test_flame_count(self, intensity, expected):
        """Test number of flame tongues."""
        rng = np.random.default_rng(0)
        assert len(generate_motifs(300, 200, "flames", intensity, rng)) == expected

    @pytest.mark.parametrize("intensity,expected", [(0.0, 4), (0.5, 7), (1.0, 10)])
    def test_spiral_count(self, intensity, expected):
        """Test number of spirals."""
        rng = np.random.default_rng(0)
        assert len(generate_motifs(300, 200, "psychedelia", intensity, rng)) == expected

    def test_none_draws_nothing(self):
        """Test that the none pack is empty."""
        assert generate_motifs(100, 100, MotifPack.NONE, 1.0) == []
        assert not render_motifs(100, 100, "none", 1.0).any()

    def test_unknown_pack(self):
        """Test that an unknown pack name is rejected."""
        with pytest.raises(ValueError):
            generate_motifs(100, 100, "stars", 0.5)

    def test_waves_deterministic(self):
        """Test that waves do not depend on randomness."""
        a = generate_motifs(300, 200, "waves", 0.7)
        b = generate_motifs(300, 200, "waves", 0.7)
        for shape_a, shape_b in zip(a, b):
            np.testing.assert_array_equal(shape_a.points, shape_b.points)

    def test_wave_tapers(self):
        """Test that a curl's radius tapers toward zero."""
        curl = generate_motifs(300, 200, "waves", 0.0)[0]
        # first curl: cx = 300 / 4, cy = 0.65 * 200, tightness 1.0
        center = np.array([75.0, 130.0])
        radii = np.hypot(*(curl.points - center).T)

        assert radii[0] == pytest.approx(200 * 0.35)
        assert radii[-1] < radii[0] * 0.1
        assert not curl.closed

    def test_flames_seeded(self):
        """Test seeded flames repeat and different seeds differ."""
        a = generate_motifs(300, 200, "flames", 0.5, np.random.default_rng(5))
        b = generate_motifs(300, 200, "flames", 0.5, np.random.default_rng(5))
        c = generate_motifs(300, 200, "flames", 0.5, np.random.default_rng(6))

        np.testing.assert_array_equal(np.vstack([s.points for s in a]), np.vstack([s.points for s in b]))
        assert not np.array_equal(np.vstack([s.points for s in a]), np.vstack([s.points for s in c]))

    def test_flame_geometry(self):
        """Test tongues are closed, anchored at 85% height and 20-45% tall."""
        width, height = 300, 200
        flames = generate_motifs(width, height, "flames", 0.0, np.random.default_rng(1))

        for i, flame in enumerate(flames):
            assert flame.closed
            assert flame.points[0, 0] == pytest.approx(i / 25 * width)
            assert flame.points[0, 1] == pytest.approx(0.85 * height)
            tip = flame.points[:, 1].min()
            rise = 0.85 * height - tip
            assert 0.2 * height - 1e-9 <= rise <= 0.45 * height + 1e-9

    def test_spiral_geometry(self):
        """Test spirals have 200 steps and bounded radius."""
        width, height = 300, 200
        spirals = generate_motifs(width, height, "psychedelia", 1.0, np.random.default_rng(2))

        for spiral in spirals:
            assert len(spiral.points) == 200
            center = spiral.points[0]
            reach = np.hypot(*(spiral.points - center).T).max()
            assert reach <= 0.35 * min(width, height)

    def test_unseeded_randomized_pack(self):
        """Test that randomized packs work without an explicit generator."""
        mask = render_motifs(120, 90, "psychedelia", 0.5)
        assert mask.shape == (90, 120)
        assert mask.any()

    def test_opacity(self):
        """Test motif opacity scales with intensity."""
        assert motif_opacity(0.5) == pytest.approx(0.2)

    def test_crossing_strokes_darken(self):
        """Test overlapping wave curls stack beyond one stroke's opacity."""
        alpha = render_motifs(300, 200, "waves", 1.0)

        assert alpha.max() > motif_opacity(1.0) + 0.1
        assert alpha.max() < 1.0

    def test_cubic_bezier_endpoints(self):
        """Test bezier sampling hits both endpoints."""
        points = cubic_bezier((0, 0), (1, 2), (3, 2), (4, 0), segments=10)

        assert points.shape == (11, 2)
        np.testing.assert_allclose(points[0], [0, 0])
        np.testing.assert_allclose(points[-1], [4, 0])
