"""Command line interface for Posterizer."""
import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

import numpy as np

from posterizer.pipeline import StylizePipeline
from posterizer.profile import analyze
from posterizer.profile_io import profile_from_json, profile_to_json
from posterizer.raster_ingest import ingest, save
from posterizer.types import MotifPack, ParameterSet, PosterizerError, ProfileConfig, StyleProfile


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='posterizer',
        description='Stylize photos into poster illustrations and build style profiles'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for motifs and palette clustering (default: unseeded)'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    stylize_parser = subparsers.add_parser('stylize', help='Stylize an image')
    stylize_parser.add_argument('input', type=str, help='Input image path')
    stylize_parser.add_argument(
        '-o', '--output',
        type=str,
        help='Output image path (default: input_poster.png)'
    )
    stylize_parser.add_argument(
        '--profile',
        type=str,
        default=None,
        help='Style profile JSON; its suggested parameters and palette are used'
    )
    stylize_parser.add_argument('--intensity', type=float, default=None, help='Style intensity 0-1 (default: 0.7)')
    stylize_parser.add_argument('--outline', type=float, default=None, help='Outline weight 0.3-1 (default: 0.8)')
    stylize_parser.add_argument('--saturation', type=float, default=None, help='Saturation boost 0-0.5 (default: 0.3)')
    stylize_parser.add_argument('--halftone', type=float, default=None, help='Halftone density 0-0.4 (default: 0.15)')
    stylize_parser.add_argument('--no-halftone', action='store_true', help='Disable the halftone overlay')
    stylize_parser.add_argument('--burst', type=float, default=None, help='Burst strength 0-1 (default: 0.5)')
    stylize_parser.add_argument(
        '--motif',
        choices=[m.value for m in MotifPack],
        default=None,
        help='Motif pack (default: waves)'
    )
    stylize_parser.add_argument('--transparent', action='store_true', help='Keep the background transparent')
    stylize_parser.add_argument('--no-palette', action='store_true', help='Skip palette transfer')
    stylize_parser.add_argument(
        '--save-stages',
        type=str,
        default=None,
        help='Directory to save pipeline stage debug images'
    )

    analyze_parser = subparsers.add_parser('analyze', help='Build a style profile from reference images')
    analyze_parser.add_argument('references', nargs='+', help='Reference image paths')
    analyze_parser.add_argument(
        '-o', '--output',
        type=str,
        default='profile.json',
        help='Output profile JSON path (default: profile.json)'
    )
    analyze_parser.add_argument('--name', type=str, default='CustomProfile', help='Profile name')
    analyze_parser.add_argument('--colors', type=int, default=6, help='Palette size (default: 6)')
    analyze_parser.add_argument('--workers', type=int, default=1, help='Parallel workers for per-image statistics')

    return parser


def build_params(args: argparse.Namespace, base: ParameterSet) -> ParameterSet:
    """Override `base` with any parameter flags given on the command line."""
    overrides = {
        'style_intensity': args.intensity,
        'outline_weight': args.outline,
        'saturation_boost': args.saturation,
        'halftone_density': args.halftone,
        'burst_strength': args.burst,
        'motif_pack': args.motif,
    }
    values = {k: v for k, v in overrides.items() if v is not None}
    if args.no_halftone:
        values['halftone_enabled'] = False
    if args.transparent:
        values['transparent_background'] = True
    if args.no_palette:
        values['apply_palette_transfer'] = False
    return replace(base, **values)


def read_profile(path: Path) -> StyleProfile:
    """
    Load a profile JSON file.

    Raises:
        FileNotFoundError: If file doesn't exist
        PosterizerError: If file cannot be read or is not a valid profile
    """
    if not path.exists():
        raise FileNotFoundError(f"Profile file not found: {path}")
    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        raise PosterizerError(f"Failed to read profile {path}: {e}") from e
    return profile_from_json(text)


def run_stylize(args: argparse.Namespace, rng: np.random.Generator) -> int:
    input_path = Path(args.input)
    output_path = Path(args.output) if args.output else input_path.with_name(f"{input_path.stem}_poster.png")

    palette = None
    base = ParameterSet()
    if args.profile:
        profile = read_profile(Path(args.profile))
        palette = profile.palette
        base = profile.suggested
        print(f"Profile: {profile.name} ({len(palette)} colors)")

    params = build_params(args, base)
    source = ingest(input_path)
    print(f"  Image: {source.width}x{source.height}")

    pipeline = StylizePipeline(params, rng=rng, debug=bool(args.save_stages))
    result = pipeline.process(source, palette)
    save(result, output_path)
    print(f"Saved: {output_path}")

    if args.save_stages:
        stages_dir = Path(args.save_stages)
        stages_dir.mkdir(parents=True, exist_ok=True)
        for name, stage in pipeline.debug_stages:
            save(stage, stages_dir / f"{name}.png")
        print(f"Debug stages saved to: {stages_dir}")
    return 0


def run_analyze(args: argparse.Namespace, rng: np.random.Generator) -> int:
    references = [ingest(path, max_side=None) for path in args.references]
    config = ProfileConfig(n_colors=args.colors, workers=args.workers, name=args.name)
    profile = analyze(references, config, rng)

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(profile_to_json(profile), encoding='utf-8')

    swatches = ' '.join(f"#{c.r:02x}{c.g:02x}{c.b:02x}" for c in profile.palette)
    print(f"Palette: {swatches}")
    print(f"  Mean saturation: {profile.mean_saturation:.3f}")
    print(f"  Edge density: {profile.edge_density:.3f}")
    print(f"  Contrast index: {profile.contrast_index:.3f}")
    print(f"  Suggested motif: {profile.suggested.motif_pack.value}")
    print(f"Saved: {output_path}")
    return 0


def main(args=None):
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.INFO,
        format='%(levelname)s %(name)s: %(message)s'
    )
    rng = np.random.default_rng(parsed_args.seed)

    try:
        if parsed_args.command == 'stylize':
            return run_stylize(parsed_args, rng)
        return run_analyze(parsed_args, rng)
    except (FileNotFoundError, PosterizerError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
