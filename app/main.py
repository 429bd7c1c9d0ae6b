"""Command-line entry point for generating seed-locked image datasets."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from app.config import Settings, settings
from lumenset.backends.bria import BriaBackend
from lumenset.core.dataset_generator import DatasetGenerator
from lumenset.core.errors import GenerationError
from lumenset.core.models import GenerationResult, ModificationRecord, ProgressEvent, ProgressStatus
from lumenset.core.sweep import SweepConfig, build_variations

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

LIGHTING_CHOICES = ["front-lit", "side-lit", "back-lit", "top-lit"]
BACKGROUND_CHOICES = ["white-studio", "black-studio", "wooden-surface", "fabric-texture"]


def create_backend(config: Settings = settings) -> BriaBackend:
    """Create the Bria backend from settings.

    Raises:
        ValueError: If the API token is missing
    """
    config.validate_required_keys()
    return BriaBackend(
        config.bria_api_token,
        base_url=config.bria_base_url,
        request_delay=config.request_delay,
        poll_interval=config.poll_interval,
        max_poll_attempts=config.max_poll_attempts,
        timeout=config.request_timeout
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lumenset",
        description="Generate a reproducible, labeled image dataset from an object description."
    )
    parser.add_argument("description", help="Free-text description of the object")
    parser.add_argument("--image", action="append", type=Path, default=[],
                        help="Reference image file (repeatable)")
    parser.add_argument("-o", "--output", type=Path, default=Path("dataset.json"),
                        help="Where to write the result records (default: dataset.json)")

    camera = parser.add_argument_group("camera")
    camera.add_argument("--rotation-sweep", action="store_true", help="Sweep yaw over -90..90")
    camera.add_argument("--tilt-sweep", action="store_true", help="Sweep pitch over -45..45")
    camera.add_argument("--zoom-sweep", action="store_true", help="Sweep zoom over 0, 5, 10")
    camera.add_argument("--rotation", type=int, default=0, help="Yaw when not sweeping")
    camera.add_argument("--tilt", type=int, default=0, help="Pitch when not sweeping")
    camera.add_argument("--zoom", type=int, default=5, choices=[0, 5, 10],
                        help="Zoom when not sweeping")
    camera.add_argument("--focal-length", default="standard")
    camera.add_argument("--aperture")

    lighting = parser.add_argument_group("lighting")
    lighting.add_argument("--lighting", nargs="+", choices=LIGHTING_CHOICES, default=[],
                          help="Lighting directions to sweep (default: front-lit)")
    lighting.add_argument("--lighting-contrast", choices=["high", "medium", "low"])
    lighting.add_argument("--shadow-behavior", choices=["soft", "hard edge", "minimal"])
    lighting.add_argument("--color-temperature",
                          help="neutral-warm, neutral-cool, warm, cool or free text")

    scene = parser.add_argument_group("scene")
    scene.add_argument("--background", choices=BACKGROUND_CHOICES, default="white-studio")
    scene.add_argument("--background-color", help="Exact backdrop color as hex, overrides --background")
    scene.add_argument("--surface-finish", help="matte, glossy, satin, unglazed or free text")
    scene.add_argument("--surface-tone")
    scene.add_argument("--surface-color", help="Exact surface color as hex")
    scene.add_argument("--imperfection", action="append", default=[],
                       help="Surface imperfection to describe (repeatable)")
    scene.add_argument("--negative-space", choices=["minimal", "medium", "generous"])
    scene.add_argument("--mood", nargs="+", default=[])

    return parser


def sweep_config_from_args(args: argparse.Namespace) -> SweepConfig:
    """Translate parsed arguments into a sweep configuration."""
    advanced = ModificationRecord(
        lighting_contrast=args.lighting_contrast,
        shadow_behavior=args.shadow_behavior,
        color_temperature=args.color_temperature,
        background_color_hex=args.background_color,
        surface_finish=args.surface_finish,
        surface_tone=args.surface_tone,
        surface_color_hex=args.surface_color,
        add_imperfections=bool(args.imperfection),
        imperfection_types=args.imperfection,
        negative_space=args.negative_space,
        mood=args.mood,
        aperture=args.aperture
    )
    return SweepConfig(
        rotation_sweep=args.rotation_sweep,
        tilt_sweep=args.tilt_sweep,
        zoom_sweep=args.zoom_sweep,
        rotation_degrees=args.rotation,
        tilt_degrees=args.tilt,
        zoom_level=args.zoom,
        lighting_directions=args.lighting,
        background=args.background,
        focal_length=args.focal_length,
        advanced=advanced
    )


def log_progress(event: ProgressEvent) -> None:
    """Report a progress event through logging."""
    position = f"{event.index + 1}/{event.total}"
    if event.status == ProgressStatus.GENERATING:
        logger.debug(f"[{position}] {event.name}: {event.progress or 0.0:.0%}")
    elif event.status == ProgressStatus.COMPLETED:
        logger.info(f"[{position}] {event.name}: done (seed {event.result.seed})")
    else:
        logger.error(f"[{position}] {event.name}: {event.error}")


def write_results(results: List[GenerationResult], output: Path) -> None:
    records = [result.model_dump(mode="json", exclude_none=True) for result in results]
    output.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Wrote {len(records)} records to {output}")


async def run(args: argparse.Namespace, config: Settings = settings) -> List[GenerationResult]:
    """Derive the base prompt, build the sweep and generate the dataset."""
    variations = build_variations(sweep_config_from_args(args), config.max_variations)
    images = [path.read_bytes() for path in args.image]

    async with create_backend(config) as backend:
        base = await backend.generate_structured_prompt(args.description, images or None)
        generator = DatasetGenerator(backend)
        results = await generator.generate_dataset(
            base.structured_prompt, variations, log_progress
        )
        logger.info(f"Run summary: {generator.summarize(results)}")
        return results


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        results = asyncio.run(run(args))
    except (ValueError, GenerationError) as e:
        logger.error(f"Dataset generation failed: {e}")
        return 1

    write_results(results, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
