#!/usr/bin/env python3
"""Inspect the travel quest timeline for a stop list and optionally export the video."""
from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from travel_quest.config import TimelineConfig
from travel_quest.engine import composition_duration, cue_sheet, render_state, resolve_stops
from travel_quest.render import RenderOptions, write_video
from travel_quest.stops import Stop, load_stops


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Build a travel quest animation from a stop list (JSON list of stops, or a CSV file "
            "with location, latitude and longitude columns)."
        )
    )
    parser.add_argument(
        "stops_path",
        help="Path to the stops file. Stops are played in list order.",
    )
    parser.add_argument(
        "--frame",
        type=int,
        help="Print the render state at this frame as JSON.",
    )
    parser.add_argument(
        "--cues",
        help="Write the one-shot cue sheet (camera clicks) as JSON to this path.",
    )
    parser.add_argument(
        "--video",
        help="Optional path for the exported video.",
    )
    parser.add_argument(
        "--video-format",
        default="mp4",
        choices=["mp4", "webm", "mkv", "mov", "gif"],
        help="Container/format for exported video (default: mp4).",
    )
    parser.add_argument(
        "--bitrate",
        default="16M",
        help="Target video bitrate when using ffmpeg-backed formats (e.g., 8M, 16M).",
    )
    parser.add_argument(
        "--frame-format",
        default="png",
        choices=["png", "jpeg", "webp"],
        help="Image format for per-frame rendering during video export.",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker processes used to rasterise frames (default: 1).",
    )
    parser.add_argument(
        "--title",
        default="",
        help="Optional title drawn above every frame.",
    )
    parser.add_argument(
        "--assets",
        help="Directory holding character.png, default-scenery.png and relative photo paths.",
    )
    parser.add_argument(
        "--config",
        help="JSON file with timeline config overrides (field name -> value).",
    )
    parser.add_argument(
        "--fps",
        type=int,
        help="Frames per second of the composition (default: 30).",
    )
    parser.add_argument(
        "--travel-zoom-mode",
        choices=["constant", "spring"],
        help="Hold the travel zoom constant or ease it in with a damped spring.",
    )
    parser.add_argument(
        "--width",
        type=int,
        help="Width of the exported video in pixels (default: 1080).",
    )
    parser.add_argument(
        "--height",
        type=int,
        help="Height of the exported video in pixels (default: 1080).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log engine debug output.",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> TimelineConfig:
    overrides = {}
    if args.config:
        overrides.update(json.loads(Path(args.config).read_text(encoding="utf-8")))
    for field_name, value in (
        ("fps", args.fps),
        ("travel_zoom_mode", args.travel_zoom_mode),
        ("video_width", args.width),
        ("video_height", args.height),
    ):
        if value is not None:
            overrides[field_name] = value
    return TimelineConfig.from_mapping(overrides)


def describe(stops: List[Stop], config: TimelineConfig) -> str:
    resolved = resolve_stops(stops)
    duration = composition_duration(resolved, config)
    return (
        f"{len(stops)} stops, {len(resolved)} with coordinates, "
        f"{resolved.segment_count} segments, {duration} frames ({duration / config.fps:.1f}s)"
    )


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    stops_path = Path(args.stops_path)
    if not stops_path.exists():
        raise FileNotFoundError(f"Stops file not found: {stops_path}")

    stops = load_stops(stops_path)
    config = build_config(args)
    print(f"🗺️  {describe(stops, config)}")

    if args.frame is not None:
        frame = max(0, args.frame)
        print(json.dumps(render_state(frame, stops, config).to_dict(), indent=2, ensure_ascii=False))

    if args.cues:
        cues = cue_sheet(stops, config)
        cues_path = Path(args.cues)
        cues_path.parent.mkdir(parents=True, exist_ok=True)
        cues_path.write_text(json.dumps([asdict(cue) for cue in cues], indent=2), encoding="utf-8")
        print(f"🔔 Cue sheet written to {cues_path.resolve()}")

    if args.video:
        options = RenderOptions(
            title=args.title,
            frame_format=args.frame_format,
            asset_dir=Path(args.assets) if args.assets else None,
        )
        output_path = write_video(
            stops,
            config,
            Path(args.video),
            options=options,
            video_format=args.video_format,
            bitrate=args.bitrate,
            workers=max(1, args.workers),
        )
        print(f"🎬 Quest video written to {output_path.resolve()}")


if __name__ == "__main__":
    main()
