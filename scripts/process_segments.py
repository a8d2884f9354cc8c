#!/usr/bin/env python3
"""Classify content segments and generate diagram layouts.

Reads a JSON file of segments as produced by the transcription step (either
a list or an object with a ``segments`` key; each segment has ``id``,
``text``, ``keywords``, ``startMs`` and ``endMs``) and writes one processed
record per segment with its detection, layout and quality metrics.

Usage:
    python scripts/process_segments.py SEGMENTS_JSON [options]

Options:
    --output PATH          Write processed JSON here (default: output/diagrams/<input name>)
    --workers N            Worker threads (default: DIAGRAM_MAX_WORKERS or 4)
    --timeout SECONDS      Per-segment wall-clock budget (default: none)
    --width / --height     Canvas size in pixels (default: 1920x1080)
    --log-level LEVEL      Logging level (default: DIAGRAM_ENGINE_LOG_LEVEL or INFO)
"""

from __future__ import annotations

import argparse
import json
import sys
from collections import Counter
from pathlib import Path

from dotenv import load_dotenv

# Add project root so we can import diagram_engine without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

from diagram_engine.config import EngineConfig  # noqa: E402
from diagram_engine.domain.layout import ProcessedSegment  # noqa: E402
from diagram_engine.services.pipeline import process_segments  # noqa: E402
from diagram_engine.utils.logging import setup_logger  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Classify segments and generate diagram layouts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", type=Path, help="JSON file with content segments")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output JSON path (default: output/diagrams/<input name>)",
    )
    parser.add_argument("--workers", type=int, default=None, help="Worker threads")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-segment wall-clock budget in seconds",
    )
    parser.add_argument("--width", type=float, default=None, help="Canvas width in pixels")
    parser.add_argument("--height", type=float, default=None, help="Canvas height in pixels")
    parser.add_argument("--log-level", default=None, help="Logging level")
    return parser.parse_args()


def load_segments(path: Path) -> list[dict]:
    """Load raw segment dicts from a JSON artifact."""
    if not path.exists():
        raise FileNotFoundError(f"Segments file not found: {path}")

    with open(path, "r", encoding="utf-8") as fp:
        data = json.load(fp)

    if isinstance(data, dict):
        data = data.get("segments", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of segments in {path}")
    return data


def print_summary(results: list[ProcessedSegment], output_path: Path) -> None:
    """Summarize the processed batch."""
    print("\n" + "=" * 70)
    print("📊 DIAGRAM PROCESSING SUMMARY")
    print("=" * 70)
    print(f"Segments processed: {len(results)}")
    print(f"Degraded results:   {sum(1 for r in results if r.degraded)}")

    if results:
        avg_conf = sum(r.detection.confidence for r in results) / len(results)
        avg_aesthetic = sum(r.quality.aesthetic_score for r in results) / len(results)
        print(f"Avg confidence:     {avg_conf:.2f}")
        print(f"Avg aesthetic:      {avg_aesthetic:.2f}")

        print("Type distribution:")
        distribution = Counter(r.detection.type.value for r in results)
        for diagram_type, count in distribution.most_common():
            print(f"   {diagram_type:15s}: {count}")

    print(f"\n✅ Saved: {output_path}")
    print("=" * 70 + "\n")


def main() -> None:
    load_dotenv()
    args = parse_args()
    setup_logger("diagram_engine", level=args.log_level)

    config = EngineConfig.from_env()
    canvas_params = {}
    if args.width is not None:
        canvas_params["width"] = args.width
    if args.height is not None:
        canvas_params["height"] = args.height
    config = config.with_overrides(canvas_params=canvas_params)

    try:
        segments = load_segments(args.input)
    except (FileNotFoundError, ValueError, json.JSONDecodeError) as exc:
        print(f"❌ {exc}")
        sys.exit(1)

    results = process_segments(
        segments,
        config=config,
        max_workers=args.workers,
        timeout_s=args.timeout,
    )

    output_path = args.output or Path("output/diagrams") / args.input.name
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as fp:
        json.dump({"segments": [r.to_dict() for r in results]}, fp, indent=2)

    print_summary(results, output_path)


if __name__ == "__main__":
    main()
