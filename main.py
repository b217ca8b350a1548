"""
main.py — Command-line entry point.

Analyses packaging images from disk with the same pipeline an embedding
application would call:

    python main.py front.jpg back.png --out heatmaps/
    python main.py front.jpg --json > results.json

Heatmaps are written as <id>_heatmap.jpg into --out in both modes; the id is
the file stem, with -2, -3… appended when two inputs share a stem.
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import config
from errors import ConfigError
from image_codec import from_data_uri, to_data_uri
from models import AnalysisResult, UploadedImage
from orchestrator import analyse_images

logging.basicConfig(
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    handlers=[logging.StreamHandler(sys.stderr)],
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def _load_images(paths: list[Path]) -> list[UploadedImage]:
    """One UploadedImage per path; ids are file stems, suffixed -2, -3… on collision."""
    images = []
    used: set[str] = set()
    for path in paths:
        image_id, n = path.stem, 1
        while image_id in used:
            n += 1
            image_id = f"{path.stem}-{n}"
        used.add(image_id)
        raw = path.read_bytes()
        images.append(UploadedImage(id=image_id, raw_bytes=raw, preview=to_data_uri(raw)))
    return images


def _write_heatmap(result: AnalysisResult, out_dir: Path) -> Path | None:
    if result.heatmap_src is None:
        return None
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / f"{result.image_id}_heatmap.jpg"
    target.write_bytes(from_data_uri(result.heatmap_src))
    return target


def _summary(result: AnalysisResult, heatmap_path: Path | None) -> str:
    lines = [
        f"{result.image_id}",
        f"  attention  {result.attention_score:4.1f}/10",
        f"  colour     {result.color_impact:4.1f}/10",
        f"  readability{result.readability:5.1f}/10",
        f"  brand      {result.brand_visibility:4.1f}/10",
        f"  heatmap    {heatmap_path or 'not available'}",
        "  suggestions:",
    ]
    lines += [f"    • {s}" for s in result.suggestions]
    return "\n".join(lines)


async def run(paths: list[Path], out_dir: Path, as_json: bool) -> None:
    images = _load_images(paths)
    results = await analyse_images(images)

    heatmap_paths = [_write_heatmap(result, out_dir) for result in results]

    if as_json:
        print(json.dumps([r.to_dict() for r in results], indent=2))
        return

    for result, heatmap_path in zip(results, heatmap_paths):
        print(_summary(result, heatmap_path))
        print()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Score packaging designs for visual attention.")
    parser.add_argument("images", nargs="+", type=Path, help="image files to analyse")
    parser.add_argument("--out", type=Path, default=Path("heatmaps"),
                        help="directory for heatmap JPEGs (default: heatmaps/)")
    parser.add_argument("--json", action="store_true",
                        help="print results as JSON instead of a summary")
    args = parser.parse_args(argv)

    missing = [p for p in args.images if not p.is_file()]
    if missing:
        parser.error(f"not a file: {', '.join(str(p) for p in missing)}")

    try:
        asyncio.run(run(args.images, args.out, args.json))
    except ConfigError as exc:
        logger.critical("Configuration error: %s", exc)
        return 2
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
