"""Generate a batch of images from the command line and record them in history."""
import argparse
import sys

from studio.batch import MAX_BATCH_SIZE, batch_status, run_batch
from studio.errors import ValidationError
from studio.history import HistoryStore, JsonFileBackend
from studio.log import setup_logging
from studio.models import (
    DEFAULT_GUIDANCE_SCALE,
    DEFAULT_HEIGHT,
    DEFAULT_INFERENCE_STEPS,
    DEFAULT_WIDTH,
    GenerationRequest,
    GenerationStatus,
)
from studio.provider_client import get_config


def parse_args(argv=None):
    cfg = get_config()
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("prompt", help="Text description of the desired image")
    parser.add_argument("-n", "--count", type=int, default=1, help=f"Number of images (1-{MAX_BATCH_SIZE})")
    parser.add_argument("--system-prompt", default=None)
    parser.add_argument("--style", default=None, help="Style preset id, e.g. cinematic")
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH)
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT)
    parser.add_argument("--guidance-scale", type=float, default=DEFAULT_GUIDANCE_SCALE)
    parser.add_argument("--steps", type=int, default=DEFAULT_INFERENCE_STEPS)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--timeout", type=float, default=cfg["timeout"])
    parser.add_argument("--history", default=cfg["history_path"], help="History JSON file")
    parser.add_argument("--history-max", type=int, default=50)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging()

    request = GenerationRequest(
        prompt=args.prompt,
        system_prompt=args.system_prompt,
        style=args.style,
        width=args.width,
        height=args.height,
        guidance_scale=args.guidance_scale,
        num_inference_steps=args.steps,
        seed=args.seed,
    )
    store = HistoryStore(JsonFileBackend(args.history), max_entries=args.history_max)

    print(f"Generating {args.count} image(s): {args.prompt}\n")
    try:
        results = run_batch(
            request,
            count=args.count,
            history=store,
            on_progress=lambda pct: print(f"  ... {pct:.0f}%"),
            timeout=args.timeout,
        )
    except ValidationError as e:
        print(f"Invalid request: {e}")
        return 2

    for i, result in enumerate(results, 1):
        if result.status == GenerationStatus.COMPLETED:
            print(f"[{i}/{len(results)}] Created: {result.image_url}")
        else:
            print(f"[{i}/{len(results)}] Failed: {result.error}")

    status = batch_status(results)
    print(f"\nBatch {status}. History: {args.history}")
    return 0 if status != "failed" else 1


if __name__ == "__main__":
    sys.exit(main())
