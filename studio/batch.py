"""
Batch Generation
================

Fan a prompt out to ``count`` concurrent provider calls and collect one
GenerationResult per slot.

Slots are independent: a slot that fails is returned as a failed result and
the others still complete. When the request carries a seed, slot ``i`` is
generated with ``seed + i``; without one every slot is unseeded.

Usage:
    from studio.batch import run_batch
    from studio.models import GenerationRequest

    results = run_batch(
        GenerationRequest(prompt="A lighthouse at dusk", seed=7),
        count=3,
        history=store,
        on_progress=lambda pct: print(f"{pct:.0f}%"),
    )
"""

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from typing import Callable

from studio.errors import BatchCancelled, ValidationError
from studio.images import generate_image
from studio.models import GenerationRequest, GenerationResult, GenerationStatus, HistoryEntry

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 4
CANCEL_POLL_INTERVAL = 0.1


class BatchProgress:
    """Exact batch progress in percent: finished slots over total slots."""

    def __init__(self, total: int, callback: Callable[[float], None] | None = None) -> None:
        self.total = total
        self.completed = 0
        self.percent = 0.0
        self.callback = callback

    def _set(self, percent: float) -> None:
        # never moves backwards while a batch is running
        self.percent = max(self.percent, min(percent, 100.0))
        if self.callback:
            self.callback(self.percent)

    def advance(self) -> None:
        self.completed = min(self.completed + 1, self.total)
        self._set(self.completed / self.total * 100)

    def finish(self) -> None:
        self.completed = self.total
        self._set(100.0)

    def reset(self) -> None:
        self.completed = 0
        self.percent = 0.0
        if self.callback:
            self.callback(self.percent)


def validate_request(request: GenerationRequest) -> None:
    if not request.prompt or not request.prompt.strip():
        raise ValidationError("Prompt is required")


def validate_count(count) -> None:
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise ValidationError(f"Batch count must be a positive integer, got {count!r}")
    if count > MAX_BATCH_SIZE:
        raise ValidationError(f"Batch count must be at most {MAX_BATCH_SIZE}, got {count}")


def slot_requests(request: GenerationRequest, count: int) -> list[GenerationRequest]:
    """Derive the per-slot requests of a batch."""
    if request.seed is None:
        return [request] * count
    return [request.with_seed(request.seed + i) for i in range(count)]


def batch_status(results: list[GenerationResult]) -> str:
    """Summarize a batch as "completed", "partial" or "failed"."""
    completed = sum(1 for r in results if r.status == GenerationStatus.COMPLETED)
    if completed == len(results):
        return "completed"
    if completed == 0:
        return "failed"
    return "partial"


def generate_one(
    request: GenerationRequest,
    generate: Callable = generate_image,
    history=None,
    timeout: float | None = None,
) -> GenerationResult:
    """
    Generate a single image.

    Unlike run_batch, a provider failure is raised to the caller rather than
    returned as a failed result.

    Raises:
        ValidationError: If the prompt is blank.
        ProviderError: If the provider call fails.
    """
    validate_request(request)
    result = GenerationResult.pending(request)
    result.complete(generate(request, timeout=timeout))
    if history is not None:
        history.add(HistoryEntry.from_result(result))
    return result


def run_batch(
    request: GenerationRequest,
    count: int = 1,
    generate: Callable = generate_image,
    history=None,
    on_progress: Callable[[float], None] | None = None,
    cancel: threading.Event | None = None,
    timeout: float | None = None,
) -> list[GenerationResult]:
    """
    Generate ``count`` images for one prompt in parallel.

    Args:
        request:     Prompt and settings shared by every slot.
        count:       Number of images, 1 to MAX_BATCH_SIZE.
        generate:    Callable taking (request, timeout=...) and returning an
                     image URL. Defaults to studio.images.generate_image.
        history:     Optional HistoryStore; each completed slot is recorded
                     as soon as it finishes.
        on_progress: Called with the percentage done after each slot settles.
        cancel:      Event that, once set, fails every unfinished slot and
                     returns without waiting for calls already in flight.
        timeout:     Per-call timeout in seconds passed to ``generate``.

    Returns:
        One GenerationResult per slot, in slot order.

    Raises:
        ValidationError: If the prompt is blank or count is out of range.
            Nothing is sent to the provider in that case.
    """
    validate_request(request)
    validate_count(count)

    slots = slot_requests(request, count)
    results = [GenerationResult.pending(slot) for slot in slots]
    progress = BatchProgress(count, on_progress)

    def _run(slot: GenerationRequest) -> str:
        if cancel is not None and cancel.is_set():
            raise BatchCancelled("Batch cancelled before this image was requested")
        return generate(slot, timeout=timeout)

    logger.info("Starting batch of %d for prompt %.60r", count, request.prompt)

    executor = ThreadPoolExecutor(max_workers=count)
    futures = {executor.submit(_run, slot): i for i, slot in enumerate(slots)}
    pending = set(futures)
    poll = CANCEL_POLL_INTERVAL if cancel is not None else None
    try:
        while pending:
            done, pending = wait(pending, timeout=poll, return_when=FIRST_COMPLETED)
            for future in done:
                result = results[futures[future]]
                try:
                    result.complete(future.result())
                except Exception as e:
                    logger.warning("Batch slot %d failed: %s", futures[future], e)
                    result.fail(str(e))
                else:
                    if history is not None:
                        history.add(HistoryEntry.from_result(result))
                progress.advance()

            if pending and cancel is not None and cancel.is_set():
                # in-flight calls keep running in the background; their results are dropped
                for future in pending:
                    results[futures[future]].fail("Batch cancelled while this image was in flight")
                    progress.advance()
                logger.info("Batch cancelled with %d slot(s) in flight", len(pending))
                break
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    progress.finish()
    logger.info("Batch finished: %s", batch_status(results))
    return results
