"""
Region transform coordination and splicing.

All region transforms are dispatched at once and joined with a single
asyncio.gather. Each task captures its region at dispatch time and writes
into its own slot, so results are matched to regions by index regardless
of completion order or identical region content.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass

from tsxlint.errors import FormatterError, SpliceError, TransformError, TransformTimeoutError
from tsxlint.formatter import Formatter
from tsxlint.locator import Region
from tsxlint.utils.logging import LogContext, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransformResult:
    """Transformed text for the region with the same index."""

    index: int
    text: str


async def _transform_one(
    text: str,
    region: Region,
    formatter: Formatter,
    *,
    timeout: float | None,
    semaphore: asyncio.Semaphore | None,
) -> TransformResult:
    raw = region.slice(text)

    with LogContext(region=region.index):
        try:
            if semaphore is None:
                formatted = await asyncio.wait_for(formatter.format(raw), timeout=timeout)
            else:
                async with semaphore:
                    formatted = await asyncio.wait_for(formatter.format(raw), timeout=timeout)
        except TimeoutError as e:
            raise TransformTimeoutError(
                region.index, region.start, region.end, f"timed out after {timeout}s"
            ) from e
        except FormatterError as e:
            raise TransformError(region.index, region.start, region.end, str(e)) from e
        except Exception as e:
            # CancelledError is a BaseException and still propagates
            raise TransformError(
                region.index, region.start, region.end, f"{type(e).__name__}: {e}"
            ) from e

        if not isinstance(formatted, str):
            raise TransformError(
                region.index,
                region.start,
                region.end,
                f"formatter returned {type(formatted).__name__}, expected str",
            )

        logger.debug("Region formatted", before=region.length, after=len(formatted))

    return TransformResult(index=region.index, text=formatted)


async def transform_regions(
    text: str,
    regions: Sequence[Region],
    formatter: Formatter,
    *,
    timeout: float | None = None,
    max_concurrency: int | None = None,
) -> list[TransformResult]:
    """Transform every region concurrently.

    Args:
        text: Original source text.
        regions: Regions from locate(), indexed 0..N-1.
        formatter: Formatter applied to each region's raw text.
        timeout: Per-region timeout in seconds (None or 0 = no limit).
        max_concurrency: Maximum calls in flight (None or 0 = no limit).

    Returns:
        Results ordered by region index.

    Raises:
        TransformError: The first region to fail; all other transforms are cancelled.
    """
    if not regions:
        return []

    slots: list[TransformResult | None] = [None] * len(regions)
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    async def run(region: Region) -> None:
        slots[region.index] = await _transform_one(
            text,
            region,
            formatter,
            timeout=timeout or None,
            semaphore=semaphore,
        )

    tasks = [asyncio.create_task(run(region)) for region in regions]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    logger.info("All transforms done", regions=len(regions), formatter=formatter.name)
    return [slot for slot in slots if slot is not None]


def splice(
    text: str,
    regions: Sequence[Region],
    results: Sequence[TransformResult],
) -> str:
    """Substitute transformed text for each region in one forward pass.

    Args:
        text: Original source text.
        regions: Ordered, non-overlapping regions.
        results: One result per region, matched by index.

    Returns:
        Spliced text. Equal to ``text`` when there are no regions.

    Raises:
        SpliceError: Results are missing, or regions are out of order or out of range.
    """
    if len(results) != len(regions):
        raise SpliceError(
            "Result count does not match region count",
            regions=len(regions),
            results=len(results),
        )

    by_index = {result.index: result for result in results}
    parts: list[str] = []
    prev_end = 0

    for position, region in enumerate(regions):
        if region.index != position:
            raise SpliceError("Region index out of sequence", index=region.index, expected=position)
        if region.start < prev_end or region.end < region.start or region.end > len(text):
            raise SpliceError(
                "Region overlaps or exceeds the text",
                index=region.index,
                start=region.start,
                end=region.end,
            )
        result = by_index.get(region.index)
        if result is None:
            raise SpliceError("Missing result for region", index=region.index)

        parts.append(text[prev_end : region.start])
        parts.append(result.text)
        prev_end = region.end

    parts.append(text[prev_end:])
    return "".join(parts)
