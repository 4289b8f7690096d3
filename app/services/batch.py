import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from app.core.errors import PartialBatchFailure, ScorecardError
from app.schemas.result import BatchItemError

logger = logging.getLogger(__name__)

async def run_batch(
    operation: str,
    items: Sequence[Any],
    apply: Callable[[Any], Awaitable[None]],
) -> int:
    """Apply ``apply`` to every item concurrently.

    Not atomic: items that succeed stay committed.  When any item fails a
    ``PartialBatchFailure`` lists exactly the failed items.  Returns the
    number of items applied.
    """

    async def _one(index: int, item: Any) -> Optional[BatchItemError]:
        try:
            await apply(item)
        except ScorecardError as exc:
            raw = item.model_dump() if hasattr(item, "model_dump") else item
            return BatchItemError(index=index, item=raw, error=exc.message, code=exc.code)
        return None

    results = await asyncio.gather(*(_one(i, item) for i, item in enumerate(items)))
    errors: List[BatchItemError] = [r for r in results if r is not None]
    if errors:
        logger.warning("%s: %d of %d items failed", operation, len(errors), len(items))
        raise PartialBatchFailure(f"{len(errors)} of {len(items)} items failed", errors)
    return len(items)
