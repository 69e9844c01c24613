"""DeferredEvaluationScheduler - resolve targets at or after a due date."""

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, List, Optional, Tuple

from pins.core.constants import StorageKey
from pins.core.models import DeferredEvaluation
from pins.interfaces import KeyValueStore

if TYPE_CHECKING:
    from pins.core.runtime.context import EngineServices
    from pins.core.runtime.resolver import Resolver

logger = logging.getLogger(__name__)


class DeferredEvaluationScheduler:
    """Persists (target, due_date) records and resolves them when due.

    Records live in the key-value store as one JSON list under
    ``delayed-executions``. ``check_due`` is triggered externally, e.g. by
    the ``pins check-due`` command on a timer or at application launch.

    Delivery is at most once: a due record is removed even if resolving it
    fails, and it is never retried.

    Example:
        ```python
        scheduler = DeferredEvaluationScheduler(services.storage)
        handle = await scheduler.schedule("{{toast:Stand up}}", due)
        await scheduler.cancel(*handle)
        ```
    """

    def __init__(
        self,
        storage: KeyValueStore,
        key: str = StorageKey.DELAYED_EXECUTIONS.value,
    ) -> None:
        self.storage = storage
        self.key = key

    async def load(self) -> List[DeferredEvaluation]:
        raw = await self.storage.get_item(self.key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Discarding malformed deferred evaluations under '{self.key}'")
            return []
        records = []
        for item in data if isinstance(data, list) else []:
            try:
                records.append(DeferredEvaluation.model_validate(item))
            except ValueError:
                logger.warning(f"Skipping malformed deferred evaluation {item!r}")
        return records

    async def _save(self, records: List[DeferredEvaluation]) -> None:
        await self.storage.set_item(
            self.key, json.dumps([r.model_dump(mode="json") for r in records])
        )

    async def schedule(self, target: str, due_date: datetime) -> Tuple[str, datetime]:
        """Append a record.

        Returns:
            The (target, due_date) pair, which is also the cancellation handle
        """
        record = DeferredEvaluation(target=target, due_date=due_date)
        records = await self.load()
        records.append(record)
        await self._save(records)
        logger.info(f"Scheduled deferred evaluation due {record.due_date.isoformat()}")
        return record.target, record.due_date

    async def cancel(self, target: str, due_date: datetime) -> bool:
        """Remove the record matching both target and due date.

        Returns:
            True if a record was removed; False (a no-op) if none matched
        """
        records = await self.load()
        for index, record in enumerate(records):
            if record.same_as(target, due_date):
                del records[index]
                await self._save(records)
                logger.info(f"Cancelled deferred evaluation due {record.due_date.isoformat()}")
                return True
        return False

    async def check_due(
        self,
        resolver: "Resolver",
        services: "EngineServices",
        now: Optional[datetime] = None,
    ) -> List[DeferredEvaluation]:
        """Resolve every record whose due date has passed, then drop them.

        The collection is re-read after resolving so records scheduled by
        the resolutions themselves survive; exactly the processed records
        are removed, in a single write.

        Args:
            resolver: Resolver for the targets; resolved strings are discarded
            services: Collaborators for the resolution context
            now: Reference time; defaults to the current UTC time

        Returns:
            The records that were processed
        """
        from pins.core.runtime.context import assemble_context

        now = now or datetime.now(UTC)
        due = [record for record in await self.load() if record.is_due(now)]
        if not due:
            return []

        for record in due:
            try:
                await resolver.resolve(record.target, assemble_context(services))
            except Exception:
                logger.warning(
                    f"Deferred evaluation due {record.due_date.isoformat()} failed",
                    exc_info=True,
                )

        remaining = await self.load()
        for record in due:
            for index, candidate in enumerate(remaining):
                if candidate.same_as(record.target, record.due_date):
                    del remaining[index]
                    break
        await self._save(remaining)
        logger.info(f"Processed {len(due)} deferred evaluation(s)")
        return due
