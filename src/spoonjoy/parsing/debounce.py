"""Settle-then-act scheduling for parse-as-you-type input."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from spoonjoy.config import Settings, get_settings
from spoonjoy.models.parsing import ParseOutcome
from spoonjoy.parsing.pipeline import build_shopping_item_parser

logger = logging.getLogger(__name__)

ParseCallable = Callable[[str], Awaitable[ParseOutcome]]
ResultCallback = Callable[[ParseOutcome], None]


class DebouncedParser:
    """Run ``parse`` only once input has been quiet for ``delay`` seconds.

    Each ``submit`` cancels the pending task and bumps a generation counter. A result
    is applied only when its generation is still current, so a slow earlier parse can
    never overwrite the outcome of a newer one.
    """

    def __init__(
        self,
        parse: ParseCallable,
        *,
        delay: float = 1.0,
        on_result: Optional[ResultCallback] = None,
    ) -> None:
        self._parse = parse
        self._delay = max(0.0, float(delay))
        self._on_result = on_result
        self._task: Optional[asyncio.Task[Optional[ParseOutcome]]] = None
        self._generation = 0
        self.text = ""
        self.latest: Optional[ParseOutcome] = None

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, text: str) -> Optional[asyncio.Task[Optional[ParseOutcome]]]:
        """Record new input and (re)schedule a parse; blank input only cancels."""

        self.text = text
        self._generation += 1
        self._cancel_pending()
        if not text.strip():
            return None

        generation = self._generation
        self._task = asyncio.get_running_loop().create_task(
            self._run(text, generation, self._delay)
        )
        return self._task

    async def flush(self) -> Optional[ParseOutcome]:
        """Parse the current text immediately, dropping any scheduled parse."""

        self._generation += 1
        self._cancel_pending()
        if not self.text.strip():
            return None
        return await self._run(self.text, self._generation, 0.0)

    async def wait(self) -> Optional[ParseOutcome]:
        """Await the scheduled parse, if any."""

        task = self._task
        if task is None:
            return None
        try:
            return await task
        except asyncio.CancelledError:
            return None

    def cancel(self) -> None:
        self._generation += 1
        self._cancel_pending()

    def clear(self) -> None:
        self.cancel()
        self.text = ""
        self.latest = None

    async def _run(self, text: str, generation: int, delay: float) -> Optional[ParseOutcome]:
        if delay:
            await asyncio.sleep(delay)
        outcome = await self._parse(text)
        if generation != self._generation:
            logger.debug("Discarding stale parse result for generation %s", generation)
            return None
        self.latest = outcome
        if self._on_result is not None:
            self._on_result(outcome)
        return outcome

    def _cancel_pending(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None


def build_debounced_parser(
    settings: Settings | None = None,
    *,
    parse: Optional[ParseCallable] = None,
    on_result: Optional[ResultCallback] = None,
) -> DebouncedParser:
    """Wrap the configured parsing policy with the configured quiet period."""

    settings = settings or get_settings()
    if parse is None:
        parse = build_shopping_item_parser(settings).parse
    return DebouncedParser(parse, delay=settings.parse_debounce_seconds, on_result=on_result)


__all__ = ["DebouncedParser", "build_debounced_parser"]
