"""Search mode: atuin -> adapter -> fzf, then wait for atuin to exit."""

from __future__ import annotations

import enum
import logging

from atuin_fzf.config import AppConfig
from atuin_fzf.records import atuin_format
from atuin_fzf.services.adapter import EnrichedStream, StreamAdapter
from atuin_fzf.services.launcher import LaunchedProcess, launch, terminate, wait
from atuin_fzf.services.selector import SelectionOutcome, run_selector

logger = logging.getLogger(__name__)


class PipelineState(enum.Enum):
    START = "start"
    BACKEND_LAUNCHED = "backend-launched"
    ADAPTER_ATTACHED = "adapter-attached"
    SELECTOR_RUNNING = "selector-running"
    BACKEND_AWAITED = "backend-awaited"
    DONE = "done"
    FAILED = "failed"


class Pipeline:
    """Run one interactive search from start to finish.

    Steps run strictly in order; the first failure moves the pipeline to
    ``FAILED``, releases whatever was started and is re-raised.
    """

    def __init__(
        self,
        config: AppConfig,
        query: str = "",
        adapter: StreamAdapter | None = None,
        preview: str | None = None,
    ) -> None:
        self.config = config
        self.query = query
        self.adapter = adapter or StreamAdapter()
        self.preview = preview
        self.state = PipelineState.START
        self.error: BaseException | None = None
        self._backend: LaunchedProcess | None = None
        self._stream: EnrichedStream | None = None

    def _advance(self, state: PipelineState) -> None:
        logger.debug("Pipeline %s -> %s", self.state.value, state.value)
        self.state = state

    def search_args(self) -> list[str]:
        return [
            "search",
            "--limit", str(self.config.backend.search_limit),
            "--format", atuin_format(),
        ]  # fmt: skip

    async def run(self) -> SelectionOutcome:
        try:
            self._backend = await launch(self.config.backend.executable, self.search_args())
            self._advance(PipelineState.BACKEND_LAUNCHED)

            self._stream = await self.adapter.attach(self._backend.stdout)
            self._advance(PipelineState.ADAPTER_ATTACHED)

            self._advance(PipelineState.SELECTOR_RUNNING)
            outcome = await run_selector(self._stream, self.query, self.config, self.preview)

            # Surfaces a producer that died on a malformed line or a read error
            await self._stream.wait()
            await wait(self._backend)
            self._advance(PipelineState.BACKEND_AWAITED)
        except BaseException as e:
            self.error = e
            self._advance(PipelineState.FAILED)
            await self._release()
            raise

        self._advance(PipelineState.DONE)
        return outcome

    async def _release(self) -> None:
        if self._stream is not None:
            await self._stream.aclose()
        if self._backend is not None:
            await terminate(self._backend)
