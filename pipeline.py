"""Pipeline orchestration for the daily intelligence job.

This module sequences one flow and composes several flows into a job.

Flow States:
    SEARCHING -> GENERATING -> VALIDATING -> DECIDING -> NOTIFYING
    -> PERSISTING -> DONE, with ABORTED reachable from any state.

    DECIDING short-circuits to DONE when the report says found=false; no
    sink payload is built in that case.

Error Handling:
    run_flow() is the single top-level handler for a flow. Any error is
    logged with the stage it happened in and recorded on the FlowResult;
    nothing propagates, so a failed flow never stops the next one.
    A sink failure after an earlier sink succeeded is reported as an abort;
    the completed write is not rolled back.

Concurrency:
    Everything is awaited in order. run_job() runs flows one after another
    so flows never compete for the generation provider's rate limit.
"""

import logging
import time
import uuid
from dataclasses import asdict, dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable

from agents.generator import GenerationClient
from agents.validator import ReportValidator
from config import Config
from flows import FlowProfile
from notifications import NotificationSink
from observability.logging import clear_context, set_flow_context, set_run_context
from observability.tracing import setup_tracing, trace_operation
from persistence import PersistenceSink
from sinks import Sink
from tools.context import aggregate
from tools.search import SearchClient

logger = logging.getLogger(__name__)


class FlowState(str, Enum):
    SEARCHING = "searching"
    GENERATING = "generating"
    VALIDATING = "validating"
    DECIDING = "deciding"
    NOTIFYING = "notifying"
    PERSISTING = "persisting"
    DONE = "done"
    ABORTED = "aborted"


class FlowOutcome(str, Enum):
    COMPLETED = "completed"  # Report delivered to every sink
    SKIPPED = "skipped"      # Model reported found=false
    ABORTED = "aborted"      # Error at failed_stage


SINK_STATES = {
    "notification": FlowState.NOTIFYING,
    "persistence": FlowState.PERSISTING,
}


@dataclass
class FlowResult:
    """Result of one flow run.

    Attributes:
        flow: Flow name
        state: Last state reached (DONE or ABORTED once finished)
        outcome: COMPLETED, SKIPPED or ABORTED
        failed_stage: State in which the error happened (aborted runs only)
        error: Error description (aborted runs only)
        error_type: Exception class name (aborted runs only)
        results: Search results received
        context_chars: Size of the aggregated context
        model_id: Model that produced the report
        attempts: Generation attempts used
        notified: Notification sink succeeded
        persisted: Persistence sink succeeded
        duration: Run time in seconds
    """

    flow: str
    state: FlowState = FlowState.SEARCHING
    outcome: FlowOutcome | None = None
    failed_stage: FlowState | None = None
    error: str = ""
    error_type: str = ""
    results: int = 0
    context_chars: int = 0
    model_id: str = ""
    attempts: int = 0
    notified: bool = False
    persisted: bool = False
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.outcome in (FlowOutcome.COMPLETED, FlowOutcome.SKIPPED)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        d = asdict(self)
        d["state"] = self.state.value
        d["outcome"] = self.outcome.value if self.outcome else None
        d["failed_stage"] = self.failed_stage.value if self.failed_stage else None
        d["duration"] = round(d["duration"], 2)
        return d


SinkFactory = Callable[[FlowProfile], list[Sink]]


class Pipeline:
    """Runs flow profiles through search, generation, validation and sinks.

    Components:
        - SearchClient: Tavily search
        - GenerationClient: Gemini with one-shot failover
        - ReportValidator: built per flow from the profile's schema
        - Sinks: notification then persistence, built per flow

    Example:
        >>> pipeline = Pipeline.from_config(config)
        >>> results = await pipeline.run_job(get_flows(["research", "apps"]))
    """

    def __init__(
        self,
        search: SearchClient,
        generator: GenerationClient,
        sink_factory: SinkFactory,
        today: Callable[[], date] = date.today,
    ):
        self.search = search
        self.generator = generator
        self.sink_factory = sink_factory
        self.today = today

    @classmethod
    def from_config(cls, config: Config) -> "Pipeline":
        """Build the production pipeline.

        Starts Logfire tracing first when enabled.
        """
        if config.enable_logfire:
            setup_tracing(token=config.logfire_token)

        def build_sinks(profile: FlowProfile) -> list[Sink]:
            return [
                NotificationSink(
                    config.discord_webhook_url,
                    label=profile.label,
                    renderer=profile.renderer,
                    mapping=profile.mapping,
                    timeout=config.http_timeout_seconds,
                ),
                PersistenceSink(
                    config.notion_api_key,
                    config.notion_database_id,
                    renderer=profile.renderer,
                    mapping=profile.mapping,
                    status=config.notion_status,
                    notion_version=config.notion_version,
                    timeout=config.http_timeout_seconds,
                ),
            ]

        return cls(
            search=SearchClient(config.tavily_api_key, timeout=config.http_timeout_seconds),
            generator=GenerationClient.from_config(config),
            sink_factory=build_sinks,
        )

    async def _run_stages(self, profile: FlowProfile, result: FlowResult) -> None:
        """Advance a flow through its states; errors propagate to run_flow."""
        today = self.today()

        result.state = FlowState.SEARCHING
        with trace_operation("search", {"flow": profile.name}):
            found = await self.search.search(
                profile.search_query(today),
                depth=profile.depth,
                max_results=profile.max_results,
            )
        result.results = len(found.results)
        context = aggregate(found.results, profile.item_template, profile.separator)
        result.context_chars = len(context)
        logger.info("Search complete | results=%d context_chars=%d", result.results, result.context_chars)

        result.state = FlowState.GENERATING
        with trace_operation("generate", {"flow": profile.name}):
            generation = await self.generator.generate(
                profile.user_prompt(context),
                profile.instruction(today),
            )
        result.model_id = generation.model_id
        result.attempts = generation.attempts

        result.state = FlowState.VALIDATING
        report = ReportValidator(profile.schema).validate(generation.text).unwrap()

        result.state = FlowState.DECIDING
        if report.is_skip:
            logger.info("Nothing found, skipping sink writes")
            result.outcome = FlowOutcome.SKIPPED
            result.state = FlowState.DONE
            return

        sinks = self.sink_factory(profile)
        payloads = [(sink, sink.render(report)) for sink in sinks]
        for sink, payload in payloads:
            result.state = SINK_STATES.get(sink.name, result.state)
            with trace_operation(f"sink.{sink.name}", {"flow": profile.name}):
                await sink.send(payload)
            if sink.name == "notification":
                result.notified = True
            elif sink.name == "persistence":
                result.persisted = True

        result.outcome = FlowOutcome.COMPLETED
        result.state = FlowState.DONE

    async def run_flow(self, profile: FlowProfile) -> FlowResult:
        """Run one flow end to end.

        Returns:
            FlowResult; aborted flows are reported, never raised
        """
        set_flow_context(profile.name)
        start = time.time()
        result = FlowResult(flow=profile.name)
        logger.info("Flow started | flow=%s variant=%s", profile.name, profile.schema.variant.value)

        try:
            with trace_operation("flow", {"flow": profile.name}):
                await self._run_stages(profile, result)
        except Exception as e:
            result.failed_stage = result.state
            result.state = FlowState.ABORTED
            result.outcome = FlowOutcome.ABORTED
            result.error = str(e)
            result.error_type = type(e).__name__
            logger.error(
                "Flow aborted | flow=%s stage=%s type=%s error=%s",
                profile.name, result.failed_stage.value, result.error_type, e,
                exc_info=True,
            )

        result.duration = time.time() - start
        logger.info(
            "Flow done | flow=%s outcome=%s duration=%.1fs model=%s attempts=%d",
            profile.name, result.outcome.value if result.outcome else "-",
            result.duration, result.model_id or "-", result.attempts,
        )
        set_flow_context("-")
        return result

    async def run_job(self, profiles: list[FlowProfile]) -> list[FlowResult]:
        """Run flows strictly one after another.

        Args:
            profiles: Flows in execution order

        Returns:
            One FlowResult per flow, in the same order
        """
        run_id = uuid.uuid4().hex[:8]
        set_run_context(run_id)
        logger.info("Job started | flows=%s", ",".join(p.name for p in profiles))

        results = []
        for profile in profiles:
            results.append(await self.run_flow(profile))

        aborted = sum(1 for r in results if r.outcome is FlowOutcome.ABORTED)
        skipped = sum(1 for r in results if r.outcome is FlowOutcome.SKIPPED)
        logger.info(
            "Job done | flows=%d completed=%d skipped=%d aborted=%d",
            len(results), len(results) - aborted - skipped, skipped, aborted,
        )
        clear_context()
        return results
