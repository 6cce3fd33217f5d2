"""
Analysis engine for dartlint.

Runs the enabled rules over a set of source buffers on a bounded thread pool,
aggregates the per-file diagnostics and publishes one sorted AnalysisResult.
Failures inside a single file (unreadable input, a faulty rule) become
diagnostics; the run itself keeps going.
"""

import concurrent.futures
import dataclasses
import enum
import logging
import threading
import time
import traceback
from typing import Dict, Iterable, List, Optional, Sequence

from .config import EngineConfig, get_default_config
from .errors import AnalysisCancelled
from .parser import SyntaxTree, parse
from .registry import RuleRegistry
from .results import AnalysisResult, DiagnosticStats
from .suppressions import filter_suppressed
from .types import (
    INTERNAL_ERROR_RULE,
    IO_ERROR_RULE,
    Diagnostic,
    Rule,
    RuleContext,
    SourceBuffer,
)

logger = logging.getLogger(__name__)


class EngineState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETE = "complete"


def _internal_diagnostic(rule_id: str, category: str, file_path: str, message: str) -> Diagnostic:
    return Diagnostic(
        rule_id=rule_id,
        category=category,
        severity="hint",
        file=file_path,
        line=1,
        column=1,
        end_line=1,
        end_column=1,
        message=message,
    )


def _evaluate_pattern_rule(rule: Rule, ctx: RuleContext) -> List[Diagnostic]:
    text_ctx = RuleContext(source=ctx.source, config=ctx.config, regexes=ctx.regexes)
    return list(rule.visit(text_ctx))


def _evaluate_structural_rule(rule: Rule, ctx: RuleContext) -> List[Diagnostic]:
    if ctx.tree is None:
        ctx.tree = parse(ctx.source)
    return list(rule.visit(ctx))


_EVALUATORS = {
    "pattern": _evaluate_pattern_rule,
    "structural": _evaluate_structural_rule,
}


def evaluate_rule(rule: Rule, ctx: RuleContext) -> List[Diagnostic]:
    """Run one rule on one file, dispatching on the rule's kind."""
    return _EVALUATORS[rule.meta.kind](rule, ctx)


def analyze_file(source: SourceBuffer, rules: Sequence[Rule], registry: RuleRegistry,
                 config: EngineConfig,
                 cancel_event: Optional[threading.Event] = None) -> List[Diagnostic]:
    """Analyze a single file and return its unsorted diagnostics.

    Args:
        source: The buffer to analyze
        rules: Enabled rules to run
        registry: Registry holding the compiled patterns for ``rules``
        config: Engine configuration
        cancel_event: Checked between rules; when set the file is abandoned
    """
    if source.read_error is not None:
        return [_internal_diagnostic(
            IO_ERROR_RULE, "runtime", source.path, f"Could not read file: {source.read_error}")]

    tree: Optional[SyntaxTree] = None
    if any(rule.meta.kind == "structural" for rule in rules):
        tree = parse(source)

    options = config.rule_options()
    diagnostics: List[Diagnostic] = []
    for rule in rules:
        if cancel_event is not None and cancel_event.is_set():
            return diagnostics
        ctx = RuleContext(
            source=source,
            config=options,
            tree=tree if rule.meta.kind == "structural" else None,
            regexes=registry.regexes_for(rule),
            queries=registry.queries_for(rule),
        )
        try:
            diagnostics.extend(evaluate_rule(rule, ctx))
        except Exception as e:
            logger.exception(f"Rule {rule.meta.id} failed on {source.path}")
            detail = traceback.format_exception_only(type(e), e)[-1].strip()
            diagnostics.append(_internal_diagnostic(
                INTERNAL_ERROR_RULE, rule.meta.category, source.path,
                f"Rule '{rule.meta.id}' failed: {detail}"))

    diagnostics = filter_suppressed(diagnostics, source.text)
    if config.max_findings_per_file and len(diagnostics) > config.max_findings_per_file:
        diagnostics.sort(key=lambda d: d.sort_key)
        diagnostics = diagnostics[:config.max_findings_per_file]
    return diagnostics


class AnalysisEngine:
    """Runs rules over file sets and serves the latest result.

    A run goes IDLE -> RUNNING -> COMPLETE. The previous result stays visible
    to readers until the new one has been fully aggregated; a cancelled run
    leaves both the state and the result as they were.
    """

    def __init__(self, registry: RuleRegistry, config: Optional[EngineConfig] = None):
        self.registry = registry
        self.config = config or get_default_config()
        self._lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._state = EngineState.IDLE
        self._result = AnalysisResult()
        self._cancel_event: Optional[threading.Event] = None

    @property
    def state(self) -> EngineState:
        with self._lock:
            return self._state

    def run(self, files: Iterable[SourceBuffer],
            cancel_event: Optional[threading.Event] = None) -> AnalysisResult:
        """Analyze ``files`` and publish the result.

        Raises:
            AnalysisCancelled: if the run was cancelled before aggregation
        """
        files = list(files)
        with self._run_lock:
            event = cancel_event or threading.Event()
            with self._lock:
                previous_state = self._state
                self._state = EngineState.RUNNING
                self._cancel_event = event
            try:
                result = self._run(files, event)
            except BaseException:
                with self._lock:
                    self._state = previous_state
                    self._cancel_event = None
                raise
            with self._lock:
                self._result = result
                self._state = EngineState.COMPLETE
                self._cancel_event = None
            return result

    def cancel(self) -> None:
        """Cancel the run in progress, if any."""
        with self._lock:
            if self._cancel_event is not None:
                self._cancel_event.set()

    def _run(self, files: List[SourceBuffer], cancel_event: threading.Event) -> AnalysisResult:
        rules = self.registry.enabled_rules(self.config)
        jobs = min(self.config.worker_count(), max(1, len(files)))
        start = time.time()
        logger.info(f"Analyzing {len(files)} files with {len(rules)} rules ({jobs} workers)")

        collected: List[Diagnostic] = []
        if jobs <= 1:
            for source in files:
                if cancel_event.is_set():
                    raise AnalysisCancelled(collected)
                collected.extend(self._analyze_one(source, rules, cancel_event))
        else:
            executor = concurrent.futures.ThreadPoolExecutor(max_workers=jobs)
            try:
                futures = {
                    executor.submit(self._analyze_one, source, rules, cancel_event): source.path
                    for source in files
                }
                for future in concurrent.futures.as_completed(futures):
                    if cancel_event.is_set():
                        break
                    collected.extend(future.result())
            finally:
                executor.shutdown(wait=True, cancel_futures=True)

        if cancel_event.is_set():
            logger.info("Analysis cancelled")
            raise AnalysisCancelled(collected)

        result = AnalysisResult.from_diagnostics(collected, files_analyzed=len(files), rules_run=len(rules))
        logger.info(f"Analysis finished in {(time.time() - start) * 1000:.1f}ms: {len(result)} diagnostics")
        return result

    def _analyze_one(self, source: SourceBuffer, rules: Sequence[Rule],
                     cancel_event: threading.Event) -> List[Diagnostic]:
        try:
            return analyze_file(source, rules, self.registry, self.config, cancel_event)
        except Exception as e:
            logger.exception(f"Failed to analyze {source.path}")
            return [_internal_diagnostic(
                INTERNAL_ERROR_RULE, "runtime", source.path, f"Analysis failed: {e}")]

    # Query surface

    def get_all_diagnostics(self) -> AnalysisResult:
        with self._lock:
            return self._result

    def get_filtered(self, category: Optional[str] = None, severity: Optional[str] = None,
                     file_substring: Optional[str] = None) -> AnalysisResult:
        return self.get_all_diagnostics().filter(category, severity, file_substring)

    def get_stats(self) -> DiagnosticStats:
        return self.get_all_diagnostics().stats()

    def describe_rules(self) -> List[Dict[str, object]]:
        return [dataclasses.asdict(d) for d in self.registry.describe(self.config)]
