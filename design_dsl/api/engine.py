"""
Generation engine.

For every declared generator the engine matches triggering units against
the registry, runs `generate` for each of them and collects the produced
files. A unit moves through

    Pending -> Triggered -> Generated | Skipped | Failed

A failing unit is isolated: it produces no files and exactly one error
diagnostic, and every other unit still runs. Results come back in
generator declaration order, then unit order, whatever the concurrency.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from design_dsl.api.context import GenContext
from design_dsl.api.errors import DesignError, GenerationSkipped
from design_dsl.api.gen_logging import get_logger

logger = get_logger(__name__)

TARGETS = ("server", "client")


class UnitState(str, Enum):
    PENDING = "Pending"
    TRIGGERED = "Triggered"
    GENERATED = "Generated"
    SKIPPED = "Skipped"
    FAILED = "Failed"


@dataclass
class UnitResult:
    generator: str
    unit: Optional[str]
    kind: Optional[str]
    state: UnitState = UnitState.PENDING
    files: dict = field(default_factory=dict)
    diagnostics: list = field(default_factory=list)
    reason: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.generator}/{self.unit}" if self.unit else self.generator


@dataclass
class GenerationResult:
    results: list = field(default_factory=list)

    @property
    def files(self) -> dict:
        """All generated files; a later generator wins on a path collision."""
        files = {}
        for result in self.results:
            files.update(result.files)
        return files

    def by_state(self, state: UnitState) -> list:
        return [r for r in self.results if r.state is state]

    @property
    def generated(self) -> list:
        return self.by_state(UnitState.GENERATED)

    @property
    def skipped(self) -> list:
        return self.by_state(UnitState.SKIPPED)

    @property
    def failed(self) -> list:
        return self.by_state(UnitState.FAILED)

    @property
    def diagnostics(self) -> list:
        return [d for r in self.results for d in r.diagnostics]

    @property
    def ok(self) -> bool:
        return not self.failed

    def state_of(self, generator: str, unit: str = None) -> Optional[UnitState]:
        for result in self.results:
            if result.generator == generator and result.unit == unit:
                return result.state
        return None


def _normalize(generator, unit, produced) -> dict:
    """Map a generate() result to {path: content}, checking declared outputs."""
    declared = list(generator.outputs(unit))
    if isinstance(produced, str):
        if len(declared) != 1:
            raise DesignError(
                f"Generator '{generator.name}' returned a single file but declares {len(declared)} outputs."
            )
        return {declared[0]: produced}
    undeclared = [p for p in produced if p not in declared]
    if undeclared:
        raise DesignError(f"Generator '{generator.name}' produced undeclared paths: {', '.join(undeclared)}")
    return dict(produced)


class GenerationEngine:
    def __init__(self, registry, generators=None, workers: int = 1, targets=TARGETS, ctx: GenContext = None):
        if generators is None:
            from design_dsl.api.generators import ALL_GENERATORS
            generators = ALL_GENERATORS
        self.registry = registry
        self.generators = [g for g in generators if g.target in targets]
        self.workers = max(1, int(workers or 1))
        self.ctx = ctx or GenContext.root()

    # ------------------------------------------------------------------
    # Planning

    def plan(self) -> list:
        """
        Triggered (generator, unit) tasks plus the results already decided.

        Returns a list holding either UnitResult (Skipped or Failed at trigger
        time) or (generator, unit, result) tuples still to run, in final order.
        """
        plan = []
        for generator in self.generators:
            if generator.is_aggregate:
                if self._aggregate_triggered(generator):
                    plan.append((generator, None, UnitResult(generator.name, None, None, UnitState.TRIGGERED)))
                continue
            for unit in self.registry:
                trigger = generator.trigger_for(unit)
                if trigger is None:
                    continue
                result = UnitResult(generator.name, unit.name, unit.kind.value)
                try:
                    accepted = trigger.accepts(unit, self.registry)
                except Exception as e:
                    # A predicate that cannot be evaluated fails this unit only.
                    plan.append(self._fail(result, self.ctx.child(generator.name, unit.name), e))
                    continue
                if not accepted:
                    result.state = UnitState.SKIPPED
                    result.reason = "predicate"
                    logger.debug(f"  [SKIP] {result.label}: not applicable")
                    plan.append(result)
                    continue
                result.state = UnitState.TRIGGERED
                plan.append((generator, unit, result))
        return plan

    def _aggregate_triggered(self, generator) -> bool:
        if not generator.triggers:
            return True
        for trigger in generator.triggers:
            for unit in self.registry:
                if not trigger.matches(unit):
                    continue
                try:
                    if trigger.accepts(unit, self.registry):
                        return True
                except DesignError as e:
                    logger.debug(f"  [SKIP] {generator.name}: {unit.name} not applicable ({e})")
        return False

    def outputs(self) -> list:
        """(generator, unit, declared paths) for every triggered task."""
        listed = []
        for entry in self.plan():
            if isinstance(entry, UnitResult):
                continue
            generator, unit, _ = entry
            listed.append((generator.name, unit.name if unit else None, list(generator.outputs(unit))))
        return listed

    # ------------------------------------------------------------------
    # Execution

    @staticmethod
    def _fail(result: UnitResult, ctx: GenContext, error: Exception) -> UnitResult:
        result.files = {}
        result.state = UnitState.FAILED
        result.reason = str(error)
        kind = "" if isinstance(error, DesignError) else f"{type(error).__name__}: "
        ctx.error(f"{kind}{error}")
        logger.debug("  traceback", exc_info=True)
        result.diagnostics = list(ctx.diagnostics)
        return result

    def _run_task(self, task) -> UnitResult:
        generator, unit, result = task
        ctx = self.ctx.child(generator.name, unit.name if unit else None)
        try:
            produced = generator.generate(unit, self.registry, ctx)
            result.files = _normalize(generator, unit, produced)
            result.state = UnitState.GENERATED
            logger.info(f"  [OK] {result.label} ({len(result.files)} file(s))")
        except GenerationSkipped as e:
            result.state = UnitState.SKIPPED
            result.reason = e.reason
            logger.info(f"  [SKIP] {result.label}: {e.reason}")
        except Exception as e:
            # Any synthesis error fails this unit only.
            return self._fail(result, ctx, e)
        result.diagnostics = list(ctx.diagnostics)
        return result

    def run(self) -> GenerationResult:
        plan = self.plan()
        tasks = [entry for entry in plan if not isinstance(entry, UnitResult)]
        logger.info(f"[ENGINE] {len(tasks)} task(s) across {len(self.generators)} generator(s)")

        if self.workers > 1 and len(tasks) > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                finished = list(pool.map(self._run_task, tasks))
        else:
            finished = [self._run_task(task) for task in tasks]

        done = iter(finished)
        results = [entry if isinstance(entry, UnitResult) else next(done) for entry in plan]
        outcome = GenerationResult(results)
        logger.info(
            f"[ENGINE] generated {len(outcome.generated)}, skipped {len(outcome.skipped)}, "
            f"failed {len(outcome.failed)}"
        )
        return outcome


def generate(registry, generators=None, workers: int = 1, targets=TARGETS, ctx: GenContext = None) -> GenerationResult:
    return GenerationEngine(registry, generators, workers, targets, ctx).run()
