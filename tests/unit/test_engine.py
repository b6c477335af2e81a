"""
Unit tests for the generation engine: triggering, unit states, failure
isolation and output ordering.
"""

import time

from design_dsl.api.engine import GenerationEngine, UnitState
from design_dsl.api.errors import DesignError, GenerationSkipped
from design_dsl.api.generators import Generator, Trigger
from design_dsl.api.registry import UnitKind

DESIGN = '''
Project Demo
end

Entity Alpha
end

Entity Beta
end

Entity Gamma
end

Page Home
    path: "/"
end
'''


def _per_entity(name="entity-files", predicate=None, generate=None, target="server"):
    def outputs(unit):
        return [f"out/{unit.name.lower()}.txt"]

    def default_generate(unit, registry, ctx):
        return f"{unit.name}\n"

    return Generator(
        name=name,
        triggers=(Trigger(UnitKind.ENTITY, predicate),),
        outputs=outputs,
        generate=generate or default_generate,
        target=target,
    )


def _aggregate(name="index", trigger_kind=UnitKind.ENTITY, target="server"):
    def generate(unit, registry, ctx):
        return {"out/index.txt": ",".join(e.name for e in registry.list(UnitKind.ENTITY))}

    return Generator(
        name=name,
        triggers=(Trigger(trigger_kind),),
        outputs=lambda unit: ["out/index.txt"],
        generate=generate,
        is_aggregate=True,
        target=target,
    )


class TestTriggering:
    """Test which units a generator runs for."""

    def test_per_unit_generator(self, build_registry, generate):
        result = generate(build_registry(DESIGN), [_per_entity()])
        assert [r.unit for r in result.generated] == ["Alpha", "Beta", "Gamma"]
        assert result.files == {
            "out/alpha.txt": "Alpha\n",
            "out/beta.txt": "Beta\n",
            "out/gamma.txt": "Gamma\n",
        }

    def test_predicate_skips_unit(self, build_registry, generate):
        generator = _per_entity(predicate=lambda unit, registry: unit.name != "Beta")
        result = generate(build_registry(DESIGN), [generator])
        assert result.state_of("entity-files", "Beta") is UnitState.SKIPPED
        assert result.skipped[0].reason == "predicate"
        assert "out/beta.txt" not in result.files

    def test_aggregate_runs_once(self, build_registry, generate):
        result = generate(build_registry(DESIGN), [_aggregate()])
        assert len(result.results) == 1
        assert result.state_of("index") is UnitState.GENERATED
        assert result.files == {"out/index.txt": "Alpha,Beta,Gamma"}

    def test_aggregate_without_trigger_unit_is_not_planned(self, build_registry, generate):
        result = generate(build_registry(DESIGN), [_aggregate(trigger_kind=UnitKind.COMPONENT)])
        assert result.results == []

    def test_targets_filter_generators(self, build_registry, generate):
        generators = [_per_entity(), _aggregate(target="client")]
        result = generate(build_registry(DESIGN), generators, targets=("client",))
        assert [r.generator for r in result.results] == ["index"]

    def test_outputs_lists_declared_paths(self, build_registry):
        engine = GenerationEngine(build_registry(DESIGN), [_per_entity(), _aggregate()])
        assert engine.outputs() == [
            ("entity-files", "Alpha", ["out/alpha.txt"]),
            ("entity-files", "Beta", ["out/beta.txt"]),
            ("entity-files", "Gamma", ["out/gamma.txt"]),
            ("index", None, ["out/index.txt"]),
        ]


class TestOutcomes:
    """Test skipped and failed units."""

    def test_generation_skipped(self, build_registry, generate):
        def skip_gamma(unit, registry, ctx):
            if unit.name == "Gamma":
                raise GenerationSkipped("nothing to emit")
            return unit.name

        result = generate(build_registry(DESIGN), [_per_entity(generate=skip_gamma)])
        assert result.state_of("entity-files", "Gamma") is UnitState.SKIPPED
        assert result.skipped[0].reason == "nothing to emit"
        assert result.ok

    def test_failure_is_isolated(self, build_registry, generate):
        def fail_beta(unit, registry, ctx):
            if unit.name == "Beta":
                raise DesignError("broken beta")
            return unit.name

        result = generate(build_registry(DESIGN), [_per_entity(generate=fail_beta), _aggregate()])
        assert not result.ok
        [failed] = result.failed
        assert failed.label == "entity-files/Beta"
        assert failed.files == {}
        assert [d.message for d in failed.diagnostics] == ["broken beta"]
        assert failed.diagnostics[0].level == "error"
        assert sorted(result.files) == ["out/alpha.txt", "out/gamma.txt", "out/index.txt"]

    def test_unexpected_exception_names_its_type(self, build_registry, generate):
        def explode(unit, registry, ctx):
            raise KeyError("x")

        result = generate(build_registry(DESIGN), [_per_entity(generate=explode)])
        assert result.failed[0].reason == "'x'"
        assert result.failed[0].diagnostics[0].message.startswith("KeyError: ")

    def test_warnings_are_kept_on_success(self, build_registry, generate):
        def warn(unit, registry, ctx):
            ctx.warning(f"careful with {unit.name}")
            return unit.name

        result = generate(build_registry(DESIGN), [_per_entity(generate=warn)])
        assert [str(d) for d in result.diagnostics][0] == "WARNING entity-files/Alpha: careful with Alpha"
        assert len(result.diagnostics) == 3

    def test_undeclared_output_fails_unit(self, build_registry, generate):
        def stray(unit, registry, ctx):
            return {"elsewhere.txt": "x"}

        result = generate(build_registry(DESIGN), [_per_entity(generate=stray)])
        assert len(result.failed) == 3
        assert "undeclared paths: elsewhere.txt" in result.failed[0].reason

    def test_failing_predicate_is_isolated(self, build_registry, generate):
        def strict(unit, registry):
            if unit.name == "Beta":
                raise DesignError("beta cannot be checked")
            return True

        index = _aggregate()
        index = Generator(
            name=index.name,
            triggers=(Trigger(UnitKind.ENTITY, strict),),
            outputs=index.outputs,
            generate=index.generate,
            is_aggregate=True,
        )
        result = generate(build_registry(DESIGN), [_per_entity(predicate=strict), index])
        [failed] = result.failed
        assert failed.label == "entity-files/Beta"
        assert failed.files == {}
        assert [d.message for d in failed.diagnostics] == ["beta cannot be checked"]
        assert result.state_of("entity-files", "Alpha") is UnitState.GENERATED
        assert result.state_of("entity-files", "Gamma") is UnitState.GENERATED
        assert result.state_of("index") is UnitState.GENERATED
        assert [r.label for r in result.results] == [
            "entity-files/Alpha",
            "entity-files/Beta",
            "entity-files/Gamma",
            "index",
        ]


class TestOrdering:
    """Test deterministic result order."""

    def test_parallel_run_keeps_declaration_order(self, build_registry, generate):
        delays = {"Alpha": 0.05, "Beta": 0.02, "Gamma": 0.0}

        def slow(unit, registry, ctx):
            time.sleep(delays[unit.name])
            return unit.name

        generators = [_per_entity(generate=slow), _aggregate()]
        serial = generate(build_registry(DESIGN), generators, workers=1)
        parallel = generate(build_registry(DESIGN), generators, workers=4)

        assert [r.label for r in parallel.results] == [r.label for r in serial.results] == [
            "entity-files/Alpha",
            "entity-files/Beta",
            "entity-files/Gamma",
            "index",
        ]
        assert list(parallel.files.items()) == list(serial.files.items())
