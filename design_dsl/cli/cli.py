from pathlib import Path

import click
from datetime import date
from rich import pretty
from rich.console import Console
from rich.table import Table

from design_dsl.api.engine import UnitState
from design_dsl.api.errors import DesignError
from design_dsl.api.gen_logging import configure_gen_logging
from design_dsl.api.generator import generate_project, list_outputs, load_registry, write_outputs
from design_dsl.api.graph import UnitGraph
from design_dsl.api.markup import convert_template
from design_dsl.api.registry import UnitKind
from design_dsl.api.resolvers import resolve_identity, resolve_relationships
from design_dsl.config import TARGET_NAMES, load_settings

pretty.install()
console = Console()

STATE_STYLES = {
    UnitState.GENERATED: "green",
    UnitState.SKIPPED: "yellow",
    UnitState.FAILED: "red",
}


def _today() -> str:
    return date.today().strftime('%Y-%m-%d')


def _targets(target: str) -> tuple:
    return TARGET_NAMES if target == "all" else (target,)


@click.group()
@click.pass_context
def cli(context):
    context.ensure_object(dict)


@cli.command("validate", help="Parse and validate a design directory (and its libraries).")
@click.pass_context
@click.argument("design_path")
@click.option("--lib", "libraries", multiple=True, help="Library design directory (repeatable).")
def validate(context, design_path, libraries):
    try:
        registry = load_registry(design_path, libraries)
        graph = UnitGraph(registry)
        if graph.problems:
            raise DesignError("; ".join(graph.problems))
        for cycle in graph.mixin_cycles() + graph.view_cycles():
            console.print(f"[{_today()}] Cycle: {' -> '.join(cycle)}", style="yellow")
        console.print(f"[{_today()}] Design validation success! ({len(registry)} units)", style='green')
    except Exception as e:
        console.print(f"[{_today()}] Validation failed with error(s): {e}", style='red')
        context.exit(1)
    else:
        context.exit(0)


@cli.command("inspect", help="Print the units of a design and their resolved relationships.")
@click.pass_context
@click.argument("design_path")
@click.option("--lib", "libraries", multiple=True, help="Library design directory (repeatable).")
def inspect_cmd(context, design_path, libraries):
    try:
        registry = load_registry(design_path, libraries)
        console.print(f"[{_today()}] Design validation success!", style='green')

        units = Table(title="Units")
        units.add_column("Kind", style="cyan")
        units.add_column("Name", style="bold")
        units.add_column("Library")
        units.add_column("Source", style="dim")
        for unit in registry:
            units.add_row(unit.kind.value, unit.name, "yes" if unit.is_library else "", str(unit.source_path or ""))
        console.print(units)

        relationships = Table(title="Relationships")
        relationships.add_column("Entity", style="bold")
        relationships.add_column("Identity")
        relationships.add_column("Kind", style="cyan")
        relationships.add_column("Property")
        relationships.add_column("Target")
        relationships.add_column("Foreign key")
        for entity in registry.list(UnitKind.ENTITY):
            identity = resolve_identity(entity)
            try:
                resolved = resolve_relationships(entity, registry)
            except DesignError as e:
                relationships.add_row(entity.name, f"{identity.name}: {identity.type}", "[red]error[/red]", "", "", str(e))
                continue
            for r in resolved:
                relationships.add_row(
                    entity.name,
                    f"{identity.name}: {identity.type}",
                    r.kind,
                    r.name,
                    r.target,
                    f"{r.foreign_key}: {r.foreign_key_type}",
                )
        console.print(relationships)
    except Exception as e:
        console.print(f"[{_today()}] Inspect failed with error(s): {e}", style='red')
        context.exit(1)
    else:
        context.exit(0)


@cli.command("generate", help="Emit the server and/or client of a design.")
@click.pass_context
@click.argument("design_path", required=False)
@click.option("--lib", "libraries", multiple=True, help="Library design directory (repeatable).")
@click.option("--out", "out_dir", default=None, help="Output directory (default: ./generated)")
@click.option(
    "--target",
    type=click.Choice(["all", *TARGET_NAMES], case_sensitive=False),
    default=None,
    help="What to generate (default: all)."
)
@click.option("--config", "config_path", default=None, help="Settings file (default: ./ddsl.yaml when present)")
@click.option("--workers", type=int, default=None, help="Number of units generated in parallel.")
@click.option("-v", "--verbose", is_flag=True, help="Show resolver and synthesis detail.")
@click.option("-q", "--quiet", is_flag=True, help="Only show warnings and failures.")
def generate(context, design_path, libraries, out_dir, target, config_path, workers, verbose, quiet):
    try:
        settings = load_settings(config_path)
        overrides = {}
        if design_path:
            overrides["design_dir"] = Path(design_path)
        if libraries:
            overrides["libraries"] = [Path(p) for p in libraries]
        if out_dir:
            overrides["out_dir"] = Path(out_dir)
        if target:
            overrides["targets"] = list(_targets(target.lower()))
        if workers:
            overrides["workers"] = workers
        settings = settings.model_copy(update=overrides)
        if settings.design_dir is None:
            raise click.UsageError("No design directory given (argument or design_dir setting).")

        configure_gen_logging(verbose, quiet, settings.log_level)
        result = generate_project(
            settings.design_dir,
            settings.libraries,
            targets=settings.targets,
            workers=settings.workers,
        )
        out_path = Path(settings.out_dir).resolve()
        written = write_outputs(result.files, out_path)

        for failed in result.failed:
            console.print(f"[{_today()}] {failed.label} failed: {failed.reason}", style="red")
        summary = (
            f"{len(written)} file(s) emitted to: {out_path} "
            f"(generated {len(result.generated)}, skipped {len(result.skipped)}, failed {len(result.failed)})"
        )
        console.print(f"[{_today()}] {summary}", style="green" if result.ok else "yellow")
        if not result.ok:
            context.exit(1)

    except click.exceptions.Exit:
        raise
    except Exception as e:
        import traceback

        console.print(
            f"[{_today()}] Generate failed with error(s): {e}",
            style="red",
        )
        if verbose:
            console.print("\n".join(traceback.format_exc().splitlines()[-50:]), style="red")
        context.exit(1)
    else:
        context.exit(0)


@cli.command("outputs", help="List the files a design would produce, per generator and unit.")
@click.pass_context
@click.argument("design_path")
@click.option("--lib", "libraries", multiple=True, help="Library design directory (repeatable).")
@click.option(
    "--target",
    type=click.Choice(["all", *TARGET_NAMES], case_sensitive=False),
    default="all",
    help="Which target to list (default: all)."
)
def outputs_cmd(context, design_path, libraries, target):
    try:
        table = Table(title="Outputs")
        table.add_column("Generator", style="cyan")
        table.add_column("Unit", style="bold")
        table.add_column("Paths")
        for generator, unit, paths in list_outputs(design_path, libraries, _targets(target.lower())):
            table.add_row(generator, unit or "*", "\n".join(paths))
        console.print(table)
    except Exception as e:
        console.print(f"[{_today()}] Outputs failed with error(s): {e}", style='red')
        context.exit(1)
    else:
        context.exit(0)


@cli.command("transpile", help="Convert an authoring template to Angular control-flow syntax.")
@click.pass_context
@click.argument("template_path")
def transpile_cmd(context, template_path):
    try:
        text = Path(template_path).read_text(encoding="utf-8")
        click.echo(convert_template(text), nl=False)
    except Exception as e:
        console.print(f"[{_today()}] Transpile failed with error(s): {e}", style='red')
        context.exit(1)
    else:
        context.exit(0)


@cli.command("visualize-model", help="Visualize the unit graph of a design.")
@click.pass_context
@click.argument("design_path")
@click.option("--lib", "libraries", multiple=True, help="Library design directory (repeatable).")
@click.option("--output", "-o", "output_dir", default="docs", help="Output directory for PNG/DOT files (default: docs)")
def visualize_model_cmd(context, design_path, libraries, output_dir):
    """
    Build a GraphViz diagram of the design:
    - Entities and their relationships
    - Mixins and behaviors
    - Pages and the components they use
    - Data sources and projects
    """
    try:
        registry = load_registry(design_path, libraries)
        graph = UnitGraph(registry)
        dot = graph.to_digraph(comment=f"DDSL Design {registry.project_name()}")

        out_path = Path(output_dir).resolve()
        out_path.mkdir(parents=True, exist_ok=True)
        file_base = out_path / f"{Path(design_path).stem}_diagram"
        png_file = Path(f"{file_base}.png")
        dot_file = Path(f"{file_base}.dot")

        try:
            dot.render(str(file_base), format="png", cleanup=True)
            console.print(f"[{_today()}] Design visualization written to: {png_file}", style="green")
        except Exception:
            # no GraphViz executable: keep the DOT source
            dot.save(str(dot_file))
            console.print(
                f"[{_today()}] GraphViz 'dot' executable not found. Saved DOT file to: {dot_file}",
                style="yellow"
            )
            console.print(
                f"To generate PNG: Install GraphViz (https://graphviz.org/download/) and run: dot -Tpng {dot_file} -o {png_file}",
                style="yellow"
            )

    except Exception as e:
        console.print(f"visualize-model failed: {e}", style="red")
        context.exit(1)


def main():
    cli(prog_name="ddsl")
