"""
Main entry point for DDSL code generation.

Loads the design and library directories into a UnitRegistry, runs the
generation engine over the selected targets and writes the produced files.

Architecture:
    - registry.py: design units of the main project and its libraries
    - resolvers/: identities, relationships, mixins and behaviors
    - markup/: template transpilation and import resolution
    - synthesis/: editable Python and TypeScript source trees
    - generators/: server and client generators
    - engine.py: per-unit scheduling and diagnostics
"""

from pathlib import Path

from .engine import GenerationEngine, GenerationResult, TARGETS
from .gen_logging import get_logger
from .registry import UnitRegistry

logger = get_logger(__name__)


def load_registry(design_dir, libraries=()) -> UnitRegistry:
    return UnitRegistry.load(Path(design_dir), [Path(p) for p in libraries])


def generate_project(design_dir, libraries=(), targets=TARGETS, workers: int = 1, generators=None) -> GenerationResult:
    """
    Run every generator of `targets` over a design directory.

    Args:
        design_dir: Directory (or single file) of the main project's design
        libraries: Library design directories, in declaration order
        targets: "server" and/or "client"
        workers: Thread pool size for per-unit generation
        generators: Generator list to run instead of the built-in ones

    Returns:
        GenerationResult with per-unit states, files and diagnostics
    """
    registry = load_registry(design_dir, libraries)
    engine = GenerationEngine(registry, generators=generators, workers=workers, targets=tuple(targets))
    return engine.run()


def list_outputs(design_dir, libraries=(), targets=TARGETS, generators=None) -> list:
    """(generator, unit, paths) of every triggered task, without generating."""
    registry = load_registry(design_dir, libraries)
    return GenerationEngine(registry, generators=generators, targets=tuple(targets)).outputs()


def write_outputs(files: dict, out_dir) -> list:
    """
    Write generated files below `out_dir`, creating directories as needed.

    Returns the written paths in sorted order.
    """
    out_path = Path(out_dir)
    written = []
    for relative in sorted(files):
        target = out_path / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(files[relative], encoding="utf-8")
        written.append(target)
    logger.info(f"[WRITE] {len(written)} file(s) to {out_path}")
    return written
