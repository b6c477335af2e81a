"""
server-scaffold: static runtime files of the generated server.

The files under design_dsl/base/server are copied unchanged; package
markers are written for every generated package directory.
"""

from pathlib import Path

from design_dsl.api.generators.base import Generator

from .application import MAIN_PROJECT

BASE_SERVER_DIR = Path(__file__).resolve().parents[3] / "base" / "server"

PACKAGES = (
    "app",
    "app/core",
    "app/schemas",
    "app/business_objects",
    "app/data_sources",
    "app/app_behaviors",
)


def base_files() -> list[Path]:
    return sorted(p for p in BASE_SERVER_DIR.rglob("*.py") if "__pycache__" not in p.parts)


def scaffold_outputs(unit=None) -> list[str]:
    paths = [f"server/{package}/__init__.py" for package in PACKAGES]
    paths.extend(f"server/{p.relative_to(BASE_SERVER_DIR).as_posix()}" for p in base_files())
    return paths


def generate_scaffold(unit, registry, ctx) -> dict:
    files = {f"server/{package}/__init__.py": "" for package in PACKAGES}
    for path in base_files():
        files[f"server/{path.relative_to(BASE_SERVER_DIR).as_posix()}"] = path.read_text(encoding="utf-8")
    ctx.debug(f"{len(files)} scaffold file(s)")
    return files


SCAFFOLD_GENERATOR = Generator(
    name="server-scaffold",
    triggers=MAIN_PROJECT,
    outputs=scaffold_outputs,
    generate=generate_scaffold,
    is_aggregate=True,
    description="Runtime support modules and package markers",
)
