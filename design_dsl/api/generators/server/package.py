"""
server-package: pyproject.toml of the generated server.

Dependencies and scripts of every project are folded with the libraries
first and the main project last, so the main project's versions win.
Dependencies flagged `dev` go to the dev extra; scripts become taskipy
tasks.
"""

from design_dsl.api.generators.base import Generator, project_dependencies, project_settings
from design_dsl.api.templating import render
from design_dsl.api.utils import kebab_case

from .application import MAIN_PROJECT

SERVER_PACKAGE_PATH = "server/pyproject.toml"

DEFAULT_DEPENDENCIES = {
    "fastapi": ">=0.110",
    "uvicorn[standard]": ">=0.29",
    "sqlmodel": ">=0.0.16",
    "pydantic-settings": ">=2.0",
}

DEFAULT_DEV_DEPENDENCIES = {
    "pytest": ">=8.0",
    "httpx": ">=0.27",
    "taskipy": ">=1.12",
}

DEFAULT_SCRIPTS = {
    "start": "uvicorn app.main:app --host 0.0.0.0 --port 3000",
    "dev": "uvicorn app.main:app --reload --port 3000",
    "test": "pytest",
}


def requirement(package: str, version: str) -> str:
    """
    PEP 508 requirement for a version selector.

    "^1.2" -> "pkg>=1.2", "~1.2" -> "pkg~=1.2", "1.2" -> "pkg==1.2";
    "*" or an empty selector leaves the package unpinned.
    """
    version = (version or "").strip()
    if version in ("", "*"):
        return package
    if version.startswith("^"):
        return f"{package}>={version[1:]}"
    if version.startswith("~") and not version.startswith("~="):
        return f"{package}~={version[1:]}"
    if version[0].isdigit():
        return f"{package}=={version}"
    return f"{package}{version}"


def generate_server_package(unit, registry, ctx) -> str:
    project = registry.main_project()
    node = project.node if project else None
    base_name = (node.packageName if node else "") or kebab_case(registry.project_name())

    runtime, dev = project_dependencies(registry, "serverDependencies")
    dependencies = {**DEFAULT_DEPENDENCIES, **runtime}
    dev_dependencies = {**DEFAULT_DEV_DEPENDENCIES, **dev}
    scripts = {**DEFAULT_SCRIPTS, **project_settings(registry, "serverScripts")}

    ctx.debug(f"{len(dependencies)} dependencies, {len(dev_dependencies)} dev dependencies")
    return render(
        "server",
        "pyproject.toml.jinja",
        name=f"{base_name}-server",
        version=(node.version if node else "") or "0.0.1",
        description=node.description if node else "",
        dependencies=[requirement(p, v) for p, v in dependencies.items()],
        dev_dependencies=[requirement(p, v) for p, v in dev_dependencies.items()],
        scripts=scripts,
    )


SERVER_PACKAGE_GENERATOR = Generator(
    name="server-package",
    triggers=MAIN_PROJECT,
    outputs=lambda unit: [SERVER_PACKAGE_PATH],
    generate=generate_server_package,
    is_aggregate=True,
    description="pyproject.toml with folded server dependencies",
)
