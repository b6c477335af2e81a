"""
Pytest configuration and shared fixtures for the DDSL test suite.
"""

import shutil
import tempfile
from pathlib import Path

import pytest

from design_dsl.api.context import GenContext
from design_dsl.api.engine import GenerationEngine
from design_dsl.api.registry import UnitRegistry


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def examples_dir(project_root):
    """Return the examples directory."""
    return project_root / "examples"


@pytest.fixture(scope="session")
def supplier_design(examples_dir):
    """Design directory of the supplier management example."""
    return examples_dir / "supplier-management" / "design"


@pytest.fixture(scope="session")
def base_library(examples_dir):
    """Design directory of the base library example."""
    return examples_dir / "base-library" / "design"


@pytest.fixture
def temp_output_dir():
    """Create a temporary directory for generated code output."""
    temp_dir = tempfile.mkdtemp(prefix="ddsl_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def write_ddsl_file(temp_output_dir):
    """Write design source to a .ddsl file below the temp directory."""

    def _write(content: str, name: str = "design.ddsl", subdir: str = "design") -> Path:
        directory = temp_output_dir / subdir
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def build_registry():
    """Build a UnitRegistry from design source text (main, then libraries)."""

    def _build(main: str, libraries=()) -> UnitRegistry:
        return UnitRegistry.from_strings(main, libraries)

    return _build


@pytest.fixture
def ctx():
    """A fresh diagnostic context."""
    return GenContext.root().child("test", "unit")


@pytest.fixture
def generate():
    """Run the generation engine over a registry."""

    def _generate(registry, generators=None, workers: int = 1, targets=("server", "client")):
        return GenerationEngine(registry, generators=generators, workers=workers, targets=targets).run()

    return _generate


@pytest.fixture
def shop_design():
    """A small main project with relationships, behaviors and a page."""
    return '''
Project Shop
    defaultDataSource: Main
    defaultPage: Orders
end

DataSource Main
    persistenceType: Sqlite
end

Entity Customer
    properties:
        - id: integer (id);
        - name: string (required, displayName: "Customer Name");
        - orders: Order[];
end

Entity Order
    properties:
        - id: integer (id);
        - total: number;
        - customer: Customer (belongsTo);
end

Behavior CheckTotal on Order
    type: "Before Create"
    function checkTotal() ```
        for item in data_items:
            if item.get("total", 0) < 0:
                raise ValueError("negative total")
    ```
end

Behavior Cancel on Order
    type: Instance
    async function cancel(order, reason?: string) -> Order ```
        order.total = 0
        return await order.save()
    ```
end

Page Orders
    path: "/orders"
    properties:
        - orders: Order[] (read: "Automatically");
    template: ```
        <for const="order" of="orders" trackBy="order.id">
          <p>{{ order.total }}</p>
        </for>
    ```
end
'''


@pytest.fixture
def library_design():
    """A library project that the main project's values should override."""
    return '''
Project Base
    library: true
    parameters:
        - formFieldAppearance: "outline";
    serverDependencies:
        - d: "^1.0";
        - shared: "^3.0";
    clientDependencies:
        - d: "^1.0";
    clientScripts:
        - start: "ng serve";
    styles: ```
        body { margin: 0; }
    ```
end

Mixin Stamped
    properties:
        - createdAt?: datetime;
end
'''
