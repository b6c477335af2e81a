"""
Unit tests for the server generators.

Generated modules are checked as text: they are built with `ast` and
printed with `ast.unparse`, so string literals come out single-quoted.
"""

import ast

import pytest

from design_dsl.api.engine import UnitState
from design_dsl.api.generators.server import (
    APP_BEHAVIOR_GENERATOR,
    DATA_SOURCE_GENERATOR,
    SCAFFOLD_GENERATOR,
    SERVER_GENERATORS,
)
from design_dsl.api.generators.server.app_behavior import generate_app_behavior
from design_dsl.api.generators.server.application import generate_routes_index, generate_server_main
from design_dsl.api.generators.server.business_object import generate_business_object
from design_dsl.api.generators.server.data_source import generate_data_source
from design_dsl.api.generators.server.package import generate_server_package, requirement
from design_dsl.api.generators.server.route import generate_route
from design_dsl.api.generators.server.schema import generate_schema
from design_dsl.api.registry import UnitKind

PROJECT_BEHAVIORS = '''
Behavior Seed on Shop
    type: "After Start"
    uses: Customer
    async function seed() ```
        await Customer.create({"name": "Ada"})
    ```
end

Behavior Stats on Shop
    type: App
    httpMethod: Get
    imports: ```
        from business_objects import Order
    ```
    async function stats() -> integer ```
        return await Order.count()
    ```
end
'''


@pytest.fixture
def shop(build_registry, shop_design):
    return build_registry(shop_design + PROJECT_BEHAVIORS)


def _unit(registry, kind, name):
    return registry.get(kind, name)


class TestBusinessObject:
    """Test the business object class and its behaviors."""

    def test_before_create_is_spliced_before_persistence(self, shop, ctx):
        text = generate_business_object(_unit(shop, UnitKind.ENTITY, "Order"), shop, ctx)
        create = text.index("async def create(cls, data: dict)")
        body = text.index(
            "        for item in data_items:\n"
            "            if item.get(\"total\", 0) < 0:\n"
            "                raise ValueError(\"negative total\")\n",
            create,
        )
        call = text.index("records = await cls.data_source.create(cls.entity_name, data_items)", create)
        assert create < body < call
        # create_many gets the same body
        assert text.count('raise ValueError("negative total")') == 2
        ast.parse(text)

    def test_instance_behavior_method(self, shop, ctx):
        text = generate_business_object(_unit(shop, UnitKind.ENTITY, "Order"), shop, ctx)
        assert "    async def cancel(self, reason: str=None) -> 'Order':\n" in text
        assert "        order = self\n        order.total = 0\n        return await order.save()\n" in text

    def test_header_and_data_source(self, shop, ctx):
        text = generate_business_object(_unit(shop, UnitKind.ENTITY, "Customer"), shop, ctx)
        assert text.startswith("# Generated by ddsl. Changes will be overwritten.\n")
        assert "from app.data_sources.main import data_source as _data_source" in text

    def test_uses_becomes_local_import(self, build_registry, ctx):
        registry = build_registry('''
DataSource Db
    persistenceType: Memory
end

Entity Supplier
    dataSource: Db
end

Entity Invoice
    dataSource: Db
end

Behavior Invoices on Supplier
    type: Class
    uses: Invoice
    function invoices() ```
        return Invoice.find()
    ```
end
''')
        text = generate_business_object(_unit(registry, UnitKind.ENTITY, "Supplier"), registry, ctx)
        assert (
            "    @classmethod\n"
            "    def invoices(cls):\n"
            "        from app.business_objects.invoice import Invoice\n"
            "        return Invoice.find()\n"
        ) in text


class TestSchema:
    """Test SQLModel schema generation."""

    def test_foreign_key_column_and_relationship(self, shop, ctx):
        text = generate_schema(_unit(shop, UnitKind.ENTITY, "Order"), shop, ctx)
        assert "customerId: Optional[int] = Field(default=None, foreign_key='customer.id')" in text
        assert (
            "customer: Optional['Customer'] = "
            "Relationship(sa_relationship_kwargs={'foreign_keys': '[Order.customerId]'})"
        ) in text
        assert text.count("customerId: Optional[int] = Field(") == 1
        assert "__tablename__ = 'order'" in text

    def test_has_many_relationship(self, shop, ctx):
        text = generate_schema(_unit(shop, UnitKind.ENTITY, "Customer"), shop, ctx)
        assert "name: str = Field(title='Customer Name')" in text
        assert "orders: list['Order'] = Relationship(" in text
        assert "id: Optional[int] = Field(default=None, primary_key=True)" in text

    def test_initializers_become_defaults(self, build_registry, ctx):
        registry = build_registry('''
DataSource Db
    persistenceType: Memory
end

Entity Ticket
    dataSource: Db
    properties:
        - active: boolean = `true`;
        - status: string = `"Open"`;
        - note?: string (placeholder: "Optional note");
        - tags: string[];
end
''')
        text = generate_schema(_unit(registry, UnitKind.ENTITY, "Ticket"), registry, ctx)
        assert "active: bool = Field(default=True)" in text
        assert "status: str = Field(default='Open')" in text
        assert (
            "note: Optional[str] = Field(default=None, "
            "schema_extra={'json_schema_extra': {'placeholder': 'Optional note'}})"
        ) in text
        assert "tags: list[str] = Field(sa_type=JSON)" in text
        assert "from sqlalchemy import JSON" in text

    def test_update_schema_is_all_optional(self, shop, ctx):
        text = generate_schema(_unit(shop, UnitKind.ENTITY, "Order"), shop, ctx)
        update = text[text.index("class OrderUpdate(SQLModel):"):]
        assert "total: Optional[float] = None" in update


class TestRoutes:
    """Test FastAPI route modules."""

    def test_instance_behavior_endpoint(self, shop, ctx):
        text = generate_route(_unit(shop, UnitKind.ENTITY, "Order"), shop, ctx)
        assert "router = APIRouter(prefix='/orders', tags=['Order'])" in text
        assert "@router.post('/{id}/cancel')\nasync def cancel_order(id: int, payload: dict=Body(default_factory=dict)):" in text
        assert "    record = await Order.find_by_id(id)\n    result = await record.cancel(**payload)\n" in text
        assert "from fastapi import APIRouter, Body, HTTPException, Response, status" in text

    def test_class_behavior_precedes_id_route(self, build_registry, ctx):
        registry = build_registry('''
DataSource Db
    persistenceType: Memory
end

Entity Supplier
    dataSource: Db
end

Behavior ActiveCount on Supplier
    type: Class
    httpMethod: Get
    async function activeCount() -> integer ```
        return await cls.count({"active": True})
    ```
end
''')
        text = generate_route(_unit(registry, UnitKind.ENTITY, "Supplier"), registry, ctx)
        assert "@router.get('/active-count')\nasync def active_count_supplier(request: Request):" in text
        assert "    payload = dict(request.query_params)\n" in text
        assert text.index("def active_count_supplier") < text.index("def get_supplier")


class TestProjectOutputs:
    """Test data sources, project behaviors and the application entry points."""

    def test_data_source_module(self, shop, ctx):
        text = generate_data_source(_unit(shop, UnitKind.DATA_SOURCE, "Main"), shop, ctx)
        assert "from app.schemas.customer import Customer" in text
        assert "url=settings.DATA_SOURCE_URLS.get('Main', 'sqlite:///main.db')" in text
        assert "'Order': 'id'," in text

    def test_data_source_without_type_is_skipped(self, build_registry, generate):
        registry = build_registry("Project P end\nDataSource Empty end")
        result = generate(registry, [DATA_SOURCE_GENERATOR])
        assert result.state_of("data-source", "Empty") is UnitState.SKIPPED

    def test_app_behavior_endpoint(self, shop, ctx):
        text = generate_app_behavior(_unit(shop, UnitKind.BEHAVIOR, "Stats"), shop, ctx)
        assert "from app.business_objects.order import Order" in text
        assert "router = APIRouter(prefix='/app', tags=['App'])" in text
        assert "async def stats() -> int:\n    return await Order.count()\n" in text
        assert "@router.get('/stats')\nasync def stats_endpoint(payload: dict=Body(default_factory=dict)):" in text

    def test_entity_behaviors_are_not_app_behaviors(self, shop, generate):
        result = generate(shop, [APP_BEHAVIOR_GENERATOR])
        assert result.state_of("app-behavior", "Seed") is UnitState.GENERATED
        assert result.state_of("app-behavior", "Cancel") is UnitState.SKIPPED

    def test_routes_index(self, shop, ctx):
        text = generate_routes_index(None, shop, ctx)
        assert "from app.routes.customers import router as customers_router" in text
        assert "from app.app_behaviors.stats import router as stats_router" in text
        assert "seed_router" not in text

    def test_main_runs_after_start_behaviors(self, shop, ctx):
        text = generate_server_main(None, shop, ctx)
        assert "from app.app_behaviors.seed import seed" in text
        assert "DATA_SOURCES = [main_data_source]" in text
        assert (
            "    try:\n"
            "        await seed()\n"
            "    except Exception:\n"
            "        logger.exception('[ERROR] After Start behavior seed failed')\n"
        ) in text

    def test_scaffold_writes_package_markers(self, shop, generate):
        files = generate(shop, [SCAFFOLD_GENERATOR]).files
        assert files["server/app/__init__.py"] == ""
        assert "class BehaviorError(Exception):" in files["server/app/core/errors.py"]

    def test_every_server_module_parses(self, shop, generate):
        result = generate(shop, SERVER_GENERATORS)
        assert result.ok
        for path, content in result.files.items():
            if path.endswith(".py"):
                ast.parse(content, filename=path)


class TestServerPackage:
    """Test the generated pyproject.toml."""

    @pytest.mark.parametrize("version, expected", [
        ("^1.2", "pkg>=1.2"),
        ("~1.2", "pkg~=1.2"),
        ("1.2.3", "pkg==1.2.3"),
        ("*", "pkg"),
        ("", "pkg"),
        (">=3,<4", "pkg>=3,<4"),
    ])
    def test_requirement(self, version, expected):
        assert requirement("pkg", version) == expected

    def test_main_project_wins(self, build_registry, library_design, ctx):
        registry = build_registry('''
Project Main
    description: "Main server"
    serverDependencies:
        - d: "^2.0";
        - "pytest-asyncio": "^0.23" dev;
    serverScripts:
        - start: "uvicorn app.main:app";
end
''', [library_design])
        text = generate_server_package(None, registry, ctx)
        assert 'name = "main-server"' in text
        assert 'description = "Main server"' in text
        assert '"d>=2.0",' in text
        assert '"d>=1.0"' not in text
        assert '"shared>=3.0",' in text
        dev = text[text.index("dev = ["):]
        assert '"pytest-asyncio>=0.23",' in dev
        assert '"start" = "uvicorn app.main:app"' in text
        assert '"test" = "pytest"' in text


class TestIsolation:
    """Test that one broken entity leaves the rest of the server intact."""

    ENTITY_GENERATORS = ("business-object", "business-object-schema", "business-object-route")

    def test_missing_data_source_fails_only_its_entity(self, build_registry, shop_design, generate):
        registry = build_registry(shop_design + '''
Entity Stray
    dataSource: Nowhere
    properties:
        - id: integer (id);
end
''')
        result = generate(registry, SERVER_GENERATORS)
        for name in self.ENTITY_GENERATORS:
            assert result.state_of(name, "Stray") is UnitState.FAILED
            assert result.state_of(name, "Customer") is UnitState.GENERATED
        [failure] = [r for r in result.failed if r.generator == "business-object"]
        assert failure.reason == "DataSource 'Nowhere' not found (referenced by 'Stray')."
        assert len(failure.diagnostics) == 1
        for aggregate in ("routes-index", "server"):
            assert result.state_of(aggregate) is UnitState.GENERATED
        assert result.state_of("data-source", "Main") is UnitState.GENERATED
        assert "stray" not in result.files["server/app/routes/__init__.py"]
        assert "server/app/business_objects/stray.py" not in result.files

    def test_unknown_property_type_fails_only_its_entity(self, build_registry, shop_design, generate):
        registry = build_registry(shop_design + '''
Entity Stray
    properties:
        - id: integer (id);
        - thing: Missing;
end
''')
        result = generate(registry, SERVER_GENERATORS)
        for name in self.ENTITY_GENERATORS:
            assert result.state_of(name, "Stray") is UnitState.FAILED
        assert result.failed[0].reason == "Entity 'Missing' not found (referenced by 'Stray.thing')."
        # Customer's schema collects incoming keys without touching Stray
        assert result.state_of("business-object-schema", "Customer") is UnitState.GENERATED
        assert result.state_of("business-object-schema", "Order") is UnitState.GENERATED
        assert "customerId" in result.files["server/app/schemas/order.py"]
