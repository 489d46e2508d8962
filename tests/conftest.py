"""
Shared test fixtures.

Provides an in-memory Supabase stand-in that honours the filters and
upsert semantics the services rely on, plus a fake Anthropic client.
"""

import os
import sys
from pathlib import Path

# Add project directory to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Settings are read at import time; give required values before any import
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key")
os.environ.setdefault("IMPORT_SCHEDULE_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "development")

import copy
import pytest
from types import SimpleNamespace
from typing import Callable, Generator, Optional
from unittest.mock import patch

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data=None, count: int = None):
        self.data = data if data is not None else []
        self.count = count


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, table: "MockSupabaseTable", operation: str = "select", payload=None):
        self._table = table
        self._operation = operation
        self._payload = payload
        self._filters: list[Callable[[dict], bool]] = []
        self._order: list[tuple[str, bool]] = []
        self._range: Optional[tuple[int, int]] = None
        self._limit: Optional[int] = None
        self._count = None
        self._is_single = False
        self._on_conflict = ""
        self._ignore_duplicates = False

    # Filters
    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self._filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self._filters.append(lambda row: row.get(column) in values)
        return self

    # Modifiers
    def select(self, *args, count=None, **kwargs):
        self._count = count
        return self

    def order(self, column, desc=False, **kwargs):
        self._order.append((column, desc))
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def single(self):
        self._is_single = True
        return self

    def _matching(self) -> list[dict]:
        return [row for row in self._table.rows if all(f(row) for f in self._filters)]

    def execute(self) -> MockSupabaseResponse:
        self._table.calls.append(self._operation)
        handler = self._table.failures.get(self._operation)
        if handler is not None:
            handler(self._payload)

        if self._operation == "select":
            rows = self._matching()
            for column, desc in reversed(self._order):
                rows = sorted(rows, key=lambda r: r.get(column) or "", reverse=desc)
            total = len(rows)
            if self._range is not None:
                start, end = self._range
                rows = rows[start:end + 1]
            if self._limit is not None:
                rows = rows[:self._limit]
            rows = [copy.deepcopy(r) for r in rows]
            if self._is_single:
                return MockSupabaseResponse(rows[0] if rows else None, 1 if rows else 0)
            return MockSupabaseResponse(rows, total if self._count else None)

        if self._operation == "insert":
            records = self._payload if isinstance(self._payload, list) else [self._payload]
            for record in records:
                self._table.check_unique(record)
                self._table.rows.append(copy.deepcopy(record))
            return MockSupabaseResponse(copy.deepcopy(records))

        if self._operation == "upsert":
            records = self._payload if isinstance(self._payload, list) else [self._payload]
            key = self._on_conflict
            keys = [r.get(key) for r in records]
            if len(keys) != len(set(keys)):
                raise Exception("ON CONFLICT DO UPDATE command cannot affect row a second time")
            written = []
            for record in records:
                existing = next((r for r in self._table.rows if r.get(key) == record.get(key)), None)
                if existing is None:
                    self._table.check_unique(record)
                    self._table.rows.append(copy.deepcopy(record))
                    written.append(copy.deepcopy(record))
                elif not self._ignore_duplicates:
                    existing.update(copy.deepcopy(record))
                    written.append(copy.deepcopy(existing))
            return MockSupabaseResponse(written)

        if self._operation == "update":
            updated = []
            for row in self._matching():
                row.update(copy.deepcopy(self._payload))
                updated.append(copy.deepcopy(row))
            return MockSupabaseResponse(updated)

        if self._operation == "delete":
            removed = self._matching()
            self._table.rows = [r for r in self._table.rows if r not in removed]
            return MockSupabaseResponse(removed)

        raise ValueError(f"Unsupported operation {self._operation}")


class MockSupabaseTable:
    """In-memory table with optional unique columns and failure hooks."""

    def __init__(self, name: str, rows: list = None, unique: tuple = ()):
        self.name = name
        self.rows = [dict(r) for r in (rows or [])]
        self.unique = unique
        self.failures: dict[str, Callable] = {}
        self.calls: list[str] = []

    def check_unique(self, record: dict) -> None:
        for column in self.unique:
            if column in record and any(r.get(column) == record[column] for r in self.rows):
                raise Exception(f'duplicate key value violates unique constraint "{self.name}_{column}_key"')

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self, "select").select(*args, **kwargs)

    def insert(self, data):
        return MockSupabaseQuery(self, "insert", data)

    def upsert(self, data, on_conflict="", ignore_duplicates=False, **kwargs):
        query = MockSupabaseQuery(self, "upsert", data)
        query._on_conflict = on_conflict
        query._ignore_duplicates = ignore_duplicates
        return query

    def update(self, data):
        return MockSupabaseQuery(self, "update", data)

    def delete(self):
        return MockSupabaseQuery(self, "delete")


UNIQUE_COLUMNS = {
    "products": ("doc_id", "name"),
    "vendors": ("source_id", "vendor_id"),
    "manufacturers": ("source_id", "manufacturer_id"),
}


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables: dict[str, MockSupabaseTable] = {}

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = MockSupabaseTable(
            table_name, data, UNIQUE_COLUMNS.get(table_name, ())
        )

    def fail_on(self, table_name: str, operation: str, when: Callable = None):
        """
        Make an operation raise.

        Args:
            when: Optional predicate on the payload; raise only if it returns True
        """
        def handler(payload):
            if when is None or when(payload):
                raise Exception(f"simulated {operation} failure on {table_name}")
        self.table(table_name).failures[operation] = handler

    def rows(self, table_name: str) -> list[dict]:
        """Current rows of a table."""
        return self.table(table_name).rows

    def table(self, name: str) -> MockSupabaseTable:
        """Get (or lazily create) a mock table."""
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable(name, [], UNIQUE_COLUMNS.get(name, ()))
        return self._tables[name]


# ===================
# MOCK ANTHROPIC CLIENT
# ===================

class MockAnthropicMessages:
    """Stand-in for client.messages with a configurable reply."""

    def __init__(self):
        self.calls: list[dict] = []
        self.reply: Optional[str] = "Enhanced description."
        self.error: Optional[Exception] = None

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        content = [] if self.reply is None else [SimpleNamespace(type="text", text=self.reply)]
        return SimpleNamespace(content=content)


class MockAnthropicClient:
    """Mock anthropic.Anthropic client."""

    def __init__(self):
        self.messages = MockAnthropicMessages()


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("products", [
                {"doc_id": "1", "name": "Gauze", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            # Now any service created here gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.product_service.get_supabase_client", return_value=mock_supabase):
            with patch("services.reference_service.get_supabase_client", return_value=mock_supabase):
                yield mock_supabase


@pytest.fixture
def mock_anthropic() -> MockAnthropicClient:
    """Fake Anthropic client returning "Enhanced description."."""
    return MockAnthropicClient()


@pytest.fixture
def enhancer(mock_anthropic):
    """DescriptionEnhancerService wired to the fake client and a roomy limiter."""
    from services.description_enhancer_service import DescriptionEnhancerService
    from utils.rate_limiter import TokenBucket

    return DescriptionEnhancerService(
        client=mock_anthropic,
        limiter=TokenBucket(tokens_per_interval=10000, interval_seconds=1),
        model="test-model",
        enabled=True
    )


@pytest.fixture
def transformer(mock_db, enhancer):
    """ProductTransformService backed by the in-memory store."""
    from services.product_transform_service import ProductTransformService
    from services.reference_service import ReferenceService

    return ProductTransformService(
        vendor_service=ReferenceService("vendors", "vendor_id", "vendor"),
        manufacturer_service=ReferenceService("manufacturers", "manufacturer_id", "manufacturer"),
        enhancer=enhancer
    )


@pytest.fixture
def make_importer(mock_db, transformer):
    """
    Build a ProductImportService over the in-memory store.

    Usage:
        def test_import(make_importer, tmp_path):
            importer = make_importer(file_path=..., delete_flag=True)
    """
    from services.product_import_service import ProductImportService
    from services.product_service import ProductService
    from services.order_service import OrderService

    def _make(file_path, batch_size=1000, delete_flag=False, order_service=None):
        return ProductImportService(
            product_service=ProductService(),
            transformer=transformer,
            order_service=order_service or OrderService(),
            file_path=str(file_path),
            batch_size=batch_size,
            delete_flag=delete_flag
        )

    return _make


@pytest.fixture
def sample_row() -> dict:
    """Feed row from the worked example."""
    return {
        "ProductID": "1",
        "ManufacturerID": "77",
        "ManufacturerName": "Acme",
        "ProductName": "Gauze",
        "PrimaryCategoryName": "Wound Care",
        "ProductDescription": "Sterile gauze pads",
        "PriceDescription": "Box of 100",
        "ItemDescription": "4x4 in, 12 ply",
        "UnitPrice": "2.50",
        "PKG": "BX",
        "ManufacturerItemCode": "GZ1",
        "Availability": "Available",
        "ImageFileName": "gz1.jpg",
        "ItemImageURL": "https://cdn.example.com/gz1.jpg",
        "NDCItemCode": "NDC-001",
    }


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client (lifespan not started).

    Usage:
        def test_endpoint(test_client):
            response = test_client.post("/api/import")
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
