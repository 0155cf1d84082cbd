"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from policy_reconciler.main import app
from policy_reconciler.models.policy import ConfirmedField


@pytest.fixture
def test_client() -> TestClient:
    """Create FastAPI test client.

    Returns:
        TestClient: FastAPI test client instance
    """
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def record_id() -> UUID:
    return uuid4()


@pytest.fixture
def stored_fields() -> dict:
    """A complete, consistent stored record in canonical form.

    Returns:
        dict: Logical fields of the record
    """
    return {
        "insurer": "ACME SEGUROS",
        "policyNumber": "12345-X",
        "insuredName": "Maria Da Silva",
        "premium": Decimal("1200.00"),
        "monthlyAmount": Decimal("100.00"),
        "startDate": "2024-01-01",
        "endDate": "2025-01-01",
        "deductible": Decimal("500.00"),
    }


@pytest.fixture
def raw_candidate() -> dict:
    """Raw extraction of the same policy in the upload parser's shape.

    Returns:
        dict: Raw candidate payload
    """
    return {
        "seguradora": "acme seguros",
        "numero_apolice": " 12345-X ",
        "segurado": "maria da silva",
        "informacoes_financeiras": {
            "premio": "R$ 1.200,00",
            "custo_mensal": "R$ 100,00",
            "franquia": "500",
        },
        "vigencia": {
            "inicio": "01/01/2024",
            "fim": "01/01/2025",
        },
    }


@pytest.fixture
def confirmed_policy_number(record_id: UUID) -> ConfirmedField:
    return ConfirmedField(
        record_id=record_id,
        field_name="policyNumber",
        value="12345-X",
        confirmed_at=datetime(2024, 3, 10, 14, 30, tzinfo=timezone.utc),
        confirmed_by="analyst@example.com",
    )
