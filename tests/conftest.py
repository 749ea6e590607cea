"""Pytest configuration and shared fixtures for the donation split tests."""
import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

# Keep uploads/exports out of the working tree; must run before core.config is used
os.environ.setdefault("STORAGE_PATH", tempfile.mkdtemp(prefix="donation-split-"))

from core.schema import BucketMapping, InputRecord  # noqa: E402

HEADER = ["Data", "Doador", "Valor", "Descrição"]


@pytest.fixture
def alpha_beta_mapping():
    """Mapping {01 -> Alpha, 02 -> Beta}."""
    return BucketMapping.from_dict({1: "Alpha", 2: "Beta"})


@pytest.fixture
def alpha_mapping():
    """Mapping {01 -> Alpha}."""
    return BucketMapping.from_dict({1: "Alpha"})


@pytest.fixture
def make_record():
    """Factory for InputRecords with sensible defaults."""
    def _make(amount="10.01", record_date=date(2024, 1, 5), donor=None, description=None):
        return InputRecord(
            date=record_date,
            amount=Decimal(amount),
            donor_name=donor,
            description=description,
        )
    return _make


@pytest.fixture
def sample_grid():
    """Mixed grid with text, numeric and malformed rows."""
    return [
        HEADER,
        ["05/01/2024", "Ana", "R$ 1.234,01", "Oferta"],
        ["2024-01-06", "Bruno", 20.02, None],
        [45300, None, "5,50", "Missões"],
        ["não é data", "Carla", "10,01", None],
        [None, None, None, None],
        ["05/01/2024", "Ana", "R$ 1.234,01", "Oferta"],
        ["07-01-2024", "Davi", "(3,01)", "Estorno"],
    ]


@pytest.fixture
def sample_csv_content():
    """Semicolon-separated Brazilian export."""
    return (
        "Data;Nome do Doador;Valor;Observacao\n"
        "05/01/2024;Ana;10,01;Oferta\n"
        "06/01/2024;Bruno;1.500,02;\n"
        "xx/01/2024;Carla;3,01;\n"
    )


@pytest.fixture
def sample_csv_file(sample_csv_content, tmp_path):
    """Create a temporary CSV file for testing."""
    csv_file = tmp_path / "doacoes.csv"
    csv_file.write_text(sample_csv_content, encoding="utf-8")
    return csv_file
