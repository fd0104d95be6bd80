import asyncio
import inspect
import pathlib
import sys
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.pool import NullPool

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.db.database import Database  # noqa: E402
from mortgage_optimizer.models import Deal, DealType  # noqa: E402

_DECIMAL_FIELDS = {"interest_rate", "max_ltv", "arrangement_fee", "valuation_fee", "legal_fees", "cashback"}


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        # funcargs also holds fixtures pulled in indirectly (tmp_path for database)
        testargs = {arg: pyfuncitem.funcargs[arg] for arg in pyfuncitem._fixtureinfo.argnames}
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            loop.run_until_complete(test_function(**testargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


@pytest.fixture()
def database(tmp_path: pathlib.Path) -> Database:
    """File-backed SQLite database; tables are created by each test."""

    # NullPool keeps no connection alive between the per-test event loops.
    return Database(f"sqlite+aiosqlite:///{tmp_path / 'deals.db'}", poolclass=NullPool)


@pytest.fixture()
def make_deal():
    """Factory for canonical deals with sensible defaults."""

    def _make(**overrides) -> Deal:
        values = {
            "lender_name": "Atom Bank",
            "product_name": "2 Year Fixed - 75% LTV",
            "interest_rate": Decimal("4.29"),
            "source": "MoneySuperMarket",
            "scraped_at": datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc),
            "deal_type": DealType.FIXED,
        }
        for key, value in overrides.items():
            if key in _DECIMAL_FIELDS and value is not None:
                value = Decimal(str(value))
            values[key] = value
        return Deal(**values)

    return _make
