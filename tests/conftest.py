"""
Shared fixtures for the LifeLedger test suite.

All tests run against in-memory storage or a pytest tmp_path; nothing is
written to the real data directory.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from lifeledger.activity import ActivityLogger
from lifeledger.config import LedgerSettings
from lifeledger.models import Transaction, TransactionType
from lifeledger.orchestrator import LedgerService
from lifeledger.services.storage import InMemoryBackend, LedgerStore


@pytest.fixture
def settings(tmp_path):
    return LedgerSettings(data_dir=tmp_path)


@pytest.fixture
def activity_logger():
    return ActivityLogger()


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def store(backend, settings, activity_logger):
    return LedgerStore(backend, settings=settings, activity_logger=activity_logger)


@pytest.fixture
def service(store, settings, activity_logger):
    svc = LedgerService(store, activity_logger=activity_logger, settings=settings)
    svc.load()
    return svc


def build_transaction(amount, kind=TransactionType.EXPENSE, when=None, category_id="exp_1",
                      tag_id="pay_1", note="", tx_id=None):
    """Build a Transaction with naive local timestamps for readable tests."""
    data = dict(
        amount=Decimal(str(amount)),
        kind=kind,
        category_id=category_id,
        tag_id=tag_id,
        note=note,
        occurred_at=when or datetime(2024, 3, 15, 8, 0),
    )
    if tx_id:
        data["id"] = tx_id
    return Transaction(**data)


@pytest.fixture
def make_tx():
    return build_transaction
