"""Shared fixtures for the test suite.

Provides a fresh temp-file SQLite DatabaseManager for each test plus
small factories for appointments, so pure-logic tests never touch a
database and repository tests never share state.
"""
import os
import shutil
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from agenda.types import Address, Appointment, AppointmentStatus
from database import DatabaseManager


@pytest.fixture
def temp_db():
    """Yield a fresh DatabaseManager bound to a temp SQLite database."""
    temp_dir = tempfile.mkdtemp(prefix="agenda-tests-")
    db_path = os.path.join(temp_dir, "test.db")
    manager = DatabaseManager(database_url=f"sqlite:///{db_path}")
    manager.create_tables()

    try:
        yield manager
    finally:
        manager.close()
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def sample_address():
    return Address(street="Rua das Flores", number="120", district="Centro", city="Curitiba")


@pytest.fixture
def make_appointment(sample_address):
    """Factory for in-memory Appointment objects (defaults to Completed)."""
    def _make(appointment_id="a1", **overrides):
        values = dict(
            id=appointment_id,
            date=date(2024, 5, 10),
            requester_name="Carlos",
            status=AppointmentStatus.COMPLETED,
            client_name="Maria Silva",
            client_phone="(41) 99999-0000",
            address=sample_address,
            order_number=None,
            observations=None,
            order_value=None,
            commission_rate=None,
            commission_paid=False,
        )
        values.update(overrides)
        return Appointment(**values)
    return _make


@pytest.fixture
def appointment_fields(sample_address):
    """Factory for snake_case column dicts accepted by AppointmentRepository."""
    def _fields(**overrides):
        values = {
            "date": date(2024, 5, 10),
            "requester_name": "Carlos",
            "status": "Realizado",
            "client_name": "Maria Silva",
            "client_phone": "(41) 99999-0000",
            "address": sample_address.to_dict(),
            "order_value": Decimal("1250.00"),
            "commission_rate": None,
        }
        values.update(overrides)
        return values
    return _fields


@pytest.fixture
def appointment_payload():
    """Factory for camelCase form payloads as sent by the web client."""
    def _payload(**overrides):
        values = {
            "date": "2024-05-10",
            "requesterName": "Carlos",
            "clientName": "Maria Silva",
            "clientPhone": "41999990000",
            "address": {
                "street": "Rua das Flores",
                "number": "120",
                "district": "Centro",
                "city": "Curitiba",
            },
            "status": "Pendente",
        }
        values.update(overrides)
        return values
    return _payload
