"""Shared fixtures for the kiosk test suite."""

import pytest
from fastapi.testclient import TestClient
from kungfu import Error, Ok

from kiosk.config import DatabaseConfig, KioskConfig
from kiosk.errors import StoreUnavailableError
from kiosk.main import create_app
from kiosk.services.queue import QueueManager
from kiosk.store.connection import ConnectionProvisioner


class SwitchableProvisioner(ConnectionProvisioner):
    """Provisioner whose store can be taken down and brought back."""

    def __init__(self, config: DatabaseConfig):
        super().__init__(config)
        self.down = False

    def get_connection(self):
        if self.down:
            raise StoreUnavailableError("Store is down")
        return super().get_connection()


def unwrap(result):
    """Value of an Ok result; fails the test on Error."""
    match result:
        case Ok(value):
            return value
        case Error(e):
            raise AssertionError(f"Unexpected store error: {e}")


@pytest.fixture
def database_config(tmp_path):
    """SQLite file database isolated per test."""
    return DatabaseConfig(url=f"sqlite:///{tmp_path / 'hospital_queue.db'}")


@pytest.fixture
def provisioner(database_config):
    provisioner = SwitchableProvisioner(database_config)
    yield provisioner
    provisioner.dispose()


@pytest.fixture
def manager(provisioner):
    return QueueManager(provisioner)


@pytest.fixture
def app(database_config):
    return create_app(KioskConfig(database=database_config))


@pytest.fixture
def client(app):
    return TestClient(app)
