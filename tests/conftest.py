"""
Shared pytest fixtures
"""

import logging

import pytest

from admin_manifests.libs.core import ConfigManager
from admin_manifests.libs.generate import ObjectStore, RoleResolver
from admin_manifests.libs.main_app import AdminManifestsManager

from test_constants import role_library


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures the root logger; keep it from leaking across tests"""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def store():
    return ObjectStore()


@pytest.fixture
def single_cluster_store():
    return ObjectStore(single_cluster=True)


@pytest.fixture
def role_resolver():
    return RoleResolver(role_library())


@pytest.fixture
def build_admins():
    """Turn kubesaw-admins content into typed records"""
    config_manager = ConfigManager()

    def _build(data):
        config_manager._validate_against_schema(data, ConfigManager.ADMINS_SCHEMA)
        return config_manager.build_admins(data)

    return _build


@pytest.fixture
def manager():
    return AdminManifestsManager(role_provider=role_library())
