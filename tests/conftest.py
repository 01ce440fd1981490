# pylint: disable=redefined-outer-name


import pytest

import cronsync.config
from cronsync.reconcile import Reconciler
from cronsync.registry import Registry
from tests.support.memstore import MemoryStore


@pytest.fixture
def stores():
    return {}


@pytest.fixture
def store_factory(stores):
    def factory(user):
        return stores.setdefault(user, MemoryStore(user))

    return factory


@pytest.fixture
def opts():
    return cronsync.config.apply_config({"validate_users": False})


@pytest.fixture
def registry():
    return Registry()


@pytest.fixture
def reconciler(registry, store_factory, opts):
    return Reconciler(registry=registry, store_factory=store_factory, opts=opts)
