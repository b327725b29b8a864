# -*- coding: utf-8 -*-
"""
Fixtures compartidas: cada test recibe una aplicación nueva con almacén
en memoria, así ningún test ve datos de otro.
"""
import pytest

from ferreteria import create_app
from ferreteria.app_container import AppContainer
from ferreteria.config import TestingConfig
from ferreteria.performance_logger import reset_stats
from ferreteria.repositories import (
    MemoryKeyValueStore,
    ProductRepository,
    SaleRepository,
)
from ferreteria.services import SalesService
from ferreteria.tests.helpers import login


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    yield app
    app.extensions['ferreteria'].close()


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


@pytest.fixture
def container(app) -> AppContainer:
    return app.extensions['ferreteria']


@pytest.fixture
def admin_headers(client):
    return login(client, TestingConfig.ADMIN_EMAIL, TestingConfig.ADMIN_PASSWORD)


@pytest.fixture
def user_headers(client):
    r = client.post('/api/signup', json={
        'email': 'cliente@correo.pe', 'password': 'secreto1', 'name': 'Cliente'
    })
    assert r.status_code == 200, r.get_json()
    return login(client, 'cliente@correo.pe', 'secreto1')


# ═══════════════════════════════════════════════════════════════════════════
# Nivel servicio (sin Flask)
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def store():
    s = MemoryKeyValueStore()
    yield s
    s.close()


@pytest.fixture
def product_repo(store):
    return ProductRepository(store)


@pytest.fixture
def sale_repo(store):
    return SaleRepository(store)


@pytest.fixture
def sales_service(product_repo, sale_repo):
    return SalesService(product_repo, sale_repo, suffix_generator=lambda: 'ABC123')


@pytest.fixture(autouse=True)
def _clean_profiling_stats():
    reset_stats()
    yield
    reset_stats()
