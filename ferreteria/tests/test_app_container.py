# -*- coding: utf-8 -*-
"""Tests del contenedor de dependencias."""
import pytest

from ferreteria.app_container import AppContainer
from ferreteria.config import TestingConfig
from ferreteria.exceptions import UpstreamError
from ferreteria.repositories import JSONFileKeyValueStore, MemoryKeyValueStore


def test_contenedores_independientes():
    a = AppContainer(TestingConfig)
    b = AppContainer(TestingConfig)
    a.product_repo.create({'name': 'Martillo', 'price': 1, 'unit': 'u'})

    assert a is not b
    assert isinstance(a.store, MemoryKeyValueStore)
    assert len(a.product_repo.list()) == 1
    assert b.product_repo.list() == []


def test_instancias_perezosas_y_compartidas():
    c = AppContainer(TestingConfig)
    assert c.sales_service.product_repo is c.product_repo
    assert c.product_service.product_repo is c.product_repo
    assert c.sales_service.sale_repo is c.sale_repo


def test_backend_json(tmp_path):
    path = str(tmp_path / 'store.json')
    c = AppContainer({'STORE_BACKEND': 'json', 'DATA_PATH': path})
    c.product_repo.create({'name': 'Taladro', 'price': 1, 'unit': 'u'})
    c.close()

    otro = AppContainer({'STORE_BACKEND': 'json', 'DATA_PATH': path})
    assert isinstance(otro.store, JSONFileKeyValueStore)
    assert [p.name for p in otro.product_repo.list()] == ['Taladro']


def test_backend_desconocido():
    c = AppContainer({'STORE_BACKEND': 'redis'})
    with pytest.raises(UpstreamError, match='desconocido'):
        c.store


def test_close_libera_el_almacen():
    store = MemoryKeyValueStore()
    c = AppContainer(TestingConfig, store=store)
    service = c.product_service

    c.close()
    c.close()

    assert c.closed
    assert store.closed
    with pytest.raises(UpstreamError):
        service.list_products()
    with pytest.raises(UpstreamError, match='cerrado'):
        c.product_repo
