# -*- coding: utf-8 -*-
"""Tests de los almacenes clave-valor (memoria y archivo JSON)."""
import json

import pytest

from ferreteria.exceptions import UpstreamError
from ferreteria.repositories import JSONFileKeyValueStore, MemoryKeyValueStore


@pytest.fixture(params=['memory', 'json'])
def kv(request, tmp_path):
    if request.param == 'memory':
        s = MemoryKeyValueStore()
    else:
        s = JSONFileKeyValueStore(str(tmp_path / 'data' / 'store.json'))
    yield s
    s.close()


def test_set_get_delete(kv):
    assert kv.get('product:1') is None
    kv.set('product:1', {'name': 'Martillo'})
    assert kv.get('product:1') == {'name': 'Martillo'}
    assert kv.delete('product:1') is True
    assert kv.delete('product:1') is False
    assert kv.get('product:1') is None


def test_prefijos_ordenados_por_clave(kv):
    kv.mset({'sale:b': 2, 'product:2': 'b', 'product:1': 'a', 'user:1': 'u'})
    assert kv.keys('product:') == ['product:1', 'product:2']
    assert kv.get_by_prefix('product:') == ['a', 'b']
    assert kv.mget(['product:1', 'nada', 'sale:b']) == ['a', None, 2]


def test_mdel_cuenta_solo_claves_existentes(kv):
    kv.mset({'a': 1, 'b': 2})
    assert kv.mdel(['a', 'b', 'c']) == 2
    assert kv.keys() == []


def test_los_valores_no_comparten_referencias(kv):
    value = {'items': [1, 2]}
    kv.set('k', value)
    value['items'].append(3)
    leido = kv.get('k')
    leido['items'].append(99)
    assert kv.get('k') == {'items': [1, 2]}


def test_compare_and_swap(kv):
    # None = la clave no debe existir
    assert kv.compare_and_swap('k', None, {'stock': 5}) is True
    assert kv.compare_and_swap('k', None, {'stock': 1}) is False
    assert kv.compare_and_swap('k', {'stock': 4}, {'stock': 1}) is False
    assert kv.compare_and_swap('k', {'stock': 5}, {'stock': 2}) is True
    assert kv.get('k') == {'stock': 2}


def test_almacen_cerrado_rechaza_operaciones(kv):
    kv.close()
    assert kv.closed
    with pytest.raises(UpstreamError):
        kv.get('k')
    with pytest.raises(UpstreamError):
        kv.set('k', 1)


def test_valor_no_serializable(kv):
    with pytest.raises(UpstreamError):
        kv.set('k', object())
    assert kv.get('k') is None


def test_archivo_json_persiste_entre_instancias(tmp_path):
    path = str(tmp_path / 'store.json')
    first = JSONFileKeyValueStore(path)
    first.set('product:1', {'name': 'Taladro'})
    first.close()

    second = JSONFileKeyValueStore(path)
    assert second.get('product:1') == {'name': 'Taladro'}
    with open(path, encoding='utf-8') as f:
        assert json.load(f) == {'product:1': {'name': 'Taladro'}}
    assert not (tmp_path / 'store.json.tmp').exists()


def test_archivo_json_corrupto(tmp_path):
    path = tmp_path / 'store.json'
    path.write_text('{no es json', encoding='utf-8')
    s = JSONFileKeyValueStore(str(path))
    with pytest.raises(UpstreamError, match='No se pudo leer'):
        s.get('k')


def test_archivo_json_que_no_es_objeto(tmp_path):
    path = tmp_path / 'store.json'
    path.write_text('[1, 2]', encoding='utf-8')
    s = JSONFileKeyValueStore(str(path))
    with pytest.raises(UpstreamError, match='Formato inválido'):
        s.keys()


def test_memoria_con_datos_iniciales():
    s = MemoryKeyValueStore({'product:1': {'stock': 3}})
    assert s.get('product:1') == {'stock': 3}
