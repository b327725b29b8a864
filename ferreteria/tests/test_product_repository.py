# -*- coding: utf-8 -*-
"""Tests del repositorio de productos y del servicio de catálogo."""
import pytest

from ferreteria.exceptions import (
    InsufficientStockError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from ferreteria.repositories import MemoryKeyValueStore, ProductRepository
from ferreteria.services import ProductService
from ferreteria.services.catalog_seed import SEED_PRODUCTS
from ferreteria.tests.helpers import make_product


# ═══════════════════════════════════════════════════════════════════════════
# CRUD
# ═══════════════════════════════════════════════════════════════════════════

def test_crear_asigna_id_y_valores_por_defecto(product_repo):
    p = product_repo.create({'name': ' Martillo ', 'price': '25.999', 'unit': 'unidad'})

    assert p.id
    assert p.name == 'Martillo'
    assert p.price == 26.0
    assert p.stock == 0
    assert p.category == 'General'
    assert p.created_at
    assert p.updated_at is None
    assert product_repo.get(p.id) == p


@pytest.mark.parametrize('fields', [
    {'price': 1, 'unit': 'u'},
    {'name': 'X', 'unit': 'u'},
    {'name': 'X', 'price': 1},
    {'name': '  ', 'price': 1, 'unit': 'u'},
])
def test_crear_sin_campos_obligatorios(product_repo, fields):
    with pytest.raises(ValidationError, match='Faltan campos obligatorios'):
        product_repo.create(fields)


@pytest.mark.parametrize('fields', [
    {'price': -1},
    {'price': 'caro'},
    {'price': 'inf'},
    {'price': 1e309},
    {'price': 10 ** 400},
    {'stock': -3},
    {'stock': 2.5},
    {'stock': True},
])
def test_crear_con_numeros_invalidos(product_repo, fields):
    base = {'name': 'X', 'price': 1, 'unit': 'u'}
    base.update(fields)
    with pytest.raises(ValidationError):
        product_repo.create(base)
    assert product_repo.list() == []


def test_listar_ordena_por_nombre(product_repo):
    make_product(product_repo, name='taladro')
    make_product(product_repo, name='Alicate')
    make_product(product_repo, name='Martillo')
    assert [p.name for p in product_repo.list()] == ['Alicate', 'Martillo', 'taladro']


def test_producto_inexistente(product_repo):
    assert product_repo.find('nada') is None
    with pytest.raises(NotFoundError, match='Producto no encontrado'):
        product_repo.get('nada')
    with pytest.raises(NotFoundError):
        product_repo.update('nada', {'price': 1})
    with pytest.raises(NotFoundError):
        product_repo.delete('nada')


def test_actualizar_mezcla_campos_y_conserva_id(product_repo):
    p = make_product(product_repo, price=10, stock=4)

    updated = product_repo.update(p.id, {
        'id': 'otro-id',
        'price': '12.5',
        'description': 'Nuevo',
        'createdAt': 'ayer',
        'color': 'rojo',
    })

    assert updated.id == p.id
    assert updated.price == 12.5
    assert updated.stock == 4
    assert updated.description == 'Nuevo'
    assert updated.created_at == p.created_at
    assert updated.updated_at
    assert product_repo.find('otro-id') is None
    assert 'color' not in product_repo.store.get(f"product:{p.id}")


def test_actualizar_sin_precio_conserva_el_anterior(product_repo):
    p = make_product(product_repo, price=10)
    assert product_repo.update(p.id, {'stock': 8}).price == 10


def test_actualizar_nombre_vacio(product_repo):
    p = make_product(product_repo)
    with pytest.raises(ValidationError, match='name'):
        product_repo.update(p.id, {'name': ''})


def test_borrar(product_repo):
    p = make_product(product_repo)
    product_repo.delete(p.id)
    assert product_repo.find(p.id) is None


# ═══════════════════════════════════════════════════════════════════════════
# Movimientos de stock
# ═══════════════════════════════════════════════════════════════════════════

def test_descontar_y_devolver_stock(product_repo):
    p = make_product(product_repo, stock=5)
    assert product_repo.decrement_stock(p.id, 3).stock == 2
    assert product_repo.increment_stock(p.id, 3).stock == 5


def test_descontar_mas_de_lo_disponible(product_repo):
    p = make_product(product_repo, name='Taladro', stock=2)
    with pytest.raises(InsufficientStockError) as exc:
        product_repo.decrement_stock(p.id, 5)
    assert exc.value.details == {
        'productId': p.id, 'productName': 'Taladro', 'available': 2, 'requested': 5,
    }
    assert product_repo.get(p.id).stock == 2


class AlwaysConflictStore(MemoryKeyValueStore):
    def compare_and_swap(self, key, expected, new):
        return False


def test_contencion_persistente_termina_en_error():
    repo = ProductRepository(AlwaysConflictStore())
    p = make_product(repo, stock=5)
    with pytest.raises(UpstreamError, match='contención'):
        repo.decrement_stock(p.id, 1)


# ═══════════════════════════════════════════════════════════════════════════
# Reinicialización del catálogo
# ═══════════════════════════════════════════════════════════════════════════

def test_reemplazo_masivo(product_repo):
    viejo = make_product(product_repo, name='Viejo')
    count = product_repo.bulk_replace([
        {'name': 'Nuevo 1', 'price': 1, 'unit': 'u'},
        {'name': 'Nuevo 2', 'price': 2, 'unit': 'u', 'stock': 3},
    ])
    assert count == 2
    assert product_repo.find(viejo.id) is None
    assert [p.name for p in product_repo.list()] == ['Nuevo 1', 'Nuevo 2']


def test_reemplazo_masivo_con_datos_invalidos_no_borra_nada(product_repo):
    viejo = make_product(product_repo, name='Viejo')
    with pytest.raises(ValidationError):
        product_repo.bulk_replace([{'name': 'Sin precio', 'unit': 'u'}])
    assert product_repo.find(viejo.id) is not None


class FailingMsetStore(MemoryKeyValueStore):
    def mset(self, items):
        raise UpstreamError('fallo de escritura')


def test_reemplazo_masivo_no_es_atomico():
    # Si la segunda fase falla, el catálogo queda vacío
    repo = ProductRepository(FailingMsetStore())
    make_product(repo, name='Viejo')
    with pytest.raises(UpstreamError):
        repo.bulk_replace([{'name': 'Nuevo', 'price': 1, 'unit': 'u'}])
    assert repo.list() == []


# ═══════════════════════════════════════════════════════════════════════════
# Servicio de catálogo
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def product_service(product_repo):
    return ProductService(product_repo)


def test_busqueda_por_texto_y_categoria(product_service, product_repo):
    make_product(product_repo, name='Martillo de Acero', category='Herramientas',
                 description='Mango ergonómico')
    make_product(product_repo, name='Taladro Eléctrico', category='Herramientas Eléctricas',
                 description='Incluye brocas')
    make_product(product_repo, name='Pintura Blanca', category='Pinturas')

    assert [p.name for p in product_service.list_products(query='MARTILLO')] == ['Martillo de Acero']
    assert [p.name for p in product_service.list_products(query='brocas')] == ['Taladro Eléctrico']
    assert [p.name for p in product_service.list_products(category='Herramientas')] == ['Martillo de Acero']
    assert len(product_service.list_products()) == 3
    assert product_service.list_products(query='pintura', category='Herramientas') == []
    assert product_service.list_categories() == ['Herramientas', 'Herramientas Eléctricas', 'Pinturas']


def test_reset_catalog_carga_catalogo_inicial(product_service, product_repo):
    make_product(product_repo, name='Temporal')
    assert product_service.reset_catalog(user='admin@ferreteria.pe') == len(SEED_PRODUCTS)
    names = {p.name for p in product_repo.list()}
    assert 'Temporal' not in names
    assert 'Martillo de Acero' in names


def test_init_sample_data_solo_si_esta_vacio(product_service, product_repo):
    first = product_service.init_sample_data()
    assert first == {'message': 'Datos de ejemplo cargados', 'count': len(SEED_PRODUCTS)}

    second = product_service.init_sample_data()
    assert second['message'] == 'Los datos ya existen'
    assert len(product_repo.list()) == len(SEED_PRODUCTS)


def test_actualizar_con_precio_infinito(product_repo):
    p = make_product(product_repo, price=10)
    with pytest.raises(ValidationError, match='Precio inválido'):
        product_repo.update(p.id, {'price': 'Infinity'})
    assert product_repo.get(p.id).price == 10
