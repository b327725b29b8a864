# -*- coding: utf-8 -*-
"""Constructores de datos para los tests."""


def make_product(product_repo, name='Martillo de Acero', price=25.99, stock=5, **extra):
    fields = {'name': name, 'price': price, 'unit': 'unidad', 'stock': stock}
    fields.update(extra)
    return product_repo.create(fields)


def order_for(*lines, customer='Juan Pérez', method='cash', last_four=None):
    """Arma un pedido a partir de (producto, cantidad) o (producto, cantidad, precio)."""
    items = []
    for line in lines:
        product, quantity = line[0], line[1]
        price = line[2] if len(line) > 2 else product.price
        items.append({
            'id': product.id,
            'name': product.name,
            'price': price,
            'unit': product.unit,
            'quantity': quantity,
        })
    order = {'items': items, 'customerName': customer, 'paymentMethod': method}
    if last_four is not None:
        order['lastFourDigits'] = last_four
    return order


def login(client, email, password):
    """Inicia sesión por la API y devuelve la cabecera Authorization."""
    r = client.post('/api/login', json={'email': email, 'password': password})
    assert r.status_code == 200, r.get_json()
    return {'Authorization': f"Bearer {r.get_json()['accessToken']}"}
