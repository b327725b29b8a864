# ==============================================================================
# CATÁLOGO INICIAL
# ==============================================================================
# Productos que se cargan con "reinicializar catálogo" y con la carga de
# datos de ejemplo. Precios en soles.
# ==============================================================================

SEED_PRODUCTS = [
    # Herramientas
    {
        'name': 'Martillo de Acero',
        'description': 'Martillo profesional con mango de fibra de vidrio',
        'price': 25.99,
        'unit': 'unidad',
        'category': 'Herramientas',
        'stock': 50,
        'imageUrl': 'https://images.unsplash.com/photo-1504148455328-c376907d081c?w=400',
    },
    {
        'name': 'Destornillador Set',
        'description': 'Juego de 6 destornilladores de precisión',
        'price': 15.50,
        'unit': 'set',
        'category': 'Herramientas',
        'stock': 30,
        'imageUrl': 'https://images.unsplash.com/photo-1530124566582-a618bc2615dc?w=400',
    },
    {
        'name': 'Alicate Universal 8"',
        'description': 'Alicate de acero al cromo vanadio con mango aislado',
        'price': 18.90,
        'unit': 'unidad',
        'category': 'Herramientas',
        'stock': 35,
    },
    # Herramientas eléctricas
    {
        'name': 'Taladro Eléctrico',
        'description': 'Taladro eléctrico 750W con velocidad variable',
        'price': 89.99,
        'unit': 'unidad',
        'category': 'Herramientas Eléctricas',
        'stock': 15,
        'imageUrl': 'https://images.unsplash.com/photo-1572981779307-38b8cabb2407?w=400',
    },
    {
        'name': 'Amoladora Angular 4 1/2"',
        'description': 'Amoladora 850W con disco de corte incluido',
        'price': 129.00,
        'unit': 'unidad',
        'category': 'Herramientas Eléctricas',
        'stock': 10,
    },
    # Fijaciones
    {
        'name': 'Tornillos Galvanizados',
        'description': 'Tornillos galvanizados 3/4 pulgada',
        'price': 8.99,
        'unit': 'caja (100 unidades)',
        'category': 'Fijaciones',
        'stock': 100,
        'imageUrl': 'https://images.unsplash.com/photo-1565193566173-7a0ee3dbe261?w=400',
    },
    {
        'name': 'Clavos de Acero 2"',
        'description': 'Clavos para concreto con cabeza plana',
        'price': 6.50,
        'unit': 'kg',
        'category': 'Fijaciones',
        'stock': 80,
    },
    {
        'name': 'Tarugos Plásticos 1/4"',
        'description': 'Tarugos para pared de ladrillo y concreto',
        'price': 4.20,
        'unit': 'bolsa (50 unidades)',
        'category': 'Fijaciones',
        'stock': 120,
    },
    # Pinturas
    {
        'name': 'Pintura Interior Blanca',
        'description': 'Pintura látex lavable para interiores',
        'price': 45.00,
        'unit': 'galón',
        'category': 'Pinturas',
        'stock': 25,
        'imageUrl': 'https://images.unsplash.com/photo-1589939705384-5185137a7f0f?w=400',
    },
    {
        'name': 'Brocha de Cerda 3"',
        'description': 'Brocha con cerdas naturales para esmaltes y látex',
        'price': 7.90,
        'unit': 'unidad',
        'category': 'Pinturas',
        'stock': 60,
    },
    # Medición
    {
        'name': 'Cinta Métrica 5m',
        'description': 'Cinta métrica profesional con freno automático',
        'price': 12.50,
        'unit': 'unidad',
        'category': 'Medición',
        'stock': 40,
        'imageUrl': 'https://images.unsplash.com/photo-1625225233840-695456021cde?w=400',
    },
    {
        'name': 'Nivel de Burbuja 24"',
        'description': 'Nivel de aluminio con tres burbujas',
        'price': 22.00,
        'unit': 'unidad',
        'category': 'Medición',
        'stock': 20,
    },
    # Plomería
    {
        'name': 'Tubo PVC 1/2" x 5m',
        'description': 'Tubo de PVC para agua fría a presión',
        'price': 9.80,
        'unit': 'unidad',
        'category': 'Plomería',
        'stock': 70,
    },
    {
        'name': 'Cinta Teflón',
        'description': 'Cinta selladora para roscas de 3/4"',
        'price': 1.50,
        'unit': 'rollo',
        'category': 'Plomería',
        'stock': 200,
    },
    # Electricidad
    {
        'name': 'Cable Eléctrico 14 AWG',
        'description': 'Cable de cobre THW para instalaciones domiciliarias',
        'price': 98.00,
        'unit': 'rollo (100 m)',
        'category': 'Electricidad',
        'stock': 12,
    },
    {
        'name': 'Interruptor Simple',
        'description': 'Interruptor de empotrar 10A con placa',
        'price': 5.90,
        'unit': 'unidad',
        'category': 'Electricidad',
        'stock': 90,
    },
]
