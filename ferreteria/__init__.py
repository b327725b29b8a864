# ==============================================================================
# FERRETERÍA TOTAL - Backend de la tienda
# ==============================================================================
# Catálogo, checkout con descuento de stock, libro de ventas y sesiones,
# sobre un almacén clave-valor.
#
# Uso:
#   from ferreteria import create_app
#   app = create_app()
# ==============================================================================

from ferreteria.main import create_app

__all__ = ['create_app']
