# ==============================================================================
# CONFIGURACIÓN
# ==============================================================================
# Todos los valores se leen de variables de entorno con prefijo FERRETERIA_.
# En producción DEBE definirse al menos la cuenta de administrador:
#   export FERRETERIA_ADMIN_EMAIL="admin@ferreteria.pe"
#   export FERRETERIA_ADMIN_PASSWORD="una_clave_larga"
# ==============================================================================

import os

BASE = os.path.dirname(os.path.abspath(__file__))


def _env(name, default=None):
    return os.environ.get(f"FERRETERIA_{name}", default)


def _env_bool(name, default):
    value = _env(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'si', 'sí', 'on')


def _env_int(name, default):
    try:
        return int(_env(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    """Configuración base (desarrollo y producción)."""

    TESTING = False

    # Almacenamiento: 'json' (archivo en disco) o 'memory' (solo proceso)
    STORE_BACKEND = _env('STORE_BACKEND', 'json')
    DATA_PATH = _env('DATA_PATH', os.path.join(BASE, 'data', 'store.json'))

    # Todas las rutas de la API cuelgan de este prefijo
    API_PREFIX = _env('API_PREFIX', '/api')

    # Vigencia de cada token de sesión (24 horas)
    TOKEN_TTL_SECONDS = _env_int('TOKEN_TTL_SECONDS', 86400)

    # Administrador inicial (se crea al arrancar si no existe)
    ADMIN_EMAIL = _env('ADMIN_EMAIL')
    ADMIN_PASSWORD = _env('ADMIN_PASSWORD')
    ADMIN_NAME = _env('ADMIN_NAME', 'Administrador')

    # Origen permitido para el cliente web
    CORS_ORIGIN = _env('CORS_ORIGIN', '*')

    # Logging y profiling
    LOG_LEVEL = _env('LOG_LEVEL', 'INFO')
    ENABLE_PROFILING = _env_bool('ENABLE_PROFILING', True)
    LOGS_DIR = _env('LOGS_DIR', os.path.join(BASE, 'logs'))


class TestingConfig(Config):
    """Configuración para pytest: todo en memoria, sin archivos de log."""

    TESTING = True
    STORE_BACKEND = 'memory'
    DATA_PATH = None
    ENABLE_PROFILING = False
    ADMIN_EMAIL = 'admin@ferreteria.pe'
    ADMIN_PASSWORD = 'admin1234'
    ADMIN_NAME = 'Admin Pruebas'
    LOG_LEVEL = 'DEBUG'
