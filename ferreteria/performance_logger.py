# ==============================================================================
# SISTEMA DE PROFILING INTERNO
# ==============================================================================
# Mide rendimiento de rutas y funciones sin afectar la experiencia del usuario.
# Guarda logs legibles en LOGS_DIR para análisis humano:
#   - performance.log     → cada petición con su tiempo
#   - slow_routes.log     → peticiones que superan los umbrales
#   - slow_functions.log  → funciones decoradas que superan los umbrales
#
# ACTIVAR/DESACTIVAR: ENABLE_PROFILING en la configuración de la app
# ==============================================================================

import logging
import os
import threading
import time
from collections import defaultdict
from functools import wraps

# ═══════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════

# Umbrales de tiempo (en milisegundos)
THRESHOLD_WARNING = 300   # Advertencia si supera 300ms
THRESHOLD_CRITICAL = 700  # Crítico si supera 700ms

PERFORMANCE_LOG = 'performance.log'
SLOW_ROUTES_LOG = 'slow_routes.log'
SLOW_FUNCTIONS_LOG = 'slow_functions.log'

performance_logger = logging.getLogger('ferreteria.performance')
slow_routes_logger = logging.getLogger('ferreteria.performance.routes')
slow_functions_logger = logging.getLogger('ferreteria.performance.functions')

# Mapeo de rutas a nombres legibles (para logs más humanos)
ROUTE_NAMES = {
    # Catálogo
    'GET /products': 'Ver catálogo',
    'GET /products/<product_id>': 'Ver producto',
    'GET /categories': 'Ver categorías',
    'POST /products': 'Crear producto',
    'PUT /products/<product_id>': 'Editar producto',
    'DELETE /products/<product_id>': 'Eliminar producto',
    'POST /reset-products': 'Reinicializar catálogo',
    'POST /init-sample-data': 'Cargar datos de ejemplo',

    # Ventas
    'POST /sales': 'Confirmar compra',
    'GET /sales': 'Ver historial de ventas',
    'GET /sales/<sale_id>': 'Ver venta',

    # Autenticación
    'POST /signup': 'Crear cuenta',
    'POST /login': 'Iniciar sesión',
    'POST /logout': 'Cerrar sesión',
    'GET /me': 'Ver perfil',
}


# ═══════════════════════════════════════════════════════════════════════════
# ESTADÍSTICAS DE FUNCIONES (en memoria)
# ═══════════════════════════════════════════════════════════════════════════

# Estructura: {nombre_funcion: {calls: int, total_time: float, max_time: float}}
_function_stats = defaultdict(lambda: {'calls': 0, 'total_time': 0.0, 'max_time': 0.0})
_stats_lock = threading.Lock()


# ═══════════════════════════════════════════════════════════════════════════
# ARCHIVOS DE LOG
# ═══════════════════════════════════════════════════════════════════════════

def _attach_file_handler(logger, path):
    """Agrega un FileHandler al logger (una sola vez por archivo)."""
    target = os.path.abspath(path)
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return
    handler = logging.FileHandler(target, encoding='utf-8')
    handler.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False


def configure_log_files(logs_dir):
    """Crea el directorio de logs y conecta los tres archivos."""
    os.makedirs(logs_dir, exist_ok=True)
    _attach_file_handler(performance_logger, os.path.join(logs_dir, PERFORMANCE_LOG))
    _attach_file_handler(slow_routes_logger, os.path.join(logs_dir, SLOW_ROUTES_LOG))
    _attach_file_handler(slow_functions_logger, os.path.join(logs_dir, SLOW_FUNCTIONS_LOG))


def _get_route_name(method, rule):
    """Nombre legible de una ruta, o la ruta cruda si no está mapeada."""
    return ROUTE_NAMES.get(f"{method} {rule}", f"{method} {rule}")


# ═══════════════════════════════════════════════════════════════════════════
# 1️⃣ PROFILING DE RUTAS
# ═══════════════════════════════════════════════════════════════════════════

def log_route_performance(method, path, rule, time_ms, user=None):
    """
    Registra el rendimiento de una ruta en performance.log

    Args:
        method: GET, POST, etc.
        path: Ruta solicitada (/api/sales)
        rule: Regla sin prefijo (/sales)
        time_ms: Tiempo en milisegundos
        user: Usuario que hizo la petición (opcional)
    """
    performance_logger.info(
        "[PERFORMANCE] %s | %s | Usuario: %s | %s %s | %.0f ms",
        time.strftime('%Y-%m-%d %H:%M:%S'), _get_route_name(method, rule),
        user or 'invitado', method, path, time_ms
    )


def log_slow_route(method, path, rule, time_ms, user=None, level='WARNING'):
    """
    Registra una ruta lenta en slow_routes.log

    Args:
        level: 'WARNING' (>300ms) o 'CRITICAL' (>700ms)
    """
    severity = 'LENTA' if level == 'WARNING' else 'MUY LENTA'
    threshold = THRESHOLD_WARNING if level == 'WARNING' else THRESHOLD_CRITICAL
    slow_routes_logger.log(
        logging.WARNING if level == 'WARNING' else logging.CRITICAL,
        "[%s] %s | Ruta %s: %s | Usuario: %s | %s %s | %.0f ms (umbral: %d ms)",
        level, time.strftime('%Y-%m-%d %H:%M:%S'), severity,
        _get_route_name(method, rule), user or 'invitado', method, path, time_ms, threshold
    )


def init_profiling(app, url_prefix=''):
    """
    Inicializa el profiling en una app Flask.
    Registra hooks before_request y after_request.

    Uso:
        init_profiling(app, url_prefix='/api')
    """
    if not app.config.get('ENABLE_PROFILING', True):
        return

    configure_log_files(app.config['LOGS_DIR'])

    @app.before_request
    def _start_timer():
        from flask import g
        g.start_time = time.perf_counter()

    @app.after_request
    def _log_request(response):
        from flask import g, request

        if not hasattr(g, 'start_time'):
            return response

        elapsed = (time.perf_counter() - g.start_time) * 1000  # ms

        method = request.method
        path = request.path
        rule = str(request.url_rule) if request.url_rule else path
        if url_prefix and rule.startswith(url_prefix):
            rule = rule[len(url_prefix):] or '/'
        current_user = g.get('current_user')
        user = current_user.email if current_user else None

        log_route_performance(method, path, rule, elapsed, user)

        if elapsed >= THRESHOLD_CRITICAL:
            log_slow_route(method, path, rule, elapsed, user, 'CRITICAL')
        elif elapsed >= THRESHOLD_WARNING:
            log_slow_route(method, path, rule, elapsed, user, 'WARNING')

        return response


# ═══════════════════════════════════════════════════════════════════════════
# 2️⃣ DECORADOR PARA FUNCIONES CLAVE
# ═══════════════════════════════════════════════════════════════════════════

def profile_function(func=None, name=None):
    """
    Decorador para medir rendimiento de funciones críticas.

    Uso:
        @profile_function
        def mi_funcion():
            ...

        @profile_function(name="Procesar checkout")
        def checkout():
            ...

    Registra cantidad de llamadas, tiempo promedio y tiempo máximo.
    """
    def decorator(fn):
        func_name = name or fn.__name__

        @wraps(fn)
        def wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                return fn(*args, **kwargs)
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000

                with _stats_lock:
                    stats = _function_stats[func_name]
                    stats['calls'] += 1
                    stats['total_time'] += elapsed_ms
                    if elapsed_ms > stats['max_time']:
                        stats['max_time'] = elapsed_ms

                if elapsed_ms >= THRESHOLD_WARNING:
                    _log_slow_function_call(func_name, elapsed_ms)

        return wrapper

    # Permitir uso sin paréntesis: @profile_function
    if func is not None:
        return decorator(func)
    return decorator


def _log_slow_function_call(func_name, time_ms):
    """Registra una llamada lenta a una función"""
    critical = time_ms >= THRESHOLD_CRITICAL
    slow_functions_logger.log(
        logging.CRITICAL if critical else logging.WARNING,
        "[%s] %s | Función: %s | %.0f ms",
        'CRÍTICO' if critical else 'LENTO', time.strftime('%Y-%m-%d %H:%M:%S'),
        func_name, time_ms
    )


# ═══════════════════════════════════════════════════════════════════════════
# 3️⃣ REPORTE DE ESTADÍSTICAS
# ═══════════════════════════════════════════════════════════════════════════

def get_function_stats():
    """
    Obtiene estadísticas de todas las funciones perfiladas.

    Returns:
        dict: {nombre: {calls, avg_time, max_time}}
    """
    with _stats_lock:
        result = {}
        for func_name, stats in _function_stats.items():
            calls = stats['calls']
            avg = stats['total_time'] / calls if calls > 0 else 0
            result[func_name] = {
                'calls': calls,
                'avg_time': round(avg, 2),
                'max_time': round(stats['max_time'], 2)
            }
        return result


def reset_stats():
    """Reinicia todas las estadísticas (útil para testing)"""
    with _stats_lock:
        _function_stats.clear()


__all__ = [
    'init_profiling',
    'configure_log_files',
    'profile_function',
    'get_function_stats',
    'reset_stats',
]
