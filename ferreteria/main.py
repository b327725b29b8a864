# ==============================================================================
# API HTTP - Ferretería Total
# ==============================================================================
# Fábrica de la aplicación Flask y rutas JSON.
#
# Las rutas NO contienen lógica de negocio: leen la petición, llaman al
# servicio que corresponde y devuelven el sobre {success: true, ...}.
# Los errores se lanzan como excepciones de ferreteria.exceptions y los
# manejadores registrados abajo arman {success: false, error, details?}.
#
# Autenticación: cabecera "Authorization: Bearer <token>" obtenida en /login.
# ==============================================================================

import logging
from functools import wraps

from flask import Blueprint, Flask, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ferreteria.app_container import AppContainer
from ferreteria.config import Config
from ferreteria.exceptions import (
    AuthenticationError,
    AuthorizationError,
    FerreteriaError,
    ValidationError,
)
from ferreteria.performance_logger import init_profiling

logger = logging.getLogger(__name__)

api = Blueprint('api', __name__)


# ═══════════════════════════════════════════════════════════════════════════
# FÁBRICA DE LA APLICACIÓN
# ═══════════════════════════════════════════════════════════════════════════

def create_app(config_object=None, container: AppContainer = None) -> Flask:
    """
    Crea y configura la aplicación.

    Args:
        config_object: Clase de configuración (por defecto Config)
        container: Contenedor ya construido (por defecto uno nuevo según config)

    Returns:
        Aplicación Flask lista para servir
    """
    app = Flask(__name__)
    app.config.from_object(config_object or Config)

    logging.getLogger('ferreteria').setLevel(app.config['LOG_LEVEL'])

    if container is None:
        container = AppContainer(app.config)
    app.extensions['ferreteria'] = container

    # Administrador inicial
    if app.config.get('ADMIN_EMAIL') and app.config.get('ADMIN_PASSWORD'):
        container.user_service.ensure_admin(
            app.config['ADMIN_EMAIL'],
            app.config['ADMIN_PASSWORD'],
            app.config.get('ADMIN_NAME') or 'Administrador'
        )
    else:
        logger.warning("FERRETERIA_ADMIN_EMAIL/PASSWORD no definidos: no hay administrador inicial")

    prefix = app.config['API_PREFIX']

    # Mide rendimiento de rutas. Logs en LOGS_DIR
    init_profiling(app, url_prefix=prefix)

    app.register_blueprint(api, url_prefix=prefix)
    _register_error_handlers(app)

    @app.after_request
    def set_security_headers(response):
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
        response.headers['Cache-Control'] = 'no-store'
        # NOTA: HSTS solo con HTTPS real
        if request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        # CORS: el cliente web se sirve desde otro origen
        response.headers['Access-Control-Allow-Origin'] = app.config['CORS_ORIGIN']
        response.headers['Access-Control-Allow-Headers'] = 'Authorization, Content-Type'
        response.headers['Access-Control-Allow-Methods'] = 'GET, POST, PUT, DELETE, OPTIONS'
        return response

    logger.info("Aplicación iniciada con prefijo %s", prefix)
    return app


def _register_error_handlers(app: Flask) -> None:
    """Convierte toda excepción en el sobre JSON de error."""

    @app.errorhandler(FerreteriaError)
    def handle_ferreteria_error(e: FerreteriaError):
        if e.status_code >= 500:
            logger.error("Error del almacenamiento: %s", e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({'success': False, 'error': e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        logger.exception("Error no controlado en %s %s", request.method, request.path)
        return jsonify({'success': False, 'error': str(e) or 'Error interno del servidor'}), 500


# ═══════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def get_container() -> AppContainer:
    return current_app.extensions['ferreteria']


def _bearer_token():
    """Token de la cabecera Authorization, o None si no viene."""
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token.strip():
        return None
    return token.strip()


def _json_body():
    """Cuerpo JSON de la petición. Debe ser un objeto."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('El cuerpo de la petición debe ser un objeto JSON')
    return data


def _current_email():
    user = g.get('current_user')
    return user.email if user else None


# ═══════════════════════════════════════════════════════════════════════════
# DECORADORES DE AUTORIZACIÓN
# ═══════════════════════════════════════════════════════════════════════════

def login_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        token = _bearer_token()
        g.current_user = get_container().user_service.resolve_token(token)
        g.token = token
        return f(*args, **kwargs)
    return wrapper


def admin_required(f):
    @wraps(f)
    @login_required
    def wrapper(*args, **kwargs):
        if not g.current_user.is_admin():
            raise AuthorizationError('Se requieren permisos de administrador')
        return f(*args, **kwargs)
    return wrapper


# ═══════════════════════════════════════════════════════════════════════════
# CATÁLOGO
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/products', methods=['GET'])
def list_products():
    """Catálogo completo. Filtros opcionales ?q= y ?category="""
    products = get_container().product_service.list_products(
        query=request.args.get('q'),
        category=request.args.get('category')
    )
    return jsonify({'success': True, 'products': [p.to_dict() for p in products]})


@api.route('/products/<product_id>', methods=['GET'])
def get_product(product_id):
    product = get_container().product_service.get_product(product_id)
    return jsonify({'success': True, 'product': product.to_dict()})


@api.route('/categories', methods=['GET'])
def list_categories():
    categories = get_container().product_service.list_categories()
    return jsonify({'success': True, 'categories': categories})


@api.route('/products', methods=['POST'])
@admin_required
def create_product():
    product = get_container().product_service.create_product(_json_body(), user=_current_email())
    return jsonify({'success': True, 'product': product.to_dict()})


@api.route('/products/<product_id>', methods=['PUT'])
@admin_required
def update_product(product_id):
    product = get_container().product_service.update_product(
        product_id, _json_body(), user=_current_email()
    )
    return jsonify({'success': True, 'product': product.to_dict()})


@api.route('/products/<product_id>', methods=['DELETE'])
@admin_required
def delete_product(product_id):
    get_container().product_service.delete_product(product_id, user=_current_email())
    return jsonify({'success': True})


@api.route('/reset-products', methods=['POST'])
@admin_required
def reset_products():
    """Borra el catálogo y carga el catálogo inicial."""
    count = get_container().product_service.reset_catalog(user=_current_email())
    return jsonify({'success': True, 'count': count})


@api.route('/init-sample-data', methods=['POST'])
@admin_required
def init_sample_data():
    """Carga el catálogo inicial solo si está vacío."""
    result = get_container().product_service.init_sample_data()
    return jsonify({'success': True, **result})


# ═══════════════════════════════════════════════════════════════════════════
# VENTAS
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/sales', methods=['POST'])
def create_sale():
    """Checkout de invitado: no requiere sesión."""
    sale = get_container().sales_service.checkout(_json_body())
    return jsonify({'success': True, 'sale': sale.to_dict()})


@api.route('/sales', methods=['GET'])
@admin_required
def list_sales():
    sales = get_container().sales_service.list_sales()
    return jsonify({'success': True, 'sales': [s.to_dict() for s in sales]})


@api.route('/sales/<sale_id>', methods=['GET'])
def get_sale(sale_id):
    sale = get_container().sales_service.get_sale(sale_id)
    return jsonify({'success': True, 'sale': sale.to_dict()})


# ═══════════════════════════════════════════════════════════════════════════
# AUTENTICACIÓN
# ═══════════════════════════════════════════════════════════════════════════

@api.route('/signup', methods=['POST'])
def signup():
    """
    Registro público. Si viene un token de sesión válido, se usa para
    decidir si se puede crear un administrador. Un token desconocido (por
    ejemplo la clave pública del cliente web) se ignora: el registro sigue
    como invitado y pedir rol admin termina en 403.
    """
    data = _json_body()
    user_service = get_container().user_service

    acting_user = None
    token = _bearer_token()
    if token:
        try:
            acting_user = user_service.resolve_token(token)
        except AuthenticationError:
            logger.debug("Token no reconocido en /signup, se registra como invitado")
        else:
            g.current_user = acting_user

    user = user_service.signup(
        data.get('email'),
        data.get('password'),
        data.get('name'),
        role=data.get('role'),
        acting_user=acting_user
    )
    return jsonify({'success': True, 'user': user.to_public_dict()})


@api.route('/login', methods=['POST'])
def login():
    data = _json_body()
    result = get_container().user_service.authenticate(data.get('email'), data.get('password'))
    return jsonify({'success': True, **result})


@api.route('/logout', methods=['POST'])
@login_required
def logout():
    get_container().user_service.logout(g.token)
    return jsonify({'success': True})


@api.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify({'success': True, 'user': g.current_user.to_public_dict()})


@api.route('/health', methods=['GET'])
def health():
    return jsonify({'success': True, 'status': 'ok'})
