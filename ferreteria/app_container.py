# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Este módulo proporciona una forma centralizada de obtener instancias
# de repositorios y servicios. Facilita:
#   - Inyección de dependencias
#   - Testing (cada test arma su propio contenedor en memoria)
#   - Cambiar de almacén sin tocar servicios
#
# El contenedor NO es global: create_app() construye uno por aplicación y
# lo guarda en app.extensions['ferreteria']. Al apagar el proceso se llama
# a close() (ver wsgi.py), que libera el almacén.
#
# CAMBIAR DE ALMACÉN:
#   FERRETERIA_STORE_BACKEND=memory  → todo en memoria (se pierde al reiniciar)
#   FERRETERIA_STORE_BACKEND=json    → un archivo JSON en DATA_PATH
# Para un almacén hospedado basta con otra implementación de IKeyValueStore.
# ==============================================================================

import logging
from typing import Optional

from ferreteria.config import Config
from ferreteria.exceptions import UpstreamError

# ═══════════════════════════════════════════════════════════════════════════════
# REPOSITORIOS - Capa de persistencia
# ═══════════════════════════════════════════════════════════════════════════════
from ferreteria.repositories import (
    IKeyValueStore,
    JSONFileKeyValueStore,
    MemoryKeyValueStore,
    ProductRepository,
    SaleRepository,
    UserRepository,
)

# ═══════════════════════════════════════════════════════════════════════════════
# SERVICIOS - Capa de lógica de negocio
# ═══════════════════════════════════════════════════════════════════════════════
from ferreteria.services import ProductService, SalesService, UserService

logger = logging.getLogger(__name__)


def _config_value(config, name):
    """Lee un valor de un dict (app.config) o de una clase Config."""
    if isinstance(config, dict):
        return config.get(name, getattr(Config, name))
    return getattr(config, name, getattr(Config, name))


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Construye de forma perezosa una única instancia de cada repositorio
    y servicio por contenedor.

    Uso:
        container = AppContainer(TestingConfig)
        sales_service = container.sales_service
        ...
        container.close()
    """

    def __init__(self, config=Config, store: Optional[IKeyValueStore] = None):
        """
        Inicializa el contenedor.

        Args:
            config: Clase Config o dict (app.config) con STORE_BACKEND, DATA_PATH...
            store: Almacén ya construido (opcional, útil para tests)
        """
        self._config = config
        self._closed = False

        # Almacén (lazy loading salvo que venga inyectado)
        self._store: Optional[IKeyValueStore] = store

        # Repositorios (lazy loading)
        self._product_repo: Optional[ProductRepository] = None
        self._sale_repo: Optional[SaleRepository] = None
        self._user_repo: Optional[UserRepository] = None

        # Servicios (lazy loading)
        self._product_service: Optional[ProductService] = None
        self._sales_service: Optional[SalesService] = None
        self._user_service: Optional[UserService] = None

    # =========================================================================
    # ALMACÉN
    # =========================================================================

    @property
    def store(self) -> IKeyValueStore:
        """Almacén clave-valor según STORE_BACKEND."""
        if self._closed:
            raise UpstreamError('El contenedor de la aplicación está cerrado')
        if self._store is None:
            backend = _config_value(self._config, 'STORE_BACKEND')
            if backend == 'memory':
                self._store = MemoryKeyValueStore()
            elif backend == 'json':
                path = _config_value(self._config, 'DATA_PATH')
                if not path:
                    raise UpstreamError('DATA_PATH es obligatorio con STORE_BACKEND=json')
                self._store = JSONFileKeyValueStore(path)
            else:
                raise UpstreamError(f"STORE_BACKEND desconocido: {backend!r}")
            logger.info("Almacén inicializado: %s", backend)
        return self._store

    # =========================================================================
    # REPOSITORIOS
    # =========================================================================

    @property
    def product_repo(self) -> ProductRepository:
        """Repositorio de productos."""
        if self._product_repo is None:
            self._product_repo = ProductRepository(self.store)
        return self._product_repo

    @property
    def sale_repo(self) -> SaleRepository:
        """Libro de ventas."""
        if self._sale_repo is None:
            self._sale_repo = SaleRepository(self.store)
        return self._sale_repo

    @property
    def user_repo(self) -> UserRepository:
        """Repositorio de usuarios y sesiones."""
        if self._user_repo is None:
            self._user_repo = UserRepository(self.store)
        return self._user_repo

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def product_service(self) -> ProductService:
        """Servicio de catálogo."""
        if self._product_service is None:
            self._product_service = ProductService(self.product_repo)
        return self._product_service

    @property
    def sales_service(self) -> SalesService:
        """Servicio de ventas (checkout)."""
        if self._sales_service is None:
            self._sales_service = SalesService(self.product_repo, self.sale_repo)
        return self._sales_service

    @property
    def user_service(self) -> UserService:
        """Servicio de identidad."""
        if self._user_service is None:
            self._user_service = UserService(
                self.user_repo,
                token_ttl_seconds=int(_config_value(self._config, 'TOKEN_TTL_SECONDS'))
            )
        return self._user_service

    # =========================================================================
    # CICLO DE VIDA
    # =========================================================================

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """
        Libera el almacén y descarta repositorios y servicios.
        Llamarlo más de una vez no tiene efecto.
        """
        if self._closed:
            return
        if self._store is not None:
            self._store.close()
            logger.info("Almacén cerrado")
        self._store = None
        self._product_repo = None
        self._sale_repo = None
        self._user_repo = None
        self._product_service = None
        self._sales_service = None
        self._user_service = None
        self._closed = True
