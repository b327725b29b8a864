# ==============================================================================
# REPOSITORIO DE USUARIOS
# ==============================================================================
# Persistencia del servicio de identidad sobre el almacén clave-valor.
# Esquema de claves:
#   user:<id>              -> {id, email, name, role, password, createdAt}
#   user-email:<email>     -> <id>   (índice único por correo)
#   session:<token>        -> {userId, expiresAt}
# ==============================================================================

from typing import Any, Dict, Optional

from ferreteria.models import User
from ferreteria.repositories.interfaces import IKeyValueStore


class UserRepository:
    """
    Repositorio de usuarios y sesiones.

    La unicidad del correo se garantiza reservando primero la clave del
    índice con compare_and_swap; solo quien gana la reserva escribe el
    usuario.
    """

    USER_PREFIX = 'user:'
    EMAIL_PREFIX = 'user-email:'
    SESSION_PREFIX = 'session:'

    def __init__(self, store: IKeyValueStore):
        self.store = store

    @staticmethod
    def normalize_email(email: str) -> str:
        return (email or '').strip().lower()

    # =========================================================================
    # USUARIOS
    # =========================================================================

    def create_user(self, user: User) -> bool:
        """
        Crea un usuario nuevo.

        Returns:
            False si el correo ya estaba registrado
        """
        email_key = f"{self.EMAIL_PREFIX}{self.normalize_email(user.email)}"
        if not self.store.compare_and_swap(email_key, None, user.id):
            return False
        self.store.set(f"{self.USER_PREFIX}{user.id}", user.to_dict())
        return True

    def get_user(self, user_id: str) -> Optional[User]:
        data = self.store.get(f"{self.USER_PREFIX}{user_id}")
        return User.from_dict(data) if data else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        user_id = self.store.get(f"{self.EMAIL_PREFIX}{self.normalize_email(email)}")
        if not user_id:
            return None
        return self.get_user(user_id)

    def update_user(self, user: User) -> None:
        self.store.set(f"{self.USER_PREFIX}{user.id}", user.to_dict())

    # =========================================================================
    # SESIONES
    # =========================================================================

    def save_session(self, token: str, user_id: str, expires_at: str) -> None:
        self.store.set(
            f"{self.SESSION_PREFIX}{token}",
            {'userId': user_id, 'expiresAt': expires_at}
        )

    def get_session(self, token: str) -> Optional[Dict[str, Any]]:
        return self.store.get(f"{self.SESSION_PREFIX}{token}")

    def delete_session(self, token: str) -> bool:
        return self.store.delete(f"{self.SESSION_PREFIX}{token}")
