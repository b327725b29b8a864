# ==============================================================================
# SERVICIO DE USUARIOS (IDENTIDAD)
# ==============================================================================
# Centraliza registro, inicio de sesión y validación de credenciales.
#
# - Las contraseñas se guardan con generate_password_hash (werkzeug)
# - Cada inicio de sesión emite un token bearer con vencimiento
# - Solo un administrador puede crear otro administrador
#
# Estas validaciones se hacen AQUÍ, no en las rutas.
# ==============================================================================

import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ferreteria.exceptions import AuthenticationError, AuthorizationError, ValidationError
from ferreteria.models import User, UserRole
from ferreteria.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UserService:
    """
    Servicio de identidad.

    Responsabilidades:
    - Registro de usuarios (signup)
    - Autenticación y emisión de tokens
    - Resolución de token -> usuario para las rutas protegidas
    - Creación del administrador inicial
    """

    def __init__(
        self,
        user_repo: UserRepository,
        token_ttl_seconds: int = 86400,
        clock: Callable[[], datetime] = _utc_now
    ):
        """
        Args:
            user_repo: Repositorio de usuarios y sesiones
            token_ttl_seconds: Vigencia de cada token
            clock: Fuente de tiempo (inyectable para tests)
        """
        self.user_repo = user_repo
        self.token_ttl = timedelta(seconds=token_ttl_seconds)
        self.clock = clock

    # =========================================================================
    # REGISTRO
    # =========================================================================

    def signup(
        self,
        email: str,
        password: str,
        name: str,
        role: str = None,
        acting_user: Optional[User] = None
    ) -> User:
        """
        Registra un usuario nuevo.

        Args:
            email: Correo (único)
            password: Contraseña en texto plano
            name: Nombre visible
            role: 'user' (por defecto) o 'admin'
            acting_user: Usuario autenticado que hace la petición, si hay

        Returns:
            Usuario creado

        Raises:
            ValidationError: Datos inválidos o correo ya registrado
            AuthorizationError: Si se pide rol admin sin ser administrador
        """
        email = UserRepository.normalize_email(email if isinstance(email, str) else '')
        if '@' not in email or email.startswith('@') or email.endswith('@'):
            raise ValidationError('Correo electrónico inválido')

        if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres"
            )

        name = name.strip() if isinstance(name, str) else ''
        if not name:
            raise ValidationError('El nombre es obligatorio')

        try:
            user_role = UserRole(role or UserRole.USER.value)
        except ValueError:
            raise ValidationError(f"Rol inválido: {role!r}")

        if user_role is UserRole.ADMIN and not (acting_user and acting_user.is_admin()):
            raise AuthorizationError('Solo un administrador puede crear administradores')

        return self._create(email, password, name, user_role)

    def _create(self, email: str, password: str, name: str, role: UserRole) -> User:
        user = User(
            id=str(uuid.uuid4()),
            email=email,
            name=name,
            role=role,
            password_hash=generate_password_hash(password),
            created_at=self.clock().isoformat(),
        )
        if not self.user_repo.create_user(user):
            raise ValidationError('El correo ya está registrado')
        logger.info("Usuario %s registrado con rol %s", email, role.value)
        return user

    def ensure_admin(self, email: str, password: str, name: str = 'Administrador') -> User:
        """
        Crea la cuenta de administrador inicial si no existe.
        Si el correo ya existe con otro rol, lo promueve a admin.
        """
        existing = self.user_repo.get_user_by_email(email)
        if existing is None:
            user = self._create(UserRepository.normalize_email(email), password, name, UserRole.ADMIN)
            logger.info("Administrador inicial creado: %s", user.email)
            return user
        if not existing.is_admin():
            existing.role = UserRole.ADMIN
            self.user_repo.update_user(existing)
            logger.warning("Usuario %s promovido a administrador", existing.email)
        return existing

    # =========================================================================
    # SESIONES
    # =========================================================================

    def authenticate(self, email: str, password: str) -> Dict[str, Any]:
        """
        Verifica credenciales y emite un token.

        Returns:
            Dict {accessToken, expiresAt, user}

        Raises:
            AuthenticationError: Si el correo o la contraseña no coinciden
        """
        user = self.user_repo.get_user_by_email(email if isinstance(email, str) else '')
        if user is None or not isinstance(password, str) \
                or not check_password_hash(user.password_hash, password):
            raise AuthenticationError('Correo o contraseña incorrectos')

        token = secrets.token_urlsafe(32)
        expires_at = (self.clock() + self.token_ttl).isoformat()
        self.user_repo.save_session(token, user.id, expires_at)
        logger.info("Inicio de sesión: %s", user.email)

        return {
            'accessToken': token,
            'expiresAt': expires_at,
            'user': user.to_public_dict(),
        }

    def resolve_token(self, token: str) -> User:
        """
        Obtiene el usuario dueño de un token vigente.

        Raises:
            AuthenticationError: Token desconocido, vencido o de un usuario borrado
        """
        if not token:
            raise AuthenticationError('Se requiere autenticación')

        session = self.user_repo.get_session(token)
        if not session:
            raise AuthenticationError('Token inválido')

        expires_at = datetime.fromisoformat(session['expiresAt'])
        if expires_at <= self.clock():
            self.user_repo.delete_session(token)
            raise AuthenticationError('La sesión ha expirado')

        user = self.user_repo.get_user(session['userId'])
        if user is None:
            raise AuthenticationError('Token inválido')
        return user

    def logout(self, token: str) -> None:
        """Invalida un token."""
        self.user_repo.delete_session(token)
