"""
Integração com Firebase Authentication.

Provedor de identidade: valida tokens, consulta usuários e espelha
papel/empresa nos custom claims.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

import structlog
from firebase_admin import auth, credentials, initialize_app
from firebase_admin.exceptions import FirebaseError

from grifo.core.config import settings
from grifo.core.exceptions import FirebaseAuthError, InvalidTokenError

logger = structlog.get_logger()

# Inicialização do Firebase Admin SDK
_firebase_app = None


def get_firebase_app():
    """Inicializa Firebase Admin SDK sob demanda."""
    global _firebase_app

    if _firebase_app is None:
        try:
            # Em produção, usa ADC (Application Default Credentials)
            if settings.FIREBASE_CREDENTIALS_PATH:
                cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
                _firebase_app = initialize_app(cred)
            else:
                _firebase_app = initialize_app()

            logger.info("Firebase Admin SDK inicializado")
        except (ValueError, OSError, FirebaseError) as e:
            logger.error("Erro ao inicializar Firebase Admin", error=str(e))
            raise FirebaseAuthError(f"Erro ao inicializar Firebase: {str(e)}")

    return _firebase_app


@dataclass(frozen=True)
class IdentidadeExterna:
    """Usuário conforme o provedor de identidade."""

    uid: str
    email: str | None = None
    nome: str | None = None
    claims: dict[str, Any] = field(default_factory=dict)


class IdentityProvider(Protocol):
    """Contrato mínimo que o gate e a atribuição de papéis exigem."""

    async def resolve(self, token: str) -> IdentidadeExterna: ...

    async def get_user(self, uid: str) -> IdentidadeExterna | None: ...

    async def update_claims(self, uid: str, claims: dict[str, Any]) -> None: ...


class FirebaseAuthService:
    """
    Serviço de autenticação com Firebase.

    Valida tokens ID do Firebase e gerencia custom claims.
    """

    def __init__(self):
        self._app = None

    @property
    def app(self):
        """Inicializa app sob demanda."""
        if self._app is None:
            self._app = get_firebase_app()
        return self._app

    async def resolve(self, token: str) -> IdentidadeExterna:
        """
        Verifica token ID do Firebase.

        Raises:
            InvalidTokenError: Token inválido ou expirado
        """
        try:
            _ = self.app

            decoded = auth.verify_id_token(token)

            logger.debug(
                "Token Firebase verificado",
                uid=decoded.get("uid"),
                email=decoded.get("email"),
            )

            return IdentidadeExterna(
                uid=decoded["uid"],
                email=decoded.get("email"),
                nome=decoded.get("name"),
                claims={k: decoded[k] for k in ("role", "empresa_id") if k in decoded},
            )

        except auth.ExpiredIdTokenError:
            logger.warning("Token Firebase expirado")
            raise InvalidTokenError()
        except (auth.InvalidIdTokenError, ValueError) as e:
            logger.warning("Token Firebase inválido", error=str(e))
            raise InvalidTokenError()
        except FirebaseError as e:
            logger.error("Erro Firebase", error=str(e))
            raise FirebaseAuthError(str(e))

    async def get_user(self, uid: str) -> IdentidadeExterna | None:
        """Obtém o usuário no Firebase; None se não existir."""
        try:
            _ = self.app
            user = auth.get_user(uid)
        except auth.UserNotFoundError:
            logger.warning("Usuário não encontrado no Firebase", uid=uid)
            return None
        except FirebaseError as e:
            logger.error("Erro ao buscar usuário Firebase", error=str(e))
            raise FirebaseAuthError(str(e))

        return IdentidadeExterna(
            uid=user.uid,
            email=user.email,
            nome=user.display_name,
            claims=dict(user.custom_claims or {}),
        )

    async def update_claims(self, uid: str, claims: dict[str, Any]) -> None:
        """
        Mescla claims no token do usuário.

        Tokens emitidos depois disso já carregam o papel e a empresa novos.
        """
        try:
            _ = self.app
            atuais = dict(auth.get_user(uid).custom_claims or {})
            atuais.update(claims)
            auth.set_custom_user_claims(uid, atuais)
            logger.info("Custom claims definidos", uid=uid, claims=claims)
        except FirebaseError as e:
            logger.error("Erro ao definir custom claims", error=str(e))
            raise FirebaseAuthError(str(e))


# Singleton para uso global
firebase_auth_service = FirebaseAuthService()
