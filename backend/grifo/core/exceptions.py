"""
Exceções customizadas da aplicação.

Define hierarquia de exceções para tratamento consistente de erros.
"""

from typing import Any
from uuid import UUID


class GrifoException(Exception):
    """Exceção base do Grifo."""

    def __init__(
        self,
        message: str,
        code: str = "GRIFO_ERROR",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


# === Exceções de Autenticação ===

class AuthenticationError(GrifoException):
    """Erro de autenticação."""

    def __init__(self, message: str = "Credenciais inválidas"):
        super().__init__(message, code="AUTH_ERROR")


class InvalidTokenError(AuthenticationError):
    """Token inválido ou expirado."""

    def __init__(self):
        super().__init__("Token inválido")
        self.code = "INVALID_TOKEN"


class FirebaseAuthError(AuthenticationError):
    """Erro de autenticação Firebase."""

    def __init__(self, message: str = "Erro na autenticação Firebase"):
        super().__init__(message)
        self.code = "FIREBASE_AUTH_ERROR"


# === Exceções de Autorização ===

class AuthorizationError(GrifoException):
    """Erro de autorização/permissão."""

    def __init__(self, message: str = "Acesso negado"):
        super().__init__(message, code="AUTHORIZATION_ERROR")


class InsufficientPermissionsError(AuthorizationError):
    """Usuário não tem permissão para a ação."""

    def __init__(self, action: str):
        super().__init__(f"Permissão insuficiente para: {action}")
        self.code = "INSUFFICIENT_PERMISSIONS"


class TenantAccessError(AuthorizationError):
    """Tentativa de acesso a dados de outra empresa."""

    def __init__(self):
        super().__init__("Acesso negado à empresa solicitada")
        self.code = "TENANT_ACCESS_DENIED"


# === Exceções de Recursos ===

class ResourceNotFoundError(GrifoException):
    """Recurso não encontrado (ou fora do escopo do usuário)."""

    def __init__(
        self,
        resource_type: str,
        resource_id: UUID | str | None = None,
    ):
        message = f"{resource_type} não encontrado"
        if resource_id:
            message = f"{resource_type} com ID {resource_id} não encontrado"
        super().__init__(message, code="NOT_FOUND")
        self.resource_type = resource_type
        self.resource_id = resource_id


class ResourceAlreadyExistsError(GrifoException):
    """Recurso já existe (conflito)."""

    def __init__(
        self,
        resource_type: str,
        field: str,
        value: str,
    ):
        message = f"{resource_type} com {field}='{value}' já existe"
        super().__init__(message, code="ALREADY_EXISTS")
        self.resource_type = resource_type
        self.field = field
        self.value = value


# === Exceções de Validação ===

class ValidationError(GrifoException):
    """Erro de validação de dados."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field
        self.errors = errors or []


# === Exceções de Negócio ===

class BusinessRuleError(GrifoException):
    """Violação de regra de negócio."""

    def __init__(self, message: str, rule: str | None = None):
        super().__init__(message, code="BUSINESS_RULE_VIOLATION")
        self.rule = rule


class TenantInactiveError(BusinessRuleError):
    """Empresa desativada não aceita operações."""

    def __init__(self, empresa_id: UUID):
        super().__init__(
            f"Empresa {empresa_id} está inativa",
            rule="TENANT_INACTIVE",
        )
        self.code = "TENANT_INACTIVE"
        self.empresa_id = empresa_id


class InvalidStatusTransitionError(BusinessRuleError):
    """Transição de status da vistoria não permitida."""

    def __init__(self, vistoria_id: UUID, status_atual: str, acao: str):
        super().__init__(
            f"Não é possível {acao} a vistoria {vistoria_id} com status '{status_atual}'",
            rule="INVALID_STATUS_TRANSITION",
        )
        self.code = "INVALID_STATUS_TRANSITION"
        self.details = {"status_atual": status_atual}


class ContestLinkInvalidError(BusinessRuleError):
    """Link de contestação inválido, expirado ou já utilizado."""

    def __init__(self, message: str = "Token inválido, expirado ou já utilizado"):
        super().__init__(message, rule="INVALID_CONTEST_TOKEN")
        self.code = "INVALID_TOKEN"


# === Exceções de Storage ===

class StorageError(GrifoException):
    """Erro de armazenamento (GCS)."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message, code="STORAGE_ERROR")
        self.operation = operation


class FileUploadError(StorageError):
    """Erro no upload de arquivo."""

    def __init__(self, message: str = "Erro no upload do arquivo"):
        super().__init__(message, operation="upload")
        self.code = "FILE_UPLOAD_ERROR"


class FileTooLargeError(StorageError):
    """Arquivo muito grande."""

    def __init__(self, max_size_mb: int, actual_size_mb: float):
        super().__init__(
            f"Arquivo muito grande. Máximo: {max_size_mb}MB, enviado: {actual_size_mb:.2f}MB",
            operation="upload",
        )
        self.code = "FILE_TOO_LARGE"


class InvalidFileTypeError(StorageError):
    """Tipo de arquivo não permitido."""

    def __init__(self, mime_type: str, allowed_types: list[str]):
        super().__init__(
            f"Tipo de arquivo não permitido: {mime_type}. Permitidos: {', '.join(allowed_types)}",
            operation="upload",
        )
        self.code = "INVALID_FILE_TYPE"


# === Exceções de Integração ===

class UpstreamUnavailableError(GrifoException):
    """Serviço externo indisponível ou degradado."""

    def __init__(self, service: str, message: str):
        super().__init__(f"Erro no serviço {service}: {message}", code="UPSTREAM_UNAVAILABLE")
        self.service = service
