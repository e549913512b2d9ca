"""Errores del dominio.

Por qué una jerarquía propia:
- Separa fallos de validación local (identificadores, JSON de registros) de
  los fallos remotos, que nunca se lanzan: viajan dentro de un `Envelope`.
- Heredar de `ValueError` mantiene compatibilidad con validadores de Pydantic.
"""

from __future__ import annotations


class ClientError(Exception):
    """Base de todos los errores lanzados por la librería."""


class IdentifierError(ClientError, ValueError):
    """Texto inválido para un identificador (vacío o solo espacios)."""


class FormatError(ClientError, ValueError):
    """JSON de un registro de dominio incompleto o malformado."""


class OperationCancelledError(ClientError):
    """La operación remota fue cancelada antes de completarse."""
