"""Modelos y entidades del dominio.

Por qué:
- Identificadores tipados, registros inmutables (Pydantic v2) y el `Envelope`
  que representa el resultado de cada operación remota.
- El dominio no conoce httpx ni la CLI: solo el contrato `RawResponse`.
"""
