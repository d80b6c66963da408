"""Pydantic Schemas: request/response contracts for the REST API.

Invariants:
    - JSON field names are camelCase; request bodies also accept snake_case
    - Schemas never carry ciphertext to the client
"""
