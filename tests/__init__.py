"""Test suite for ScopeGuard.

- unit/: Unit tests - domain logic, engine and adapters with mocked or
  in-memory collaborators. No database or Redis required.
"""
