"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- Permite invertir dependencias: la sesión CRUD depende de abstracciones, no de httpx.
"""
