"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- Permite invertir dependencias: los servicios dependen del contrato y los
  tests pasan fakes en lugar de lanzar procesos reales.
"""
