"""Modelos y entidades del dominio.

Por qué:
- Aquí viven las estructuras de datos puras (Pydantic v2) y los esquemas
  declarativos de las tablas del portal.
- El dominio no conoce HTTP, HTML ni CLI: solo conceptos del problema.
"""
