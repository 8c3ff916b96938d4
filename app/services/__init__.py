# app/services/__init__.py
"""Source registry, planning, fan-out, fusion, caching and health monitoring"""

# Import services from their own modules; app.core.hub wires them together
