"""
Logbook core - situation-aware action logging with position reconciliation

Packages:
- models: pydantic domain models and settings
- utils: geo math and lookup helpers
- services: situation derivation, log queue, instance logging, reconciliation pipeline
- tools: store, position source, sensor feed and operator channel adapters
- actions: action catalog, handlers and runtime
"""

__version__ = "0.3.0"
