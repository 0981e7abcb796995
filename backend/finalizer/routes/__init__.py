# Routes package init
"""
Finalizer: Demo Server Routes
===============================

Route Inventory:
    - health.py:  GET /health   (liveness probe)

The package is a library layer; these routes only exist so the demo server
in `finalizer.main` has something to answer.
"""
