# Routes package init
"""
CodeArchive Backend: API Routes Package
========================================

Route Inventory:
    - snippets.py: /api/snippets CRUD + /api/snippets/health
    - health.py:   GET /health (service health check with database probe)

Routes stay thin: read the request, call a service, shape the response.
"""
