# Services package init
"""
CodeArchive Backend: Services Layer
====================================

Business logic between routes (HTTP) and the database.

Service Inventory:
    - SnippetService: pagination, CRUD, not-found mapping and fault wrapping
"""
