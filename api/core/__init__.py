"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every resource uses: the document store
and its backends, list query building and pagination, request parsing and
the response envelope. Resource-specific rules (filters, ownership, stats)
stay in the resource packages (e.g. `projects/`).
"""
