# Routes package init
"""
API Base — API Routes Package
==============================

Route Inventory:
    - examples.py:  POST   /examples            (create)
                    GET    /examples            (paginated list, cached 30s)
                    GET    /examples/search     (name fragment search)
                    GET    /examples/count      (total count)
                    GET    /examples/by-name/{name} (exact name)
                    GET    /examples/{id}       (detail, cached 60s)
                    GET    /examples/{id}/exists (existence check)
                    PUT    /examples/{id}       (update)
                    DELETE /examples/{id}       (delete)
    - health.py:    GET    /health              (service health check)

Routes stay thin: parse input, call a command/query handler, wrap the result
in the response envelope.
"""
