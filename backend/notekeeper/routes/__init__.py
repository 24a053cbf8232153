# Routes package init
"""
NoteKeeper Backend — API Routes Package
=========================================

Route Inventory:
    - labels.py:  /api/labels               label CRUD
                  /api/labels/{id}/notes    bulk attach / detach
    - notes.py:   /api/notes                note CRUD, filters, pin/archive
                  /api/notes/reorder        manual ordering
    - health.py:  GET /health               service health check

Routes stay thin: parse the request, resolve the caller, call a service,
wrap the result. Business rules live in services/.
"""
