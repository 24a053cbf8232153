# Services package init
"""
NoteKeeper Backend — Services Layer
=====================================

What:  Business logic between routes (HTTP) and the database.
How:   Stateless service singletons; every call receives the session and the
       caller's user id explicitly.

Service Inventory:
    - ownership:      the shared owner guard (NotFound before Unauthorized)
    - LabelService:   label CRUD, note counts, bulk attach/detach
    - NoteService:    note CRUD, pin/archive toggles, filtered listing
    - note_query:     filter/sort/search → SELECT translation
    - ReorderService: manual ordering with shifting
"""
