# Routes package init
"""
AppBackend — API Routes Package
================================

What:  HTTP route handlers; thin wrappers that extract request data, call a
       service and shape the response.

Route Inventory:
    - insert.py:  POST /user, /userend, /box, /plant, /timelapse, /device,
                  /feed, /feedEntry, /feedMedia, /plantsharing
    - auth.py:    POST /login
    - public.py:  GET  /public/plants, /public/plant/{id},
                  /public/plant/{id}/feedEntries,
                  /public/feedEntry/{id}/feedMedias, /public/feedMedia/{id}
    - health.py:  GET  /health
    - deps.py:    shared dependencies (credential signer, optional identity)
"""
