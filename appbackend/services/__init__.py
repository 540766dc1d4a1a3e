# Services package init
"""
AppBackend — Services Layer
============================

What:  Business logic between the routes (HTTP) and the database.

Service Inventory:
    - registry:        resource kinds and their static descriptors
    - identity:        credential → Identity; stamps user_id on new rows
    - ownership:       parent-chain ownership guard (pre-check)
    - pipeline:        the generic create executor and its InsertContext
    - fanout:          mirror rows for devices (snapshot and per-resource sync)
    - enrollment:      device credential + snapshot after a UserEnd is created
    - users:           nickname uniqueness, password hashing, login
    - public_service:  read-only browsing of public plants
"""
