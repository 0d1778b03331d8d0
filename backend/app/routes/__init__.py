# Routes package init
"""
NoteSync Backend - API Routes Package
=======================================

Route Inventory:
    - health.py:   GET  /health, GET /health/ready   (no auth)
    - profile.py:  POST /profile
    - notes.py:    POST /notes, GET /notes, GET /shared,
                   PUT /notes/{id}, DELETE /notes/{id}
    - sharing.py:  POST /share

Routes stay thin: authenticate (require_user), validate the body
(request_validator), call a service, return the response model.
"""
