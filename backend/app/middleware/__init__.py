"""
NoteSync Backend - Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    - Request ID runs first so every log line of the request carries it
    - Logging records status and duration once the handler has answered,
      including the authenticated user id when there is one
    - CORS is FastAPI's CORSMiddleware (handles preflight)
"""
