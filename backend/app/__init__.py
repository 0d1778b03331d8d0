"""
NoteSync Backend - Application Package
========================================

What: Note sync API for a mobile notes app: profiles, notes and note sharing
      over a Postgres data store, authenticated by Supabase bearer tokens.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (validation, ownership,  │  ← Business rules
    │   sharing flow, token verification) │
    ├─────────────────────────────────────┤
    │        Schemas & Models (Data)      │  ← Pydantic records + SQLAlchemy ORM
    ├─────────────────────────────────────┤
    │   DataStore (SQL or in-memory)      │  ← Persistence gateway
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
