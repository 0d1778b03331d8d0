# Services package init
"""
NoteSync Backend - Services Layer
===================================

Service Inventory:
    - DataStore (abstract): gateway to profiles, notes and note_shares
      - SqlStore: SQLAlchemy async implementation
      - MemoryStore: in-process fake
    - IdentityProvider (abstract): bearer token → user
      - SupabaseAuthProvider: Supabase Auth over httpx
    - TokenVerifier: Authorization header → AuthenticatedUser
    - request_validator: per-operation payload contracts and defaults
    - NoteService: profile and note operations with ownership checks
    - SharingService: share-by-token authorization flow
"""
