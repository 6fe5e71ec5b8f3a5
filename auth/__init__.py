"""auth/ -- Session, throttle, and credential logic for the admin gate.

Layer rule: auth/ imports only stdlib and core/.
It does NOT import from api/ and has no FastAPI dependency.
api/ imports from auth/, not the other way around.
"""
