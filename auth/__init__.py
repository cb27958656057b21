"""auth/ -- Credential digest scheme, random tokens, and credential storage.

Layer rule: auth/ imports only stdlib + third-party libraries + core/.
It does NOT import from api/ or vault/.
api/ imports from auth/, not the other way around.
"""
