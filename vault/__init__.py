"""vault/ -- Passphrase-based encryption of JSON-compatible values.

Layer rule: vault/ imports only stdlib + third-party libraries + core/.
It does NOT import from api/ or auth/.
"""
