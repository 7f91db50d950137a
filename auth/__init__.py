"""auth/ -- Authentication and authorization package for TaskTeam.

passwords.py  bcrypt hashing
tokens.py     JWT issuance / validation (TokenService)
service.py    caller resolution, role and task-ownership decisions, login
filters.py    401/403 gating and FastAPI dependencies

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or board/.
api/ imports from auth/, not the other way around.
"""
