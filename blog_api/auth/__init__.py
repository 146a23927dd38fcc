"""Authentication and authorization.

- ``password``: bcrypt credential hashing
- ``tokens``: stateless JWT issue / verify
- ``policy``: owner-only mutation check
- ``dependencies``: FastAPI bearer-token dependency
"""
