"""
Feature modules live under this package.

Keep module boundaries clean: each module owns its models/schemas/service/routes,
while reusing platform primitives (auth, RBAC, audit, storage, DB session).
"""
