"""
Todo Mirror backend package.

Users log in against an upstream identity/todo API; their todos are copied
once into a local per-user store and served from there. The FastAPI app
lives in ``todo_mirror.main``.
"""
