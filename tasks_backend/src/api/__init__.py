"""
FastAPI Tasks Backend package.

The application instance lives in ``src.api.main`` (``src.api.main:app``).
Importing it loads the signing key pair, so it is not re-exported here.
"""
