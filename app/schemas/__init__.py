"""
Schemas module - Request/Response schemas for API endpoints.

Everything lives in app.schemas.schemas; see its module docstring.
"""
