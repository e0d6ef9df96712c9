"""
Schemas module - Request/Response schemas for API endpoints.

Free-form submissions (workings, experiences) are validated in the
services instead, so users get the same messages as the web form shows.
"""
