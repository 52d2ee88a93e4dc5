"""
Core application for shared utilities and middleware.

This app provides:
- Exception classes and the exception handling middleware
- Pydantic form schemas, validation helpers and backend DTOs
- Sentry monitoring helpers and health check views
"""
