"""FastAPI middleware for cross-cutting request concerns.

- **RequestContextMiddleware**: Correlation IDs in context and response headers
- **RequestLoggingMiddleware**: Request logging, timing and metrics recording
- **error_handler**: Exception handlers producing the standard error body

Middleware run in reverse order of registration: request context first,
then request logging, then the route.
"""
