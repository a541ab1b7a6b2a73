# Middleware package init
"""
Booky - Middleware Package
==========================

Middleware Chain:
    Request → [Logging] → [Request ID] → [CORS] → Route Handler

    - Logging is outermost so its duration covers the whole request
    - Request ID sets the correlation ID used by error handlers and
      echoed in the X-Request-ID response header
"""
