# Middleware package init
"""
Salon API — Middleware Package
===============================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so the logging middleware can include it
    2. Logging measures the full handling time and the final status
    3. CORS is FastAPI's CORSMiddleware (handles preflight)
"""
