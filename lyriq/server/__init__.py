"""
Lyriq Server Package.

This package contains the web server of the Lyriq contact center backend.
It includes the API definition, configuration, the service layer and the
cross-cutting middleware and exception handlers.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Server configuration and constants.
    services: Business logic and the dependencies that provide it to routes.
    middleware: Request tracing.
    exception_handlers: Translation of errors to JSON responses.
"""
