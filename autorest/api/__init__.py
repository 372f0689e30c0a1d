"""HTTP API layer built on FastAPI.

Key components:
- **main**: Application factory and lifecycle (connectivity check, migrations)
- **middleware**: Correlation IDs, request logging with metrics, error handling
- **routes**: HAL resource routes, root index, configuration and actuator
- **schemas**: Pydantic request bodies and the error response format
- **utils**: orjson-backed JSON and HAL response classes, link builders
"""
