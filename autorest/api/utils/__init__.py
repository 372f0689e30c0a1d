"""Utilities for API responses:
- **responses**: orjson-backed JSON and HAL response classes
- **hal**: Link and page metadata builders for HAL documents
"""
