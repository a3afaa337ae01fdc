"""
API Layer for the VID Registration Demo

This package provides the FastAPI-based API layer that exposes:
- REST endpoints for ID registration, face registration and status lookup
- A health check endpoint

The API layer connects the capture client (frontend) to the registration
service (core).
"""
