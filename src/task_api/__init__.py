"""
Task API package.

FastAPI service exposing CRUD endpoints for task records stored in MongoDB.
The ASGI application lives at `task_api.main:app`.
"""
