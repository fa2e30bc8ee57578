"""
Web application package for the chess engine.

Provides a FastAPI-based REST API that a browser UI calls for legal-move
highlighting, move submission, AI moves and undo. Serve it with any ASGI
server, e.g. `uvicorn web.app:app`.
"""
