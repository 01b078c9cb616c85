"""FastAPI endpoints for legalbrief.

Endpoints:
    - GET /health: Service health status
    - POST /chat: Send a chat turn
    - GET /chat/{id}: Conversation history
    - POST /research: Grounded deep research
    - POST /draft: Motion drafting
    - POST /documents: Reference document upload
    - GET /documents, DELETE /documents/{id}: Document registry
    - GET /usage: Session token usage
"""

from legalbrief.api.app import app, create_app

__all__ = ["app", "create_app"]
