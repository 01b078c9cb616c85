"""legalbrief - chat, research and drafting on a hosted LLM API.

Combines FastAPI for HTTP, Agno for model access, pypdf for document
ingestion and Pydantic for data validation.

Components:
    - agent: Model-call orchestration (retry, fallback, research, chat, drafting)
    - api: HTTP endpoints
    - parsing: Uploaded file ingestion
    - models: Domain models and request/response schemas
"""

__version__ = "0.1.0"
