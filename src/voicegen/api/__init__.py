"""
FastAPI REST API Layer for voicegen.

    - routes.py: generate-tts, audio proxy, health and metrics endpoints
    - pages.py: HTML front page
    - schemas.py: Request/response Pydantic models
    - dependencies.py: FastAPI dependency injection
"""
