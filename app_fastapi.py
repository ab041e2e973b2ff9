# app_fastapi.py
# -*- coding: utf-8 -*-

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.logging import logger
from routers import health, mt_chat

# ============================================================
# FastAPI app (Swagger description included)
# ============================================================

app = FastAPI(
    title="MT Classification Assistant API",
    description="""
Backend for the **Modification Traveler (MT) classification assistant**.

- The chat front end sends each engineer message as **text** to this API.
- From the conversation the backend
  - extracts equipment, manufacturers, safety class and equivalency facts
  - decides whether an MT is required and which design type (I-V) applies
  - asks one follow-up question at a time until it can decide
  - keeps a history of finished scenarios per session
""",
    version="1.0.0",
)

# CORS: * while developing, restrict to the front-end domain when deployed
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(mt_chat.router)

logger.info("app_fastapi loaded; routes: " + ", ".join(getattr(r, "path", type(r).__name__) for r in app.routes))

# ============================================================
# uvicorn entry point
# ============================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app_fastapi:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
