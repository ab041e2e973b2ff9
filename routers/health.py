# routers/health.py
from fastapi import APIRouter

router = APIRouter()

@router.get("/", summary="Health check", tags=["health"])
def root():
    return {"message": "MT classification assistant is running"}
