"""API router for v1 endpoints."""

from fastapi import APIRouter

from offer_diagnostic.api import diagnostic

router = APIRouter()

# Offer diagnostic routes
router.include_router(diagnostic.router, tags=["diagnostic"])
