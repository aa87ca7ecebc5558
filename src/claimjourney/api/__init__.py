"""
ClaimJourney API

FastAPI application exposing the engine:

    uvicorn claimjourney.api.main:app
"""
