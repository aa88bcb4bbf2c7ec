"""API v1 router aggregation"""
from fastapi import APIRouter
from stylesnap.api.v1.endpoints import trial_endpoints, generation_endpoints, payment_endpoints
from stylesnap.api.v1.endpoints import upload_endpoints
from stylesnap.api.v1.endpoints import style_endpoints

api_router = APIRouter()

api_router.include_router(trial_endpoints.router,      prefix="/trial",    tags=["Trial"])
api_router.include_router(upload_endpoints.router,     prefix="/upload",   tags=["Upload"])
api_router.include_router(style_endpoints.router,      prefix="/styles",   tags=["Styles"])
api_router.include_router(generation_endpoints.router, prefix="/generate", tags=["Generation"])
api_router.include_router(payment_endpoints.router,    prefix="/payment",  tags=["Payment"])
