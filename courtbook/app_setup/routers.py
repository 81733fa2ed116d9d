"""
Registre central des routers.
- API v1: orders, payments, reservations
- Health: health_router
"""
from fastapi import FastAPI
from courtbook.orders import views as orders_views
from courtbook.payments import views as payments_views
from courtbook.reservations import views as reservations_views
from courtbook.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(orders_views.router)
    app.include_router(payments_views.router)
    app.include_router(reservations_views.router)
    # Health & monitoring
    app.include_router(health_router)
