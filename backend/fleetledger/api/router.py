"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from fleetledger.api.routes import accounts, analysis, auth, desktop, expenses, finance, trips, vehicles

api_router = APIRouter()

# Fleet
api_router.include_router(auth.router)
api_router.include_router(accounts.admins_router)
api_router.include_router(accounts.drivers_router)
api_router.include_router(vehicles.router)
api_router.include_router(trips.router)
api_router.include_router(expenses.fixed_router)
api_router.include_router(expenses.workshop_router)
api_router.include_router(expenses.payables_router)
api_router.include_router(analysis.router)

# Finance back-office
api_router.include_router(desktop.router)
api_router.include_router(finance.router)
