"""API routes."""

from fastapi import APIRouter

from spendwise.api.routes import (
    budgets,
    categories,
    invitations,
    reports,
    transactions,
    users,
    wallets,
)

router = APIRouter(prefix="/api")

# Include routers
router.include_router(users.router)
router.include_router(wallets.router)
router.include_router(transactions.router)
router.include_router(invitations.router)
router.include_router(categories.router)
router.include_router(budgets.router)
router.include_router(reports.router)
