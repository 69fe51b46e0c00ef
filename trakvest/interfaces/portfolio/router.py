"""
FastAPI router for the portfolio bounded context.

Groups the per-area routers under one include point.
"""

from fastapi import APIRouter

from trakvest.interfaces.portfolio.admin import router as admin_router
from trakvest.interfaces.portfolio.auth import router as auth_router
from trakvest.interfaces.portfolio.goals import router as goals_router
from trakvest.interfaces.portfolio.holdings import router as holdings_router
from trakvest.interfaces.portfolio.stocks import router as stocks_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(holdings_router)
router.include_router(stocks_router)
router.include_router(goals_router)
router.include_router(admin_router)
