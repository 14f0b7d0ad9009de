"""
CutPlanner - Plano de Corte de Barras

Distribui cortes de comprimentos variados em barras de estoque, reduzindo
desperdícios e considerando a espessura da lâmina (kerf).
"""

from .core import CutPlanner, plan, summarize
from .exceptions import CutPlannerError, InvalidInputError, InsufficientStockError
from .models import CutPlan, StockUsage, PlanSummary, OptimizationRequest, OptimizationResult

__version__ = "1.0.0"
__author__ = "CutPlanner Team"

__all__ = [
    "CutPlanner",
    "plan",
    "summarize",
    "CutPlannerError",
    "InvalidInputError",
    "InsufficientStockError",
    "CutPlan",
    "StockUsage",
    "PlanSummary",
    "OptimizationRequest",
    "OptimizationResult"
]
