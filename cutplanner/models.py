"""
Modelos de dados para o sistema CutPlanner
"""

from typing import List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


class CutPlan(BaseModel):
    """Representa uma barra de estoque e os cortes atribuídos a ela"""
    model_config = ConfigDict(frozen=True)

    stock_length: float = Field(..., gt=0, description="Comprimento da barra (mm)")
    cuts: Tuple[float, ...] = Field(..., description="Cortes na ordem de atribuição (mm)")
    used_length: float = Field(..., ge=0, description="Soma dos cortes (mm)")
    kerf_loss: float = Field(0, ge=0, description="Perda pela espessura da lâmina (mm)")
    waste: float = Field(..., ge=0, description="Sobra da barra (mm)")

    @property
    def waste_percent(self) -> float:
        """Desperdício percentual da barra"""
        return self.waste / self.stock_length * 100


class StockUsage(BaseModel):
    """Uso agregado de um comprimento de barra"""
    model_config = ConfigDict(frozen=True)

    length: float = Field(..., description="Comprimento da barra (mm)")
    count: int = Field(..., ge=1, description="Quantidade de barras usadas")
    total_waste: float = Field(..., ge=0, description="Desperdício somado (mm)")


class PlanSummary(BaseModel):
    """Resumo agregado de um plano de corte"""
    model_config = ConfigDict(frozen=True)

    total_stock_used: int = Field(..., description="Quantidade de barras usadas")
    total_length: float = Field(..., description="Comprimento total comprado (mm)")
    total_waste: float = Field(..., description="Desperdício total (mm)")
    total_kerf_loss: float = Field(..., description="Perda total de corte (mm)")
    total_used: float = Field(..., description="Comprimento aproveitado (mm)")
    efficiency: float = Field(..., description="Aproveitamento percentual")
    stock_usage: List[StockUsage] = Field(default_factory=list, description="Uso por comprimento de barra")
    summary: str = Field("", description="Resumo legível")
    stock_usage_summary: str = Field("", description="Uso de barras legível")


class OptimizationRequest(BaseModel):
    """Requisição para otimização"""
    required_cuts: Optional[List[float]] = Field(None, description="Cortes necessários (mm)")
    cuts_input: Optional[str] = Field(None, description="Cortes em texto livre, ex.: '1200x3, 800'")
    stock_lengths: List[float] = Field(..., min_length=1, description="Comprimentos de barra disponíveis (mm)")
    kerf: Optional[float] = Field(None, ge=0, description="Espessura do corte (mm)")
    order_number: Optional[str] = Field(None, description="Número do pedido")

    @field_validator('stock_lengths')
    @classmethod
    def validate_stock_lengths(cls, v):
        if any(length <= 0 for length in v):
            raise ValueError("Comprimentos de barra devem ser positivos")
        return v


class OptimizationResult(BaseModel):
    """Resultado completo da otimização"""
    plans: List[CutPlan] = Field(..., description="Barras na ordem de abertura")
    summary: PlanSummary = Field(..., description="Resumo agregado")
    kerf: float = Field(0, ge=0, description="Espessura do corte usada (mm)")
    order_number: str = Field(..., description="Número do pedido")
    timestamp: str = Field(..., description="Data/hora da otimização (ISO 8601)")
    processing_time: float = Field(0, description="Tempo de processamento (ms)")
