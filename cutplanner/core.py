"""
Núcleo do sistema CutPlanner com o algoritmo de plano de corte

Convenção de kerf: a espessura da lâmina é cobrada apenas ENTRE cortes,
ou seja, uma barra com n cortes perde (n - 1) * kerf. O planejador e o
resumo usam a mesma convenção.

As contas internas usam Decimal, para que comprimentos decimais (ex.: 0.2 +
0.1 em uma barra de 0.3) encaixem exatamente e a sobra feche com o
comprimento da barra.
"""

import logging
import math
import time
from collections import Counter
from datetime import datetime
from decimal import Decimal
from numbers import Real
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .exceptions import InsufficientStockError, InvalidInputError
from .formatting import format_length
from .models import (
    CutPlan, PlanSummary, StockUsage,
    OptimizationRequest, OptimizationResult
)
from .parsers import generate_order_number, parse_cuts_input

logger = logging.getLogger(__name__)

# Peso do "aproveitamento" na pontuação de uma barra nova. Precisa superar
# qualquer desperdício por corte realista (em mm) para que a ordenação seja
# lexicográfica.
SCORE_WEIGHT = 10000


class _OpenBar:
    """Barra aberta durante uma única execução do planejador"""

    __slots__ = ("stock_length", "cuts", "occupied")

    def __init__(self, stock_length: Decimal, first_cut: Decimal):
        self.stock_length = stock_length
        self.cuts = [first_cut]
        # soma dos cortes + kerf entre eles
        self.occupied = first_cut

    @property
    def remaining(self) -> Decimal:
        return self.stock_length - self.occupied

    def add(self, cut: Decimal, kerf: Decimal) -> None:
        self.cuts.append(cut)
        self.occupied += kerf + cut

    def to_plan(self, kerf: Decimal) -> CutPlan:
        used_length = sum(self.cuts)
        kerf_loss = (len(self.cuts) - 1) * kerf
        return CutPlan(
            stock_length=float(self.stock_length),
            cuts=tuple(float(c) for c in self.cuts),
            used_length=float(used_length),
            kerf_loss=float(kerf_loss),
            waste=float(self.stock_length - used_length - kerf_loss),
        )


def _exact(value) -> Decimal:
    """Valor decimal exato de um comprimento (0.1 -> Decimal('0.1'))"""
    if isinstance(value, int):
        return Decimal(value)
    return Decimal(str(value))


def _is_length(value) -> bool:
    return (
        isinstance(value, Real)
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value > 0
    )


def validate_inputs(required_cuts: Iterable[float], stock_lengths: Iterable[float], kerf: float) -> Tuple[List[float], List[float]]:
    """
    Valida as entradas do planejador

    Args:
        required_cuts: Cortes necessários
        stock_lengths: Comprimentos de barra disponíveis
        kerf: Espessura do corte

    Returns:
        Cortes e comprimentos de barra (sem repetições, ordem preservada)

    Raises:
        InvalidInputError: Se algum valor for ausente, não numérico ou não positivo
    """
    if required_cuts is None:
        raise InvalidInputError("Nenhum corte informado")
    if stock_lengths is None:
        raise InvalidInputError("Nenhum comprimento de barra informado")

    cuts = list(required_cuts)
    stocks = list(stock_lengths)

    if not cuts:
        raise InvalidInputError("Nenhum corte informado")
    if not stocks:
        raise InvalidInputError("Nenhum comprimento de barra informado")

    for cut in cuts:
        if not _is_length(cut):
            raise InvalidInputError(f"Comprimento de corte inválido: {cut!r}")
    for stock in stocks:
        if not _is_length(stock):
            raise InvalidInputError(f"Comprimento de barra inválido: {stock!r}")

    if (
        not isinstance(kerf, Real)
        or isinstance(kerf, bool)
        or not math.isfinite(kerf)
        or kerf < 0
    ):
        raise InvalidInputError(f"Espessura de corte inválida: {kerf!r}")

    return cuts, list(dict.fromkeys(stocks))


class CutPlanner:
    """
    Planejador de cortes 1D (First-Fit-Decreasing com escolha por menor
    sobra e antecipação na abertura de barras novas)
    """

    def __init__(self, kerf_width: float = 0.0):
        """
        Inicializa o planejador de cortes

        Args:
            kerf_width: Espessura do corte em mm, usada quando nenhuma é informada
        """
        self.kerf_width = kerf_width

    def plan(self, required_cuts: Iterable[float], stock_lengths: Iterable[float],
             kerf: Optional[float] = None) -> List[CutPlan]:
        """
        Distribui os cortes em barras de estoque

        Args:
            required_cuts: Cortes necessários (multiconjunto de comprimentos)
            stock_lengths: Comprimentos de barra disponíveis; a ordem decide empates
            kerf: Espessura do corte (padrão: kerf_width do planejador)

        Returns:
            Barras na ordem em que foram abertas

        Raises:
            InvalidInputError: Se as entradas forem inválidas
            InsufficientStockError: Se algum corte for maior que todas as barras
        """
        if kerf is None:
            kerf = self.kerf_width
        cuts, stocks = validate_inputs(required_cuts, stock_lengths, kerf)
        kerf = _exact(kerf)
        stocks = list(dict.fromkeys(_exact(s) for s in stocks))

        sorted_cuts = sorted((_exact(c) for c in cuts), reverse=True)
        remaining_counts = Counter(sorted_cuts)
        bars: List[_OpenBar] = []

        for cut in sorted_cuts:
            index = self._best_open_bar(bars, cut, kerf)
            if index is not None:
                bars[index].add(cut, kerf)
                logger.debug("Corte %gmm na barra #%d", cut, index + 1)
            else:
                stock = self._choose_stock_length(stocks, cut, kerf, remaining_counts[cut])
                bars.append(_OpenBar(stock, cut))
                logger.debug("Corte %gmm abre barra #%d de %gmm", cut, len(bars), stock)
            remaining_counts[cut] -= 1

        plans = [bar.to_plan(kerf) for bar in bars]
        logger.info("Plano gerado: %d cortes em %d barras", len(sorted_cuts), len(plans))
        return plans

    def _best_open_bar(self, bars: Sequence[_OpenBar], cut: Decimal, kerf: Decimal) -> Optional[int]:
        """Índice da barra aberta com menor sobra após o corte, ou None"""
        best_index = None
        best_waste = math.inf

        for i, bar in enumerate(bars):
            remaining = bar.remaining
            if remaining >= cut + kerf:
                waste_after = remaining - cut - kerf
                if waste_after < best_waste:
                    best_waste = waste_after
                    best_index = i

        return best_index

    def _choose_stock_length(self, stocks: Sequence[Decimal], cut: Decimal, kerf: Decimal,
                             pending: int) -> Decimal:
        """
        Escolhe o comprimento da barra nova para um corte

        Prefere a barra que absorve mais cortes iguais ainda pendentes; o
        desperdício por corte só desempata.

        Args:
            stocks: Comprimentos disponíveis, na ordem informada
            cut: Corte que abre a barra
            kerf: Espessura do corte
            pending: Cortes deste comprimento ainda não atribuídos (inclui o atual)

        Returns:
            Comprimento escolhido

        Raises:
            InsufficientStockError: Se nenhum comprimento comportar o corte
        """
        best_stock = None
        best_score = None

        for stock in stocks:
            if stock < cut:
                continue

            fits_count = math.floor(stock / (cut + kerf))
            will_use = min(fits_count, pending)
            if will_use > 0:
                total_used = will_use * (cut + kerf) - kerf
                waste_per_cut = (stock - total_used) / will_use
            else:
                waste_per_cut = stock

            if will_use > 0 and waste_per_cut >= SCORE_WEIGHT:
                logger.warning(
                    "Desperdício por corte de %gmm na barra de %gmm excede o peso %d; "
                    "a escolha da barra pode não priorizar o aproveitamento",
                    waste_per_cut, stock, SCORE_WEIGHT
                )

            score = will_use * SCORE_WEIGHT - waste_per_cut
            if best_score is None or score > best_score:
                best_score = score
                best_stock = stock

        if best_stock is None:
            raise InsufficientStockError(float(cut))

        return best_stock

    def summarize(self, plans: Sequence[CutPlan], kerf: Optional[float] = None) -> PlanSummary:
        """
        Calcula o resumo agregado de um plano de corte

        Args:
            plans: Barras retornadas por plan()
            kerf: Espessura do corte (só afeta o texto do resumo)

        Returns:
            Resumo com totais, uso por comprimento e eficiência
        """
        if kerf is None:
            kerf = self.kerf_width

        total_stock_used = len(plans)
        total_length = sum(p.stock_length for p in plans)
        total_waste = sum(p.waste for p in plans)
        total_kerf_loss = sum(p.kerf_loss for p in plans)
        total_used = total_length - total_waste
        efficiency = round(total_used / total_length * 100, 2) if total_length > 0 else 0.0

        usage: Dict[float, List[float]] = {}
        for plan in plans:
            group = usage.setdefault(plan.stock_length, [0, 0])
            group[0] += 1
            group[1] += plan.waste

        stock_usage = [
            StockUsage(length=length, count=count, total_waste=waste)
            for length, (count, waste) in sorted(usage.items(), key=lambda item: item[0], reverse=True)
        ]

        kerf_text = f" | Perda de corte (kerf): {format_length(total_kerf_loss)}mm" if kerf > 0 else ""
        summary = (
            f"Barras usadas: {total_stock_used} | Comprimento total: {format_length(total_length)}mm | "
            f"Desperdício total: {format_length(total_waste)}mm{kerf_text} | Eficiência: {efficiency:.2f}%"
        )
        stock_usage_summary = "Uso de barras: " + ", ".join(
            f"{item.count}x {format_length(item.length)}mm (desperdício: {format_length(item.total_waste)}mm)"
            for item in stock_usage
        )

        return PlanSummary(
            total_stock_used=total_stock_used,
            total_length=total_length,
            total_waste=total_waste,
            total_kerf_loss=total_kerf_loss,
            total_used=total_used,
            efficiency=efficiency,
            stock_usage=stock_usage,
            summary=summary,
            stock_usage_summary=stock_usage_summary,
        )

    def optimize(self, request: OptimizationRequest) -> OptimizationResult:
        """
        Executa o plano de corte completo para uma requisição

        Args:
            request: Requisição de otimização

        Returns:
            Resultado com barras, resumo e dados do pedido
        """
        start_time = time.time()

        kerf = request.kerf if request.kerf is not None else self.kerf_width
        if request.cuts_input:
            required_cuts = parse_cuts_input(request.cuts_input)
        else:
            required_cuts = request.required_cuts

        plans = self.plan(required_cuts, request.stock_lengths, kerf)
        summary = self.summarize(plans, kerf)

        return OptimizationResult(
            plans=plans,
            summary=summary,
            kerf=kerf,
            order_number=request.order_number or generate_order_number(),
            timestamp=datetime.now().isoformat(),
            processing_time=(time.time() - start_time) * 1000,
        )


def plan(required_cuts: Iterable[float], stock_lengths: Iterable[float], kerf: float = 0.0) -> List[CutPlan]:
    """Atalho para CutPlanner().plan()"""
    return CutPlanner(kerf_width=kerf).plan(required_cuts, stock_lengths)


def summarize(plans: Sequence[CutPlan], kerf: float = 0.0) -> PlanSummary:
    """Atalho para CutPlanner().summarize()"""
    return CutPlanner(kerf_width=kerf).summarize(plans)
