"""
Exceções do sistema CutPlanner
"""

from .formatting import format_length


class CutPlannerError(Exception):
    """Erro base do CutPlanner"""


class InvalidInputError(CutPlannerError):
    """Entrada inválida: comprimentos ausentes, não numéricos ou não positivos"""


class InsufficientStockError(CutPlannerError):
    """Nenhuma barra em estoque é longa o suficiente para um corte"""

    def __init__(self, length: float):
        self.length = length
        super().__init__(f"Nenhuma barra em estoque com comprimento >= {format_length(length)}mm")
