"""
Leitura de cortes e comprimentos de barra em texto livre
"""

import logging
import math
import random
import re
from datetime import datetime
from typing import List, Optional

logger = logging.getLogger(__name__)

_QUANTITY_SEPARATOR = re.compile(r"[xX]")

# Maior quantidade aceita em uma entrada "comprimento x quantidade"
MAX_QUANTITY = 10000


def _parse_number(text: str) -> Optional[float]:
    """Converte texto em número positivo e finito, ou None"""
    try:
        value = float(text.strip())
    except ValueError:
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def parse_cuts_input(text: str) -> List[float]:
    """
    Converte especificação "comprimento x quantidade" em lista de cortes

    Entradas separadas por vírgula; cada uma é um comprimento isolado
    ("450") ou comprimento e quantidade ("1200x3"). Entradas não numéricas, não positivas ou com quantidade
    acima de MAX_QUANTITY são ignoradas.

    Args:
        text: Especificação, ex.: "1200x3, 800 X 2, 450"

    Returns:
        Lista de cortes com repetições expandidas
    """
    cuts = []
    for part in text.split(','):
        entry = part.strip()
        if not entry:
            continue

        if _QUANTITY_SEPARATOR.search(entry):
            pieces = _QUANTITY_SEPARATOR.split(entry)
            if len(pieces) != 2:
                logger.debug("Entrada ignorada: %r", entry)
                continue
            length = _parse_number(pieces[0])
            quantity = _parse_number(pieces[1])
            if (length is None or quantity is None or quantity != int(quantity)
                    or quantity > MAX_QUANTITY):
                logger.debug("Entrada ignorada: %r", entry)
                continue
            cuts.extend([length] * int(quantity))
        else:
            length = _parse_number(entry)
            if length is None:
                logger.debug("Entrada ignorada: %r", entry)
                continue
            cuts.append(length)

    return cuts


def parse_stock_lengths(text: str) -> List[float]:
    """Converte "6000, 12100" em lista de comprimentos de barra"""
    lengths = []
    for part in text.split(','):
        entry = part.strip()
        if not entry:
            continue
        length = _parse_number(entry)
        if length is None:
            logger.debug("Comprimento de barra ignorado: %r", entry)
            continue
        lengths.append(length)
    return lengths


def generate_order_number(now: Optional[datetime] = None) -> str:
    """Gera número de pedido no formato CUT-AAAAMMDD-NNNN"""
    if now is None:
        now = datetime.now()
    return f"CUT-{now:%Y%m%d}-{random.randint(0, 9999):04d}"
