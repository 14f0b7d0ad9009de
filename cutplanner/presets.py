"""
Perfis pré-definidos de comprimentos de barra
"""

from typing import Dict, List

DEFAULT_PROFILES: Dict[str, List[float]] = {
    "Aço estrutural": [6000, 12100, 15100],
    "Perfil de alumínio": [3000, 6000, 7000],
    "Tubo de aço": [6000, 12000],
    "Barra redonda": [3000, 6000, 9000],
    "Personalizado": [],
}


def list_profiles() -> Dict[str, List[float]]:
    """Retorna uma cópia dos perfis disponíveis"""
    return {name: list(lengths) for name, lengths in DEFAULT_PROFILES.items()}


def get_profile(name: str) -> List[float]:
    """
    Obtém os comprimentos de barra de um perfil

    Args:
        name: Nome do perfil

    Returns:
        Comprimentos na ordem em que o perfil os define

    Raises:
        KeyError: Se o perfil não existir
    """
    if name not in DEFAULT_PROFILES:
        raise KeyError(f"Perfil desconhecido: {name}")
    return list(DEFAULT_PROFILES[name])
