"""
Formatação de comprimentos para textos e relatórios
"""


def format_length(value: float) -> str:
    """Formata um comprimento sem casas decimais desnecessárias (1000.0 -> '1000')"""
    rounded = round(value, 2)
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.2f}".rstrip('0')
