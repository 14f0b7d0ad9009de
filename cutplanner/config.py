"""
Configuração do CutPlanner (variáveis de ambiente e logging)
"""

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "CUTPLANNER_"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseModel):
    """Configurações do serviço"""
    host: str = Field("0.0.0.0", description="Endereço do servidor da API")
    port: int = Field(8000, ge=1, le=65535, description="Porta do servidor da API")
    log_level: str = Field("INFO", description="Nível de log")
    default_kerf: float = Field(0.0, ge=0, description="Espessura de corte padrão (mm)")
    reload: bool = Field(False, description="Recarregar o servidor ao alterar o código")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Nível de log inválido: {v}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Carrega as configurações a partir de variáveis CUTPLANNER_*

        Args:
            environ: Ambiente a ler (padrão: os.environ)

        Returns:
            Configurações validadas
        """
        if environ is None:
            environ = os.environ

        values = {}
        for name in cls.model_fields:
            key = ENV_PREFIX + name.upper()
            if key in environ:
                values[name] = environ[key]
        return cls(**values)


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configura o logging da aplicação

    Args:
        log_level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
        ]
    )

    # Bibliotecas de gráficos são muito verbosas em DEBUG
    logging.getLogger('matplotlib').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)
