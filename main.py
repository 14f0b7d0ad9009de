"""
Servidor FastAPI principal para o CutPlanner
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
import uvicorn

from cutplanner import CutPlanner, __version__
from cutplanner.config import Settings, setup_logging
from cutplanner.exceptions import InsufficientStockError, InvalidInputError
from cutplanner.models import OptimizationRequest, OptimizationResult
from cutplanner.presets import list_profiles
from cutplanner.utils import CutPlannerReporter, CutPlannerVisualizer

logger = logging.getLogger(__name__)

settings = Settings.from_env()

# Configuração do FastAPI
app = FastAPI(
    title="CutPlanner API",
    description="API para plano de corte de barras",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configuração de CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Instância global do CutPlanner (sem estado entre requisições)
cut_planner = CutPlanner(kerf_width=settings.default_kerf)

EXPORT_FORMATS = {
    "txt": ("text/plain; charset=utf-8", "txt"),
    "csv": ("text/csv; charset=utf-8", "csv"),
    "excel": ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", "xlsx"),
    "pdf": ("application/pdf", "pdf"),
    "json": ("application/json", "json"),
    "html": ("text/html; charset=utf-8", "html"),
    "png": ("image/png", "png"),
}


def register_exception_handlers(app: FastAPI) -> None:
    """Registra os tratadores de erro do planejador"""

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": str(exc), "error_type": "invalid_input"},
        )

    @app.exception_handler(InsufficientStockError)
    async def insufficient_stock_handler(request: Request, exc: InsufficientStockError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": str(exc), "error_type": "insufficient_stock", "length": exc.length},
        )


register_exception_handlers(app)


@app.get("/")
async def root():
    """Página inicial da API - redireciona para documentação"""
    return {
        "message": "CutPlanner API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


@app.get("/health")
async def health_check():
    """Verificação de saúde da API"""
    return {"status": "ok"}


@app.post("/api/optimize", response_model=OptimizationResult)
def optimize(request: OptimizationRequest):
    """
    Gera o plano de corte

    Args:
        request: Cortes (lista ou texto "comprimento x quantidade"), barras e kerf

    Returns:
        Barras, resumo e dados do pedido
    """
    result = cut_planner.optimize(request)
    logger.info(
        "Pedido %s: %d barras, eficiência %.2f%%",
        result.order_number, result.summary.total_stock_used, result.summary.efficiency
    )
    return result


@app.post("/api/export/{fmt}")
def export(fmt: str, result: OptimizationResult):
    """
    Exporta um resultado de otimização

    Args:
        fmt: Formato (txt, csv, excel, pdf, json, html, png)
        result: Resultado retornado por /api/optimize

    Returns:
        Arquivo para download
    """
    if fmt not in EXPORT_FORMATS:
        return JSONResponse(
            status_code=400,
            content={
                "error": f"Formato não suportado: {fmt}. Disponíveis: {', '.join(EXPORT_FORMATS)}",
                "error_type": "unsupported_format",
            },
        )

    media_type, extension = EXPORT_FORMATS[fmt]
    reporter = CutPlannerReporter(result)

    if fmt == "txt":
        content = reporter.generate_text_report()
    elif fmt == "csv":
        content = reporter.generate_csv_report()
    elif fmt == "excel":
        content = reporter.generate_excel_report()
    elif fmt == "pdf":
        content = reporter.generate_pdf_report()
    elif fmt == "json":
        content = reporter.generate_json_report()
    elif fmt == "html":
        content = reporter.generate_html_report()
    else:
        content = CutPlannerVisualizer(result).to_png_bytes()

    filename = f"plano_{result.order_number}.{extension}"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@app.get("/api/profiles")
async def get_profiles():
    """Retorna os perfis de comprimentos de barra"""
    return list_profiles()


@app.get("/examples/1d")
async def get_1d_example():
    """Retorna exemplo de dados para otimização"""
    return {
        "cuts_input": "2400x4, 1200x6, 800x10",
        "stock_lengths": [6000, 12100, 15100],
        "kerf": 3.0
    }


if __name__ == "__main__":
    setup_logging(settings.log_level)
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower()
    )
