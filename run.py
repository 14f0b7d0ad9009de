#!/usr/bin/env python3
"""
Script principal para executar o sistema CutPlanner
"""

import sys
import os
import argparse
from pathlib import Path

# Adicionar o diretório atual ao path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from cutplanner import CutPlanner, CutPlannerError
from cutplanner.config import Settings, setup_logging
from cutplanner.formatting import format_length
from cutplanner.models import OptimizationRequest
from cutplanner.parsers import parse_stock_lengths
from cutplanner.presets import get_profile, list_profiles


def create_sample_request() -> OptimizationRequest:
    """Cria dados de exemplo para demonstração"""
    return OptimizationRequest(
        cuts_input="2400x4, 1200x6, 800x10, 450x8",
        stock_lengths=get_profile("Aço estrutural"),
        kerf=3.0,
    )


def print_result(result) -> None:
    """Exibe o plano de corte no terminal"""
    summary = result.summary

    print(f"\n✅ Plano de corte {result.order_number}")
    print(f"📊 Eficiência: {summary.efficiency:.2f}%")
    print(f"🗑️  Desperdício: {format_length(summary.total_waste)}mm")
    print(f"📦 Barras utilizadas: {summary.total_stock_used}")
    print(f"⚡ Tempo de processamento: {result.processing_time:.1f}ms")

    print(f"\n📋 Barras:")
    for i, plan in enumerate(result.plans, 1):
        cuts = ", ".join(format_length(c) for c in plan.cuts)
        print(f"  {i}. {format_length(plan.stock_length)}mm: {cuts} "
              f"(desperdício {format_length(plan.waste)}mm)")

    print(f"\n{summary.stock_usage_summary}")


def export_outputs(result, export_dir: str, visualization: bool) -> None:
    """Exporta relatórios e, opcionalmente, gráficos"""
    from cutplanner.utils import create_visualization, export_result

    print(f"\n📁 Exportando resultados para: {export_dir}")
    export_result(result, export_dir)

    if visualization:
        print("🎨 Criando visualizações...")
        create_visualization(result, export_dir)

    print("✅ Exportação concluída!")


def run_demo(settings: Settings):
    """Executa demonstração do sistema"""

    print("🔧 CutPlanner - Demonstração do Sistema")
    print("=" * 60)

    request = create_sample_request()
    planner = CutPlanner(kerf_width=settings.default_kerf)

    print(f"✓ Espessura de corte: {request.kerf}mm")
    print(f"✓ Barras disponíveis: {', '.join(format_length(s) for s in request.stock_lengths)}")
    print(f"✓ Cortes: {request.cuts_input}")

    result = planner.optimize(request)
    print_result(result)
    return result


def run_plan(args, settings: Settings):
    """Gera o plano de corte a partir dos argumentos da linha de comando"""
    if args.profile:
        stock_lengths = get_profile(args.profile)
    else:
        stock_lengths = parse_stock_lengths(args.stock or "")

    request = OptimizationRequest(
        cuts_input=args.cuts,
        stock_lengths=stock_lengths,
        kerf=args.kerf,
        order_number=args.order,
    )
    result = CutPlanner(kerf_width=settings.default_kerf).optimize(request)
    print_result(result)
    return result


def run_profiles() -> None:
    """Lista os perfis de barras disponíveis"""
    for name, lengths in list_profiles().items():
        values = ", ".join(format_length(v) for v in lengths) or "-"
        print(f"  • {name}: {values}")


def run_api_server(settings: Settings):
    """Inicia o servidor da API"""
    import uvicorn

    print("🚀 Iniciando servidor da API CutPlanner...")
    print(f"✓ Documentação da API: http://localhost:{settings.port}/docs")
    print("\nPressione Ctrl+C para parar o servidor")

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower()
    )


def run_tests():
    """Executa os testes do sistema"""

    print("🧪 Executando testes do CutPlanner...")

    import unittest

    # Descobrir e executar testes
    loader = unittest.TestLoader()
    start_dir = Path(__file__).parent / 'tests'
    suite = loader.discover(str(start_dir), pattern='test_*.py', top_level_dir=str(Path(__file__).parent))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    if result.wasSuccessful():
        print("\n✅ Todos os testes passaram!")
        return True

    print(f"\n❌ {len(result.failures) + len(result.errors)} testes falharam")
    return False


def main():
    """Função principal"""

    parser = argparse.ArgumentParser(
        description="CutPlanner - Plano de Corte de Barras",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exemplos de uso:
  python run.py demo                                         # Executa demonstração
  python run.py plan --cuts "1200x3, 800" --stock 6000,12100 # Gera um plano
  python run.py plan --cuts "1000x5" --profile "Tubo de aço" --kerf 3
  python run.py profiles                                     # Lista perfis de barras
  python run.py api                                          # Inicia servidor da API
  python run.py test                                         # Executa testes
        """
    )

    parser.add_argument(
        'command',
        choices=['demo', 'plan', 'profiles', 'api', 'test'],
        help='Comando a executar'
    )

    parser.add_argument('--cuts', help='Cortes, ex.: "1200x3, 800 X 2, 450"')
    parser.add_argument('--stock', help='Comprimentos de barra, ex.: "6000,12100"')
    parser.add_argument('--profile', help='Perfil de barras pré-definido')
    parser.add_argument('--kerf', type=float, help='Espessura do corte (mm)')
    parser.add_argument('--order', help='Número do pedido')

    parser.add_argument(
        '--export',
        metavar='DIR',
        help='Diretório para exportar resultados'
    )

    parser.add_argument(
        '--visualization',
        action='store_true',
        help='Criar visualizações dos resultados'
    )

    args = parser.parse_args()

    try:
        settings = Settings.from_env()
        setup_logging(settings.log_level)

        if args.command in ('demo', 'plan'):
            if args.command == 'demo':
                result = run_demo(settings)
            else:
                if not args.cuts:
                    parser.error("--cuts é obrigatório para o comando plan")
                result = run_plan(args, settings)

            if args.export:
                export_outputs(result, args.export, args.visualization)

        elif args.command == 'profiles':
            run_profiles()

        elif args.command == 'api':
            run_api_server(settings)

        elif args.command == 'test':
            success = run_tests()
            sys.exit(0 if success else 1)

    except KeyboardInterrupt:
        print("\n\n👋 Sistema interrompido pelo usuário")
    except (CutPlannerError, KeyError, ValueError) as e:
        print(f"\n❌ Erro: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
