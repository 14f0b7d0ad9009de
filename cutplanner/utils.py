"""
Utilitários para visualização e relatórios do CutPlanner
"""

import io
import json
import logging
from typing import List, Optional
from pathlib import Path
import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle
import numpy as np
import pandas as pd
import qrcode
from fpdf import FPDF
from fpdf.enums import XPos, YPos
from openpyxl.drawing.image import Image as ExcelImage
from openpyxl.styles import Alignment, Font, PatternFill

from .formatting import format_length
from .models import CutPlan, OptimizationResult

logger = logging.getLogger(__name__)

REPORT_FORMATS = ["txt", "csv", "excel", "pdf", "json", "html"]


def bar_label_payload(order_number: str, index: int, plan: CutPlan) -> str:
    """
    Conteúdo da etiqueta de uma barra (o que um código escaneável carregaria)

    Args:
        order_number: Número do pedido
        index: Posição da barra no plano (começando em 1)
        plan: Barra

    Returns:
        JSON compacto com pedido, barra, comprimento, cortes e desperdício
    """
    return json.dumps({
        "order": order_number,
        "bar": index,
        "length": plan.stock_length,
        "cuts": list(plan.cuts),
        "waste": plan.waste
    }, separators=(',', ':'), ensure_ascii=False)


def bar_label_qr_png(order_number: str, index: int, plan: CutPlan) -> bytes:
    """Código QR (PNG) com a etiqueta da barra"""
    qr = qrcode.QRCode(box_size=4, border=1)
    qr.add_data(bar_label_payload(order_number, index, plan))
    qr.make(fit=True)

    buffer = io.BytesIO()
    qr.make_image().save(buffer)
    return buffer.getvalue()


class CutPlannerVisualizer:
    """Classe para visualização dos resultados de otimização"""

    def __init__(self, result: OptimizationResult):
        """
        Inicializa o visualizador

        Args:
            result: Resultado da otimização
        """
        self.result = result
        self.colors = plt.cm.Set3(np.linspace(0, 1, 12))

    def plot_cut_plans(self, save_path: Optional[str] = None, show: bool = True):
        """Plota uma faixa por barra com cortes, perda de corte e sobra"""
        plans = self.result.plans
        kerf = self.result.kerf

        fig, ax = plt.subplots(figsize=(12, max(2, 0.8 * len(plans) + 1)))
        max_length = max((p.stock_length for p in plans), default=1)

        for i, plan in enumerate(plans):
            y = len(plans) - 1 - i
            position = 0.0

            for j, cut in enumerate(plan.cuts):
                if j > 0 and kerf > 0:
                    ax.add_patch(Rectangle((position, y - 0.3), kerf, 0.6, facecolor='black'))
                    position += kerf

                color = self.colors[j % len(self.colors)]
                ax.add_patch(Rectangle((position, y - 0.3), cut, 0.6,
                                       facecolor=color, edgecolor='black', linewidth=1))
                ax.text(position + cut / 2, y, format_length(cut),
                        ha='center', va='center', fontsize=8)
                position += cut

            if plan.waste > 0:
                ax.add_patch(Rectangle((position, y - 0.3), plan.waste, 0.6,
                                       facecolor='lightgray', edgecolor='black',
                                       hatch='//', linewidth=1))

        ax.set_xlim(0, max_length)
        ax.set_ylim(-0.5, max(len(plans), 1) - 0.5)
        ax.set_yticks(range(len(plans)))
        ax.set_yticklabels([
            f"#{i} ({format_length(p.stock_length)}mm)"
            for i, p in reversed(list(enumerate(plans, 1)))
        ])
        ax.set_xlabel("Posição (mm)")
        ax.set_title(f"Plano de corte {self.result.order_number} - "
                     f"Eficiência: {self.result.summary.efficiency:.1f}%")

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')

        if show:
            plt.show()

        return fig

    def create_summary_chart(self, save_path: Optional[str] = None, show: bool = True):
        """Cria gráfico de resumo da otimização"""
        summary = self.result.summary
        fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))

        # Gráfico 1: Barras usadas por comprimento
        labels = [f"{format_length(u.length)}mm" for u in summary.stock_usage]
        counts = [u.count for u in summary.stock_usage]
        bars = ax1.bar(labels, counts, color='skyblue', edgecolor='navy')
        ax1.set_title('Barras por Comprimento')
        ax1.set_ylabel('Quantidade')

        for bar, count in zip(bars, counts):
            ax1.text(bar.get_x() + bar.get_width() / 2., bar.get_height(),
                     str(count), ha='center', va='bottom')

        # Gráfico 2: Destino do material comprado
        cut_material = summary.total_used - summary.total_kerf_loss
        values = [cut_material, summary.total_kerf_loss, summary.total_waste]
        names = ['Peças', 'Perda de corte', 'Desperdício']
        shown = [(v, n) for v, n in zip(values, names) if v > 0]
        if shown:
            ax2.pie([v for v, _ in shown], labels=[n for _, n in shown],
                    autopct='%1.1f%%', startangle=90)
        ax2.set_title(f"Eficiência Total: {summary.efficiency:.1f}%")

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')

        if show:
            plt.show()

        return fig

    def to_png_bytes(self) -> bytes:
        """Renderiza o plano de corte em PNG"""
        fig = self.plot_cut_plans(show=False)
        buffer = io.BytesIO()
        fig.savefig(buffer, format='png', dpi=150, bbox_inches='tight')
        plt.close(fig)
        return buffer.getvalue()


class CutPlannerReporter:
    """Classe para geração de relatórios"""

    def __init__(self, result: OptimizationResult):
        """
        Inicializa o gerador de relatórios

        Args:
            result: Resultado da otimização
        """
        self.result = result

    def _plan_details(self, plan: CutPlan) -> str:
        cuts_length = format_length(plan.used_length)
        details = f" Usado: {cuts_length}mm"
        if plan.kerf_loss > 0:
            details += f" + kerf: {format_length(plan.kerf_loss)}mm"
        details += f" | Desperdício: {format_length(plan.waste)}mm ({plan.waste_percent:.1f}%)"
        return details

    def generate_text_report(self) -> str:
        """Gera relatório em formato texto"""
        result = self.result
        report = []
        report.append("Resultado da otimização de corte")
        report.append("=" * 40)
        report.append("")
        report.append(f"Número do pedido: {result.order_number}")
        report.append(f"Data: {result.timestamp}")
        report.append("")

        if result.kerf > 0:
            report.append(f"Perda de corte (kerf): {format_length(result.kerf)} mm")
            report.append("")

        for i, plan in enumerate(result.plans, 1):
            cuts = ", ".join(format_length(c) for c in plan.cuts)
            report.append(f"Barra #{i} ({format_length(plan.stock_length)}mm): {cuts}mm")
            report.append(self._plan_details(plan))
            report.append("")

        report.append(result.summary.summary)
        if result.summary.stock_usage_summary:
            report.append(result.summary.stock_usage_summary)

        return "\n".join(report) + "\n"

    def to_dataframe(self) -> pd.DataFrame:
        """Uma linha por barra, com a etiqueta de cada barra"""
        rows = []
        for i, plan in enumerate(self.result.plans, 1):
            rows.append({
                'Barra': i,
                'Comprimento_Barra': plan.stock_length,
                'Cortes': ", ".join(format_length(c) for c in plan.cuts),
                'Quantidade_Cortes': len(plan.cuts),
                'Usado': plan.used_length,
                'Perda_Corte': plan.kerf_loss,
                'Desperdício': plan.waste,
                'Etiqueta': bar_label_payload(self.result.order_number, i, plan)
            })
        columns = ['Barra', 'Comprimento_Barra', 'Cortes', 'Quantidade_Cortes',
                   'Usado', 'Perda_Corte', 'Desperdício', 'Etiqueta']
        return pd.DataFrame(rows, columns=columns)

    def stock_usage_dataframe(self) -> pd.DataFrame:
        """Uso agregado por comprimento de barra"""
        return pd.DataFrame(
            [{'Comprimento': u.length, 'Quantidade': u.count, 'Desperdício': u.total_waste}
             for u in self.result.summary.stock_usage],
            columns=['Comprimento', 'Quantidade', 'Desperdício']
        )

    def generate_csv_report(self, file_path: Optional[str] = None) -> str:
        """Gera relatório em formato CSV (uma linha por barra)"""
        content = self.to_dataframe().to_csv(index=False)
        if file_path:
            with open(file_path, 'w', newline='', encoding='utf-8') as f:
                f.write(content)
        return content

    def generate_excel_report(self, file_path: Optional[str] = None) -> bytes:
        """Gera planilha Excel com o plano e o resumo"""
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            self.to_dataframe().to_excel(writer, sheet_name='Plano de Corte', index=False)
            self.stock_usage_dataframe().to_excel(writer, sheet_name='Resumo', index=False)

            summary_sheet = writer.sheets['Resumo']
            summary_sheet.cell(row=summary_sheet.max_row + 2, column=1,
                               value=self.result.summary.summary)

            header_font = Font(bold=True, color='FFFFFF')
            header_fill = PatternFill(start_color='667EEA', end_color='667EEA', fill_type='solid')
            for sheet in writer.sheets.values():
                for cell in sheet[1]:
                    cell.font = header_font
                    cell.fill = header_fill

            plan_sheet = writer.sheets['Plano de Corte']
            for column, width in zip('ABCDEFGHI', (8, 18, 35, 18, 12, 12, 14, 60, 14)):
                plan_sheet.column_dimensions[column].width = width

            # Código QR de cada barra na coluna I
            qr_header = plan_sheet.cell(row=1, column=9, value='Código QR')
            qr_header.font = header_font
            qr_header.fill = header_fill
            for i, plan in enumerate(self.result.plans, 1):
                row = i + 1
                image = ExcelImage(io.BytesIO(bar_label_qr_png(self.result.order_number, i, plan)))
                image.width = image.height = 80
                plan_sheet.add_image(image, f"I{row}")
                plan_sheet.row_dimensions[row].height = 62
                for cell in plan_sheet[row]:
                    cell.alignment = Alignment(vertical='center')

        content = buffer.getvalue()
        if file_path:
            with open(file_path, 'wb') as f:
                f.write(content)
        return content

    def generate_pdf_report(self, file_path: Optional[str] = None) -> bytes:
        """Gera relatório PDF com um código QR por barra"""
        result = self.result
        pdf = FPDF(orientation='P', unit='mm', format='A4')
        pdf.set_auto_page_break(auto=True, margin=15)
        pdf.add_page()

        pdf.set_font("Helvetica", 'B', 16)
        pdf.cell(0, 10, "Resultado da otimização de corte", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font("Helvetica", '', 10)
        pdf.cell(0, 6, f"Número do pedido: {result.order_number}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.cell(0, 6, f"Data: {result.timestamp}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        if result.kerf > 0:
            pdf.cell(0, 6, f"Perda de corte (kerf): {format_length(result.kerf)} mm",
                     new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(4)

        qr_size = 22
        for i, plan in enumerate(result.plans, 1):
            # barra inteira na mesma página que o seu código QR
            if pdf.get_y() + qr_size > pdf.page_break_trigger:
                pdf.add_page()

            start_y = pdf.get_y()
            text_width = pdf.epw - qr_size - 4
            cuts = ", ".join(format_length(c) for c in plan.cuts)

            pdf.set_font("Helvetica", 'B', 11)
            pdf.multi_cell(text_width, 6, f"Barra #{i} ({format_length(plan.stock_length)}mm): {cuts}mm",
                           new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            pdf.set_font("Helvetica", '', 9)
            pdf.multi_cell(text_width, 5, self._plan_details(plan).strip(),
                           new_x=XPos.LMARGIN, new_y=YPos.NEXT)

            qr = io.BytesIO(bar_label_qr_png(result.order_number, i, plan))
            pdf.image(qr, x=pdf.l_margin + pdf.epw - qr_size, y=start_y, w=qr_size, h=qr_size)
            pdf.set_y(max(pdf.get_y(), start_y + qr_size) + 3)

        pdf.ln(2)
        pdf.set_font("Helvetica", 'B', 11)
        pdf.multi_cell(0, 6, result.summary.summary, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        if result.summary.stock_usage_summary:
            pdf.set_font("Helvetica", '', 10)
            pdf.multi_cell(0, 6, result.summary.stock_usage_summary, new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        content = bytes(pdf.output())
        if file_path:
            with open(file_path, 'wb') as f:
                f.write(content)
        return content

    def generate_json_report(self, file_path: Optional[str] = None) -> str:
        """Gera relatório em formato JSON"""
        content = json.dumps(self.result.model_dump(mode='json'), indent=2, ensure_ascii=False)
        if file_path:
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(content)
        return content

    def generate_html_report(self, file_path: Optional[str] = None) -> str:
        """Gera relatório em formato HTML"""
        result = self.result
        summary = result.summary
        html = f"""
        <!DOCTYPE html>
        <html lang="pt-BR">
        <head>
            <meta charset="UTF-8">
            <title>Plano de Corte {result.order_number} - CutPlanner</title>
            <style>
                body {{ font-family: Arial, sans-serif; margin: 20px; }}
                .header {{ background-color: #2c3e50; color: white; padding: 20px; text-align: center; }}
                .summary {{ background-color: #ecf0f1; padding: 15px; margin: 20px 0; border-radius: 5px; }}
                .metric {{ display: inline-block; margin: 10px; padding: 10px; background-color: white; border-radius: 5px; }}
                .metric-value {{ font-size: 24px; font-weight: bold; color: #2c3e50; }}
                .metric-label {{ font-size: 12px; color: #7f8c8d; }}
                table {{ border-collapse: collapse; width: 100%; }}
                th, td {{ border: 1px solid #bdc3c7; padding: 6px; text-align: left; }}
                th {{ background-color: #667eea; color: white; }}
            </style>
        </head>
        <body>
            <div class="header">
                <h1>CutPlanner - Plano de Corte</h1>
                <p>Pedido {result.order_number} | {result.timestamp}</p>
            </div>

            <div class="summary">
                <div class="metric">
                    <div class="metric-value">{summary.efficiency:.2f}%</div>
                    <div class="metric-label">Eficiência Total</div>
                </div>
                <div class="metric">
                    <div class="metric-value">{summary.total_stock_used}</div>
                    <div class="metric-label">Barras Usadas</div>
                </div>
                <div class="metric">
                    <div class="metric-value">{format_length(summary.total_waste)}mm</div>
                    <div class="metric-label">Desperdício Total</div>
                </div>
                <div class="metric">
                    <div class="metric-value">{format_length(summary.total_kerf_loss)}mm</div>
                    <div class="metric-label">Perda de Corte</div>
                </div>
                <p>{summary.stock_usage_summary}</p>
            </div>

            <table>
                <tr><th>#</th><th>Barra (mm)</th><th>Cortes (mm)</th><th>Usado (mm)</th><th>Desperdício (mm)</th></tr>
        """

        for i, plan in enumerate(result.plans, 1):
            cuts = ", ".join(format_length(c) for c in plan.cuts)
            html += f"""
                <tr><td>{i}</td><td>{format_length(plan.stock_length)}</td><td>{cuts}</td>
                    <td>{format_length(plan.used_length)}</td><td>{format_length(plan.waste)}</td></tr>
            """

        html += """
            </table>
        </body>
        </html>
        """

        if file_path:
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(html)

        return html


def export_result(result: OptimizationResult, output_dir: str, formats: List[str] = None) -> List[Path]:
    """
    Exporta resultado em múltiplos formatos

    Args:
        result: Resultado da otimização
        output_dir: Diretório de saída
        formats: Lista de formatos (txt, csv, excel, json, html)

    Returns:
        Arquivos gerados
    """
    if formats is None:
        formats = REPORT_FORMATS

    unknown = [f for f in formats if f not in REPORT_FORMATS]
    if unknown:
        raise ValueError(f"Formato desconhecido: {', '.join(unknown)}")

    # Criar diretório se não existir
    Path(output_dir).mkdir(parents=True, exist_ok=True)

    reporter = CutPlannerReporter(result)
    base_path = Path(output_dir) / f"plano_{result.order_number}"
    written = []

    if "txt" in formats:
        path = Path(f"{base_path}.txt")
        path.write_text(reporter.generate_text_report(), encoding='utf-8')
        written.append(path)

    if "csv" in formats:
        path = Path(f"{base_path}.csv")
        reporter.generate_csv_report(str(path))
        written.append(path)

    if "excel" in formats:
        path = Path(f"{base_path}.xlsx")
        reporter.generate_excel_report(str(path))
        written.append(path)

    if "pdf" in formats:
        path = Path(f"{base_path}.pdf")
        reporter.generate_pdf_report(str(path))
        written.append(path)

    if "json" in formats:
        path = Path(f"{base_path}.json")
        reporter.generate_json_report(str(path))
        written.append(path)

    if "html" in formats:
        path = Path(f"{base_path}.html")
        reporter.generate_html_report(str(path))
        written.append(path)

    logger.info("Relatórios exportados para: %s", output_dir)
    return written


def create_visualization(result: OptimizationResult, output_dir: str, show: bool = False) -> List[Path]:
    """
    Cria visualizações do resultado

    Args:
        result: Resultado da otimização
        output_dir: Diretório de saída
        show: Se deve mostrar os gráficos

    Returns:
        Imagens geradas
    """
    # Criar diretório se não existir
    Path(output_dir).mkdir(parents=True, exist_ok=True)

    visualizer = CutPlannerVisualizer(result)
    plans_path = Path(output_dir) / f"plano_{result.order_number}.png"
    summary_path = Path(output_dir) / f"resumo_{result.order_number}.png"

    plt.close(visualizer.plot_cut_plans(str(plans_path), show=show))
    plt.close(visualizer.create_summary_chart(str(summary_path), show=show))

    return [plans_path, summary_path]
