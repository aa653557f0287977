"""PDF report export for projection and FIRE results."""

import datetime as dt
import logging
from typing import Any, Dict, List, Optional, Sequence

from fpdf import FPDF

from app.schemas import (
    AfterTaxProjectionResult,
    FireTimeline,
    ProjectionResult,
    ReportError,
    WithdrawalSimulationResult,
)
from app.utils import format_currency, format_percentage

logger = logging.getLogger(__name__)


def _pdf_safe(text: Any) -> str:
    """Core PDF fonts only cover latin-1."""
    return str(text).replace("€", "EUR ").encode("latin-1", "replace").decode("latin-1")


def _pdf_section_header(pdf: FPDF, title: str) -> None:
    pdf.ln(4)
    pdf.set_font("Helvetica", "B", 13)
    pdf.set_text_color(44, 62, 80)
    pdf.cell(0, 8, _pdf_safe(title), new_x="LMARGIN", new_y="NEXT")
    pdf.set_draw_color(44, 62, 80)
    pdf.line(pdf.l_margin, pdf.get_y(), pdf.w - pdf.r_margin, pdf.get_y())
    pdf.set_text_color(0, 0, 0)
    pdf.ln(2)


def _pdf_kv_line(pdf: FPDF, label: str, value: Any, bold_value: bool = False) -> None:
    pdf.set_font("Helvetica", "", 9)
    pdf.cell(60, 5, _pdf_safe(label), new_x="END")
    pdf.set_font("Helvetica", "B" if bold_value else "", 9)
    pdf.cell(0, 5, _pdf_safe(value), new_x="LMARGIN", new_y="NEXT")


def _pdf_table(pdf: FPDF, headers: Sequence[str], rows: List[Sequence[Any]]) -> None:
    usable = pdf.w - pdf.l_margin - pdf.r_margin
    first = 20.0
    other = (usable - first) / max(len(headers) - 1, 1)
    col_widths = [first] + [other] * (len(headers) - 1)

    pdf.set_font("Helvetica", "B", 8)
    pdf.set_fill_color(44, 62, 80)
    pdf.set_text_color(255, 255, 255)
    for i, header in enumerate(headers):
        pdf.cell(col_widths[i], 6, _pdf_safe(header), border=1, align="C", fill=True)
    pdf.ln()
    pdf.set_text_color(0, 0, 0)

    pdf.set_font("Helvetica", "", 8)
    for r, row in enumerate(rows):
        fill = r % 2 == 1
        if fill:
            pdf.set_fill_color(245, 245, 245)
        for i, val in enumerate(row):
            align = "R" if i > 0 else "L"
            pdf.cell(col_widths[i], 5, _pdf_safe(val), border=1, align=align, fill=fill)
        pdf.ln()


class ReportService:
    """Service for building PDF reports from engine results."""

    def __init__(self):
        pass

    def _new_document(self, title: str, description: Optional[str] = None) -> FPDF:
        pdf = FPDF()
        pdf.set_auto_page_break(auto=True, margin=15)
        pdf.set_margins(15, 15, 15)
        pdf.add_page()
        pdf.set_font("Helvetica", "B", 18)
        pdf.cell(0, 12, _pdf_safe(title), align="C", new_x="LMARGIN", new_y="NEXT")
        if description:
            pdf.set_font("Helvetica", "", 10)
            pdf.multi_cell(0, 5, _pdf_safe(description), align="C", new_x="LMARGIN", new_y="NEXT")
        pdf.set_font("Helvetica", "", 8)
        pdf.set_text_color(100, 100, 100)
        generated = dt.datetime.now().strftime("%B %d, %Y at %I:%M %p")
        pdf.cell(0, 6, f"Generated: {generated}", align="C", new_x="LMARGIN", new_y="NEXT")
        pdf.set_text_color(0, 0, 0)
        return pdf

    def _finish(self, pdf: FPDF) -> bytes:
        try:
            return bytes(pdf.output())
        except Exception as e:
            raise ReportError(f"Failed to render PDF report: {e}")

    def build_projection_report(
        self,
        title: str,
        inputs: Dict[str, Any],
        result: ProjectionResult,
        currency: str = "USD",
        description: Optional[str] = None,
    ) -> bytes:
        """PDF with inputs, summary metrics and the yearly projection table."""
        pdf = self._new_document(title, description)

        _pdf_section_header(pdf, "Inputs")
        for label, value in inputs.items():
            _pdf_kv_line(pdf, label, value)

        _pdf_section_header(pdf, "Summary")
        _pdf_kv_line(pdf, "Final value", format_currency(result.final_investment_value, currency), True)
        _pdf_kv_line(pdf, "Total contributions", format_currency(result.total_contributions, currency))
        _pdf_kv_line(pdf, "Total growth", format_currency(result.total_growth, currency))
        if isinstance(result, AfterTaxProjectionResult):
            _pdf_kv_line(pdf, "After-tax value", format_currency(result.final_after_tax_value, currency), True)
            _pdf_kv_line(pdf, "Total tax paid", format_currency(result.total_tax_paid, currency))

        _pdf_section_header(pdf, "Yearly Projection")
        rows = [
            (
                snap.year,
                format_currency(snap.total_investment, currency),
                format_currency(snap.investment_value, currency),
                format_currency(snap.inflation_adjusted_value, currency),
            )
            for snap in result.yearly_projections
        ]
        _pdf_table(pdf, ["Year", "Invested", "Value", "Inflation-adjusted"], rows)

        logger.info(f"Built projection report '{title}' ({len(rows)} years)")
        return self._finish(pdf)

    def build_fire_report(
        self,
        title: str,
        inputs: Dict[str, Any],
        timeline: FireTimeline,
        withdrawal: Optional[WithdrawalSimulationResult] = None,
        currency: str = "USD",
        description: Optional[str] = None,
    ) -> bytes:
        """PDF with the FIRE target, timeline and withdrawal simulation table."""
        pdf = self._new_document(title, description)

        _pdf_section_header(pdf, "Inputs")
        for label, value in inputs.items():
            _pdf_kv_line(pdf, label, value)

        _pdf_section_header(pdf, "FIRE Target")
        _pdf_kv_line(pdf, "FIRE number", format_currency(timeline.fire_number, currency), True)
        if timeline.converged:
            _pdf_kv_line(pdf, "Years to FIRE", f"{timeline.years_to_fire:.1f}")
            _pdf_kv_line(pdf, "FIRE age", f"{timeline.fire_age:.1f}")
        else:
            _pdf_kv_line(pdf, "Years to FIRE", "Not reached within 100 years")

        if withdrawal is not None:
            _pdf_section_header(pdf, f"Withdrawal Simulation ({withdrawal.strategy.label})")
            _pdf_kv_line(pdf, "Outcome", "Sustainable" if withdrawal.is_successful else "Depleted", True)
            _pdf_kv_line(pdf, "Years funded", withdrawal.survival_years)
            _pdf_kv_line(pdf, "Final portfolio", format_currency(withdrawal.final_portfolio_value, currency))
            rows = [
                (
                    rec.year,
                    format_currency(rec.portfolio_value, currency),
                    format_currency(rec.withdrawal, currency),
                    format_currency(rec.inflation_adjusted_expenses, currency),
                    format_percentage(rec.withdrawal_rate, 2),
                )
                for rec in withdrawal.yearly_data
            ]
            _pdf_table(pdf, ["Year", "Portfolio", "Withdrawal", "Expenses", "Rate"], rows)

        logger.info(f"Built FIRE report '{title}'")
        return self._finish(pdf)
