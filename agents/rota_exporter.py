"""
Rota Exporter Agent - Writes a week's rota to an Excel workbook.
"""
import pandas as pd
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows

from .base_agent import BaseAgent
from communication.message import MessageType
from communication.message_bus import MessageBus
from config import ExportConfig
from models.conflicts import ConflictReport
from models.shift import Shift, ShiftStatus
from scheduling.hours import HoursSummary


def _fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


class RotaExporterAgent(BaseAgent):
    """
    Agent responsible for exporting rotas to Excel.

    Sheets:
    - Rota: one row per shift with assigned staff and staffing status
    - Hours Summary: total, paid and break hours per staff member
    - Conflicts: findings from the last consistency scan (if given)
    """

    ROTA_HEADERS = ["Date", "Day", "Start", "End", "Hours", "Type", "Service",
                    "Required", "Assigned Staff", "Status", "Notes"]

    def __init__(self, message_bus: MessageBus, config: Optional[ExportConfig] = None):
        super().__init__("RotaExporter", message_bus)
        self.config = config or ExportConfig()

        self.header_fill = _fill(self.config.header_color)
        self.header_font = Font(color="FFFFFF", bold=True, size=11)
        self.status_fills = {
            ShiftStatus.UNASSIGNED: _fill(self.config.conflict_color),
            ShiftStatus.UNDERSTAFFED: _fill(self.config.unfilled_color),
        }
        self.conflict_fill = _fill(self.config.conflict_color)
        self.thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

    def execute(self,
                home_id: str,
                week_start: date,
                shifts: List[Shift],
                hours: List[HoursSummary],
                output_path: str = "output",
                staff_names: Optional[Dict[str, str]] = None,
                report: Optional[ConflictReport] = None,
                **kwargs) -> str:
        """
        Generate the Excel rota file.

        Args:
            home_id: Home being exported
            week_start: First day of the week
            shifts: The week's shifts
            hours: Per-staff hours summaries
            output_path: Directory for output files
            staff_names: user id -> display name
            report: Optional conflict scan report

        Returns:
            Path to the generated file
        """
        staff_names = staff_names or {}
        output_dir = Path(output_path)
        output_dir.mkdir(parents=True, exist_ok=True)
        filepath = output_dir / self.config.filename_pattern.format(
            home_id=home_id, week_start=week_start.isoformat()
        )

        self.log(f"Exporting {len(shifts)} shifts for {home_id}, week of {week_start}...")

        wb = Workbook()
        self._create_rota_sheet(wb, shifts, staff_names)
        self._create_hours_sheet(wb, hours)
        sheets = ["Rota", "Hours Summary"]
        if report is not None:
            self._create_conflicts_sheet(wb, report, staff_names)
            sheets.append("Conflicts")
        wb.save(filepath)

        self.send(
            MessageType.EXPORTED,
            {"filepath": str(filepath), "sheets": sheets, "shifts": len(shifts)},
            receiver="Coordinator"
        )
        self.log(f"Rota saved to {filepath}", "success")
        return str(filepath)

    def _write_header(self, ws, headers: List[str], row: int = 1) -> None:
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.border = self.thin_border
            cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    def _create_rota_sheet(self, wb: Workbook, shifts: List[Shift],
                           staff_names: Dict[str, str]) -> None:
        ws = wb.active
        ws.title = "Rota"
        self._write_header(ws, self.ROTA_HEADERS)

        ordered = sorted((s for s in shifts if s.is_active), key=lambda s: (s.date, s.start_time))
        for row, shift in enumerate(ordered, 2):
            values = [
                shift.date.isoformat(),
                shift.date.strftime("%a"),
                shift.start_time,
                shift.end_time,
                shift.duration_hours,
                shift.shift_type.value,
                shift.service_id,
                shift.required_staff_count,
                ", ".join(staff_names.get(u, u) for u in shift.assigned_user_ids),
                shift.status.value,
                shift.notes,
            ]
            status_fill = self.status_fills.get(shift.status)
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = self.thin_border
                if status_fill is not None and col == 10:
                    cell.fill = status_fill

        widths = [12, 6, 8, 8, 7, 12, 14, 9, 36, 14, 30]
        for col, width in enumerate(widths, 1):
            ws.column_dimensions[get_column_letter(col)].width = width
        ws.freeze_panes = "A2"

    def _create_hours_sheet(self, wb: Workbook, hours: List[HoursSummary]) -> None:
        ws = wb.create_sheet("Hours Summary")
        df = pd.DataFrame(
            [h.to_dict() for h in hours],
            columns=["user_id", "name", "shifts", "total_hours", "paid_hours", "break_deductions"],
        )
        df.columns = ["Staff ID", "Name", "Shifts", "Total Hours", "Paid Hours", "Break Deductions"]

        for r_idx, values in enumerate(dataframe_to_rows(df, index=False, header=True), 1):
            for c_idx, value in enumerate(values, 1):
                cell = ws.cell(row=r_idx, column=c_idx, value=value)
                cell.border = self.thin_border
        self._write_header(ws, list(df.columns))

        if not df.empty:
            total_row = len(df) + 2
            ws.cell(row=total_row, column=1, value="TOTAL").font = Font(bold=True)
            ws.cell(row=total_row, column=3, value=int(df["Shifts"].sum()))
            ws.cell(row=total_row, column=4, value=float(df["Total Hours"].sum()))
            ws.cell(row=total_row, column=5, value=float(df["Paid Hours"].sum()))
            ws.cell(row=total_row, column=6, value=float(df["Break Deductions"].sum()))

        for col in range(1, 7):
            ws.column_dimensions[get_column_letter(col)].width = 16

    def _create_conflicts_sheet(self, wb: Workbook, report: ConflictReport,
                                staff_names: Dict[str, str]) -> None:
        ws = wb.create_sheet("Conflicts")
        ws.cell(row=1, column=1, value="CONFLICT REPORT").font = Font(bold=True, size=14)
        ws.cell(row=2, column=1, value="Period:")
        ws.cell(row=2, column=2, value=f"{report.start_date} to {report.end_date}")
        ws.cell(row=3, column=1, value="Assignments checked:")
        ws.cell(row=3, column=2, value=report.assignments_checked)
        ws.cell(row=4, column=1, value="Status:")
        status_cell = ws.cell(row=4, column=2, value="CLEAN" if report.is_clean else "CONFLICTS")
        status_cell.font = Font(color="006400" if report.is_clean else "8B0000", bold=True)

        headers = ["Date", "Start", "End", "Staff", "Conflict", "Message"]
        self._write_header(ws, headers, row=6)
        for row, finding in enumerate(report.findings, 7):
            values = [
                finding.shift.date.isoformat(),
                finding.shift.start_time,
                finding.shift.end_time,
                staff_names.get(finding.user_id, finding.user_id),
                finding.conflict_type.value,
                finding.result.message,
            ]
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = self.thin_border
                cell.fill = self.conflict_fill

        for col, width in enumerate([12, 8, 8, 24, 20, 70], 1):
            ws.column_dimensions[get_column_letter(col)].width = width
