from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font

SUMMARY_SHEET = "summary"
TRANSACTIONS_SHEET = "transactions"

_SUMMARY_ROWS = (
    ("Opening", "opening"),
    ("In", "in"),
    ("Out", "out"),
    ("Closing", "closing"),
    ("Closing Value", "closingValue"),
)


def build_report_workbook(report, *, title=None):
    workbook = Workbook()
    summary_sheet = workbook.active
    summary_sheet.title = SUMMARY_SHEET

    if title:
        summary_sheet.append([title])
        summary_sheet["A1"].font = Font(bold=True)
        summary_sheet.append([])

    summary = report["summary"]
    for label, key in _SUMMARY_ROWS:
        summary_sheet.append([label, summary[key]])

    usage = report["usage"]
    summary_sheet.append([])
    summary_sheet.append(["Usage", usage["total"], usage["measure"]])
    summary_sheet.append(["Usage Value", usage["value"]])

    tx_sheet = workbook.create_sheet(TRANSACTIONS_SHEET)
    tx_sheet.append(["Time", "Flow", "Qty", "Value"])
    for cell in tx_sheet[1]:
        cell.font = Font(bold=True)
    for line in report["transactions"]:
        tx_sheet.append([line["time"], line["flow"], str(line["qty"]), line["value"]])

    return workbook


def report_to_xlsx_bytes(report, *, title=None) -> bytes:
    buffer = BytesIO()
    build_report_workbook(report, title=title).save(buffer)
    return buffer.getvalue()


__all__ = ["build_report_workbook", "report_to_xlsx_bytes"]
