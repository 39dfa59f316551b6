import unittest
from io import BytesIO

from openpyxl import load_workbook

from stockledger.services.report_export import build_report_workbook, report_to_xlsx_bytes

REPORT = {
    "summary": {"opening": 10, "in": 0, "out": 4, "closing": 6, "closingValue": 1.0},
    "transactions": [
        {"time": "05/01/2026", "flow": "Open", "qty": 10, "value": "RM1.00"},
        {"time": "2026-01-10T12:00:00+00:00", "flow": "Out", "qty": "-4", "value": "RM1.00"},
    ],
    "usage": {"total": 4, "value": 4.0, "measure": "kg"},
}


class ReportExportTest(unittest.TestCase):
    def test_workbook_layout(self):
        workbook = build_report_workbook(REPORT)
        self.assertEqual(workbook.sheetnames, ["summary", "transactions"])

        summary = workbook["summary"]
        self.assertEqual(summary["A1"].value, "Opening")
        self.assertEqual(summary["B4"].value, 6)
        self.assertEqual(summary["B5"].value, 1.0)

        transactions = workbook["transactions"]
        self.assertEqual(
            [cell.value for cell in transactions[1]], ["Time", "Flow", "Qty", "Value"]
        )
        self.assertTrue(transactions["A1"].font.bold)
        self.assertEqual(transactions.max_row, 3)
        self.assertEqual(transactions["C3"].value, "-4")

    def test_xlsx_bytes_round_trip_title(self):
        payload = report_to_xlsx_bytes(REPORT, title="Rice stock report")
        self.assertTrue(payload.startswith(b"PK"))

        workbook = load_workbook(BytesIO(payload))
        summary = workbook["summary"]
        self.assertEqual(summary["A1"].value, "Rice stock report")
        self.assertEqual(summary["A3"].value, "Opening")
        self.assertEqual(workbook["transactions"]["B2"].value, "Open")


if __name__ == "__main__":
    unittest.main()
