# backend/export/excel_export.py

import time
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

VOTES_SHEET = 'Voting Results'
SUMMARY_SHEET = 'Summary'

VOTE_COLUMNS = [
    ('IP Address', 'ip_address', 25),
    ('Voted For', 'candidate_name', 25),
    ('Timestamp', 'timestamp', 20),
]
SUMMARY_COLUMNS = [
    ('Candidate', 25),
    ('Total Votes', 15),
]


def _write_header(sheet, headers, color):
    sheet.append([header for header, _ in headers])
    for index, (_, width) in enumerate(headers, start=1):
        cell = sheet.cell(row=1, column=index)
        cell.font = Font(bold=True)
        cell.fill = PatternFill(fill_type='solid', fgColor=color)
        sheet.column_dimensions[cell.column_letter].width = width


def build_audit_workbook(vote_rows, summary_rows) -> BytesIO:
    """
    Build the audit export: one sheet of raw votes, one per-candidate summary.

    vote_rows: dicts with ip_address, candidate_name, timestamp
    summary_rows: (candidate_name, vote_count) pairs
    """
    workbook = Workbook()

    votes_sheet = workbook.active
    votes_sheet.title = VOTES_SHEET
    _write_header(votes_sheet, [(header, width) for header, _, width in VOTE_COLUMNS], 'FF4CAF50')
    for row in vote_rows:
        votes_sheet.append([row.get(key) for _, key, _ in VOTE_COLUMNS])

    summary_sheet = workbook.create_sheet(SUMMARY_SHEET)
    _write_header(summary_sheet, SUMMARY_COLUMNS, 'FF2196F3')
    for candidate_name, vote_count in summary_rows:
        summary_sheet.append([candidate_name, vote_count])

    buffer = BytesIO()
    workbook.save(buffer)
    buffer.seek(0)
    return buffer


def export_filename():
    return f"voting_results_{int(time.time() * 1000)}.xlsx"
