"""
utils/export.py — Excel export of the garden using openpyxl.

Generates an .xlsx workbook with two sheets and styled header rows:
- Plants: Slot, Name, Species, Rarity, GP, Growth %, Condition, Mutations
- Sessions: Started, Minutes, Status, Elapsed (min)
"""

from datetime import datetime
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from care_engine import condition_label
from growth_rules import growth_percentage, ms_to_minutes
from models import Condition, Rarity
from species import display_name, get_species


RARITY_FILLS = {
    Rarity.COMMON: PatternFill(start_color='9E9E9E', end_color='9E9E9E', fill_type='solid'),
    Rarity.RARE: PatternFill(start_color='1E88E5', end_color='1E88E5', fill_type='solid'),
    Rarity.EPIC: PatternFill(start_color='8E24AA', end_color='8E24AA', fill_type='solid'),
}

CONDITION_FILLS = {
    Condition.DEAD: PatternFill(start_color='424242', end_color='424242', fill_type='solid'),
    Condition.DISEASED: PatternFill(start_color='D32F2F', end_color='D32F2F', fill_type='solid'),
    Condition.CRITICAL: PatternFill(start_color='F57C00', end_color='F57C00', fill_type='solid'),
}

HEADER_FONT = Font(name='Calibri', bold=True, color='FFFFFF', size=11)
HEADER_FILL = PatternFill(start_color='2E7D32', end_color='2E7D32', fill_type='solid')
HEADER_ALIGNMENT = Alignment(horizontal='center', vertical='center', wrap_text=True)
HEADER_BORDER = Border(
    bottom=Side(style='thin', color='1B5E20'),
    right=Side(style='thin', color='E2E8F0'),
)
CELL_BORDER = Border(
    bottom=Side(style='thin', color='E2E8F0'),
    right=Side(style='thin', color='E2E8F0'),
)

PLANT_COLUMNS = ['Slot', 'Name', 'Species', 'Rarity', 'GP', 'Growth %', 'Condition', 'Mutations']
SESSION_COLUMNS = ['Started', 'Minutes', 'Status', 'Elapsed (min)']


def _write_header(ws, columns):
    for col_idx, col_name in enumerate(columns, 1):
        cell = ws.cell(row=1, column=col_idx, value=col_name)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = HEADER_ALIGNMENT
        cell.border = HEADER_BORDER
    ws.freeze_panes = 'A2'


def _format_time(ms):
    if ms is None:
        return ''
    return datetime.fromtimestamp(ms / 1000).strftime('%Y-%m-%d %H:%M')


def _build_plants_sheet(ws, plants, condition_names):
    _write_header(ws, PLANT_COLUMNS)

    for row_idx, plant in enumerate(sorted(plants, key=lambda p: p.slot_index), 2):
        species = get_species(plant.species_id)
        condition = condition_label(plant)
        values = [
            plant.slot_index + 1,
            display_name(plant),
            species.name if species else plant.species_id,
            species.rarity.value if species else '',
            plant.growth_points,
            round(growth_percentage(plant.growth_points), 1),
            condition_names.get(condition.value, condition.value),
            ', '.join(m.value for m in plant.mutations),
        ]
        for col_idx, value in enumerate(values, 1):
            ws.cell(row=row_idx, column=col_idx, value=value).border = CELL_BORDER

        if species and species.rarity in RARITY_FILLS:
            rarity_cell = ws.cell(row=row_idx, column=4)
            rarity_cell.fill = RARITY_FILLS[species.rarity]
            rarity_cell.font = Font(color='FFFFFF', bold=True)
        if condition in CONDITION_FILLS:
            condition_cell = ws.cell(row=row_idx, column=7)
            condition_cell.fill = CONDITION_FILLS[condition]
            condition_cell.font = Font(color='FFFFFF', bold=True)

    for letter, width in zip('ABCDEFGH', (8, 20, 22, 10, 8, 10, 14, 30)):
        ws.column_dimensions[letter].width = width


def _build_sessions_sheet(ws, sessions):
    _write_header(ws, SESSION_COLUMNS)

    for row_idx, session in enumerate(sessions, 2):
        elapsed = ''
        if session.started_at is not None and session.ended_at is not None:
            elapsed = round(ms_to_minutes(session.ended_at - session.started_at), 1)
        values = [_format_time(session.started_at), int(session.minutes), session.status.value, elapsed]
        for col_idx, value in enumerate(values, 1):
            ws.cell(row=row_idx, column=col_idx, value=value).border = CELL_BORDER

    for letter, width in zip('ABCD', (18, 10, 14, 14)):
        ws.column_dimensions[letter].width = width


def generate_excel(plants, sessions, condition_names=None):
    """
    Build the garden workbook.

    Args:
        plants: Plants to list.
        sessions: Sessions to list, in display order.
        condition_names: Optional condition value → display label mapping.

    Returns:
        BytesIO positioned at the start of the .xlsx content.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = 'Plants'
    _build_plants_sheet(ws, plants, condition_names or {})
    _build_sessions_sheet(wb.create_sheet('Sessions'), sessions)

    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output
