"""Battery usage reports in the export formats offered to users."""

import csv
import io
from datetime import datetime

from schema import Battery, BatteryAssignment

FORMATS = {
    'csv': ('csv', 'text/csv'),
    'tsv': ('tsv', 'text/tab-separated-values'),
    'txt': ('txt', 'text/plain'),
    'log': ('log', 'text/plain'),
    'md': ('md', 'text/markdown'),
}

HEADER = [
    'Battery ID', 'Voltage', 'Capacity', 'Brand', 'Is Faulty', 'Match ID',
    'Assignment Date', 'Comments'
]


def _local(timestamp: str) -> str:
    return datetime.fromisoformat(timestamp).astimezone().strftime(
        '%m/%d/%Y, %I:%M:%S %p')


def _usage(batteries, assignments):
    """(battery, its assignments, comments per assignment) for each battery."""

    for battery in batteries:
        battery_assignments = [
            a for a in assignments if a.battery_id == battery.id
        ]
        yield battery, [(a, [c for c in battery.comments
                             if c.match_id == a.match_id])
                        for a in battery_assignments]


def _rows(batteries, assignments, delimiter):
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator='\n')
    writer.writerow(HEADER)
    for battery, usage in _usage(batteries, assignments):
        base = [
            battery.id, battery.voltage, battery.capacity, battery.brand or '',
            'Yes' if battery.is_faulty else 'No'
        ]
        if not usage:
            writer.writerow(base +
                            ['', '', '; '.join(c.text
                                               for c in battery.comments)])
        for assignment, comments in usage:
            writer.writerow(base + [
                assignment.match_id,
                _local(assignment.timestamp), '; '.join(c.text
                                                        for c in comments)
            ])
    return buffer.getvalue()


def _txt(batteries, assignments, now):
    lines = ['BATTERY USAGE REPORT', '===================', '']
    lines += [f'Generated: {now:%m/%d/%Y, %I:%M:%S %p}', '']
    for battery, usage in _usage(batteries, assignments):
        lines.append(f'BATTERY: {battery.id}')
        lines.append(f'Voltage: {battery.voltage}V')
        lines.append(f'Capacity: {battery.capacity}Ah')
        if battery.brand:
            lines.append(f'Brand: {battery.brand}')
        lines.append(f'Status: {"FAULTY" if battery.is_faulty else "Working"}')
        lines.append(f'Added: {battery.date_added[:10]}')
        lines.append('')
        if not usage:
            lines.append('No match assignments')
        else:
            lines.append('MATCH ASSIGNMENTS:')
            for assignment, comments in usage:
                lines.append(f'- Match {assignment.match_id} '
                             f'({_local(assignment.timestamp)})')
                if comments:
                    lines.append('  Comments:')
                    lines += [f'  * {c.text}' for c in comments]
        lines += ['', '----------------------------', '']
    return '\n'.join(lines) + '\n'


def _log(batteries, assignments, now):
    lines = [f'[{now.isoformat()}] Battery Usage Log', '']
    for battery, usage in _usage(batteries, assignments):
        brand = f', {battery.brand}' if battery.brand else ''
        lines.append(f'[INFO] Battery {battery.id} ({battery.voltage}V, '
                     f'{battery.capacity}Ah{brand})')
        lines.append(
            f'[INFO] Status: {"FAULTY" if battery.is_faulty else "Working"}')
        if not usage:
            lines.append(f'[WARN] Battery {battery.id} has no match assignments')
        for assignment, comments in usage:
            lines.append(f'[{assignment.timestamp}] Battery {battery.id} '
                         f'assigned to match {assignment.match_id}')
            lines += [
                f'[{c.timestamp}] Comment for match {c.match_id}: {c.text}'
                for c in comments
            ]
        lines.append('')
    return '\n'.join(lines) + '\n'


def _md(batteries, assignments, now):
    lines = ['# Battery Usage Report', '']
    lines += [f'Generated: {now:%m/%d/%Y, %I:%M:%S %p}', '']
    for battery, usage in _usage(batteries, assignments):
        lines += [f'## Battery {battery.id}', '']
        lines.append(f'- **Voltage:** {battery.voltage}V')
        lines.append(f'- **Capacity:** {battery.capacity}Ah')
        if battery.brand:
            lines.append(f'- **Brand:** {battery.brand}')
        lines.append('- **Status:** ' +
                     ('FAULTY' if battery.is_faulty else 'Working'))
        lines += [f'- **Added:** {battery.date_added[:10]}', '']
        if not usage:
            lines += ['*No match assignments*', '']
        else:
            lines += ['### Match Assignments', '']
            lines.append('| Match | Date | Comments |')
            lines.append('|-------|------|----------|')
            for assignment, comments in usage:
                text = '; '.join(c.text for c in comments) or '-'
                lines.append(f'| {assignment.match_id} | '
                             f'{_local(assignment.timestamp)} | {text} |')
            lines.append('')
        lines += ['---', '']
    return '\n'.join(lines) + '\n'


def render_report(fmt: str,
                  batteries: list[Battery],
                  assignments: list[BatteryAssignment],
                  now: datetime | None = None) -> tuple[str, str, str]:
    """
    Render a usage report.

    Args:
        fmt (str): csv, tsv, txt, log or md (anything else means csv)
        batteries (list[Battery]): the roster, with comments
        assignments (list[BatteryAssignment]): current assignments
        now (datetime|None): generation time

    Returns:
        tuple(content, file name, mime type)
    """

    now = now or datetime.now()
    if fmt not in FORMATS:
        fmt = 'csv'
    extension, mimetype = FORMATS[fmt]

    if fmt == 'csv':
        content = _rows(batteries, assignments, ',')
    elif fmt == 'tsv':
        content = _rows(batteries, assignments, '\t')
    elif fmt == 'txt':
        content = _txt(batteries, assignments, now)
    elif fmt == 'log':
        content = _log(batteries, assignments, now)
    else:
        content = _md(batteries, assignments, now)

    filename = f'battery-usage-{now:%Y-%m-%d}.{extension}'
    return content, filename, mimetype
