# cli/utils.py
import click
from core.sa.models import BorrowingRecord, BorrowingStatus

STATUS_COLORS = {
    BorrowingStatus.PENDING.value: 'yellow',
    BorrowingStatus.ACTIVE.value: 'green',
    BorrowingStatus.REJECTED.value: 'red',
    BorrowingStatus.RETURNED.value: 'blue',
}

def format_date(value) -> str:
    return value.strftime('%Y-%m-%d') if value else '-'

def print_borrowing(record: BorrowingRecord) -> None:
    """Print one borrowing record on a single line"""
    if record.is_overdue():
        status = click.style('overdue', fg='red', bold=True)
    else:
        status = click.style(record.status, fg=STATUS_COLORS.get(record.status, 'white'))
    title = record.book.title if record.book else record.book_id
    borrower = record.profile.email if record.profile else record.user_id
    click.echo(
        f"{record.id}  {status:<18} {title[:40]:<40} {borrower:<30} "
        f"due {format_date(record.due_date)}  renewals {record.renewal_count}"
    )
