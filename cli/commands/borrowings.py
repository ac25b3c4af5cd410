# cli/commands/borrowings.py
import click
from core.errors import CirculationError
from core.sa.database import Database
from core.sa.models import BorrowingStatus
from core.services import CirculationService
from ..utils import print_borrowing

@click.group()
def borrowings():
    """Circulation reporting commands"""
    pass

@borrowings.command(name='list')
@click.option('--actor', required=True, help='Librarian or admin running the report')
@click.option('--status', type=click.Choice([s.value for s in BorrowingStatus]), default=None,
              help='Only records in this status')
@click.option('--overdue', is_flag=True, default=False, help='Only active loans past their due date')
def list_borrowings(actor: str, status: str, overdue: bool):
    """List borrowing records across all users"""
    with Database().get_db() as session:
        service = CirculationService(session)
        try:
            records = service.list_overdue(actor) if overdue else service.list_all(actor, status=status)
        except CirculationError as e:
            raise click.ClickException(str(e))

        if not records:
            click.echo(click.style("No borrowing records found", fg='yellow'))
            return
        for record in records:
            print_borrowing(record)
        click.echo(click.style(f"\n{len(records)} record(s)", fg='blue'))
