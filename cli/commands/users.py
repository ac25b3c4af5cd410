# cli/commands/users.py
import click
from core.errors import CirculationError
from core.sa.database import Database
from core.sa.models import AppRole
from core.sa.repositories import UserRepository
from core.services import AccountService

ROLE_CHOICE = click.Choice([r.value for r in AppRole])

@click.group()
def users():
    """User and role management commands"""
    pass

@users.command()
@click.argument('user_id')
@click.option('--email', required=True, help='Email address of the account')
@click.option('--name', 'full_name', default=None, help='Display name')
def register(user_id: str, email: str, full_name: str):
    """Register an identity as if the sign-up hook had fired"""
    with Database().get_db() as session:
        try:
            profile = AccountService(session).register(user_id, email, full_name)
        except ValueError as e:
            raise click.ClickException(str(e))
        click.echo(click.style(f"Registered {profile.id} <{profile.email}> as student", fg='green'))

@users.command()
@click.argument('user_id')
def bootstrap_admin(user_id: str):
    """Grant admin directly in the database, for creating the first administrator"""
    with Database().get_db() as session:
        repo = UserRepository(session)
        if repo.get_by_id(user_id) is None:
            raise click.ClickException(f"User {user_id} is not registered")
        if AppRole.ADMIN.value in repo.get_roles(user_id):
            click.echo(click.style(f"{user_id} is already an admin", fg='yellow'))
            return
        repo.add_role(user_id, AppRole.ADMIN.value)
    click.echo(click.style(f"{user_id} is now an admin", fg='green'))

@users.command()
@click.option('--actor', required=True, help='Admin performing the change')
@click.argument('user_id')
@click.argument('role', type=ROLE_CHOICE)
def grant(actor: str, user_id: str, role: str):
    """Grant ROLE to USER_ID"""
    with Database().get_db() as session:
        try:
            AccountService(session).grant_role(actor, user_id, role)
        except (CirculationError, ValueError) as e:
            raise click.ClickException(str(e))
    click.echo(click.style(f"Granted {role} to {user_id}", fg='green'))

@users.command()
@click.option('--actor', required=True, help='Admin performing the change')
@click.argument('user_id')
@click.argument('role', type=ROLE_CHOICE)
def revoke(actor: str, user_id: str, role: str):
    """Revoke ROLE from USER_ID"""
    with Database().get_db() as session:
        try:
            AccountService(session).revoke_role(actor, user_id, role)
        except (CirculationError, ValueError) as e:
            raise click.ClickException(str(e))
    click.echo(click.style(f"Revoked {role} from {user_id}", fg='green'))

@users.command(name='list')
@click.option('--actor', required=True, help='Admin listing the users')
def list_users(actor: str):
    """List users and their roles"""
    with Database().get_db() as session:
        try:
            profiles = AccountService(session).list_users(actor)
        except CirculationError as e:
            raise click.ClickException(str(e))
        for profile in profiles:
            roles = ", ".join(profile.role_names) or "no roles"
            click.echo(click.style(profile.id, fg='cyan') + f"  {profile.full_name} <{profile.email}>  " +
                       click.style(roles, fg='blue'))
