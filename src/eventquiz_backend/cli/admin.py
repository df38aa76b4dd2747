import json

import click

from eventquiz_backend.cli.utils import acting_principal, handle_api_exceptions, session
from eventquiz_backend.model.role import AppRole
from eventquiz_backend.services.identity import IdentityService
from eventquiz_backend.services.roles import RoleService

ROLE_CHOICES = [role.value for role in AppRole]


@click.command()
@click.option("--user", "-u", "user_id", required=True)
@click.option("--role", "-r", type=click.Choice(ROLE_CHOICES), required=True)
@click.option("--as", "acting_id", help="Principal performing the grant.")
@click.option("--seed", is_flag=True, default=False, help="Grant without policy evaluation (first administrator).")
@handle_api_exceptions
def grant(user_id, role, acting_id, seed):

    with session(acting_id) as db:
        service = RoleService(db)
        if seed:
            result = service.seed_role(user_id, role)
        else:
            result = service.grant_role(acting_principal(db, acting_id), user_id, role)
        click.echo(f"{result.user_id} {result.role.value}")


@click.command()
@click.option("--user", "-u", "user_id", required=True)
@click.option("--role", "-r", type=click.Choice(ROLE_CHOICES), required=True)
@click.option("--as", "acting_id", required=True, help="Principal performing the revocation.")
@handle_api_exceptions
def revoke(user_id, role, acting_id):

    with session(acting_id) as db:
        RoleService(db).revoke_role(acting_principal(db, acting_id), user_id, role)
        click.echo(f"Revoked {role} from {user_id}")


@click.command("list")
@click.option("--user", "-u", "user_id")
@click.option("--as", "acting_id", required=True, help="Principal listing the grants.")
@handle_api_exceptions
def list_roles(user_id, acting_id):

    with session(acting_id) as db:
        for grant in RoleService(db).list_roles(acting_principal(db, acting_id), user_id):
            click.echo(f"{grant.user_id} {grant.role.value}")


@click.group()
def roles():
    pass

roles.add_command(grant, "grant")
roles.add_command(revoke, "revoke")
roles.add_command(list_roles, "list")


def parse_metadata(ctx, param, value):
    if not value:
        return {}
    try:
        metadata = json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e.msg}")
    if not isinstance(metadata, dict):
        raise click.BadParameter("must be a JSON object")
    return metadata


@click.command()
@click.option("--email", "-e", required=True)
@click.option("--display-name", "-n", "display_name")
@click.option("--metadata", "-m", "user_metadata", callback=parse_metadata, help="Principal metadata as a JSON object.")
@handle_api_exceptions
def create_principal(email, display_name, user_metadata):

    if display_name is not None:
        user_metadata["display_name"] = display_name

    with session() as db:
        user = IdentityService(db).create_principal(email, user_metadata)
        click.echo(user.id)


@click.command()
@click.argument("user_id")
@handle_api_exceptions
def delete_principal(user_id):

    with session() as db:
        IdentityService(db).delete_principal(user_id)
        click.echo(f"Deleted {user_id}")


@click.group()
def principals():
    pass

principals.add_command(create_principal, "create")
principals.add_command(delete_principal, "delete")
