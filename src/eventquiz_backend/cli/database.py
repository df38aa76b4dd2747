import click

from eventquiz_backend.permissions.rls import policy_table, render_drop_policies, render_policies
from eventquiz_backend.permissions.routines import render_routines, render_triggers


@click.command()
@click.option("--drop", is_flag=True, default=False, help="Render the policy drop statements instead.")
def ddl(drop):
    """Print the routines, triggers and row level security policies."""

    if drop:
        statements = render_drop_policies()
    else:
        statements = render_routines() + render_triggers() + render_policies()

    for statement in statements:
        click.echo(statement)
        click.echo()


@click.command()
def policies():
    """Print which policy grants each action on each table."""

    for table, action, name in policy_table():
        click.echo(f"{table:<20} {action:<8} {name}")


@click.group()
def db():
    pass

db.add_command(ddl, "ddl")
db.add_command(policies, "policies")
