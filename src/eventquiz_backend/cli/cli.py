import click

from .admin import principals, roles
from .database import db


@click.group()
def cli():
    pass

cli.add_command(db, "db")
cli.add_command(roles, "roles")
cli.add_command(principals, "principals")

if __name__ == '__main__':
    cli()
