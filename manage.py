#!/usr/bin/env python3
"""
WK Poule Management CLI

This script provides command-line management functionality for the WK Poule
scoring service. The same commands are available through ``flask`` once
FLASK_APP points at run.py. Meant to be called from cron after results are
entered, e.g. ``python3 manage.py score all``.
"""

import click

from wkpoule import create_app
from wkpoule.cli import db_cmd, db_migrate, results, rules, score, status

app = create_app()


@click.group()
def cli():
    """WK Poule Management CLI"""
    pass


for command in (score, results, rules, db_cmd, db_migrate, status):
    cli.add_command(command)


if __name__ == "__main__":
    with app.app_context():
        cli()
