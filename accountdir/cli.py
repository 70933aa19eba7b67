"""
Maintenance commands for the account directory.

Settings are read from the environment, as for the web service:

.. code-block:: bash

   $ STORE_BACKEND=s3 S3_BUCKET=click.accountdata accountdir rebuild-indexes
   $ accountdir rebuild-indexes --policy destructive --yes

"""

import json
import logging

import click

from . import config
from .app_logging import setup_logger
from .directory import AccountDirectory
from .domain import Policy
from .exceptions import StorageError
from .settings import Settings

logger = logging.getLogger(__name__)


@click.group()
@click.pass_context
def main(ctx: click.Context) -> None:
    """Manage the account directory."""
    settings = Settings.from_mapping({
        name: getattr(config, name) for name in dir(config) if name.isupper()
    })
    setup_logger(settings.log_level, settings.log_json)
    ctx.obj = settings


@main.command('rebuild-indexes')
@click.option('--policy', type=click.Choice([p.value for p in Policy]),
              default=Policy.ADDITIVE.value, show_default=True,
              help='additive writes missing entries; destructive clears and '
                   'regenerates every entry.')
@click.option('--yes', is_flag=True,
              help='Do not ask before a destructive rebuild.')
@click.pass_obj
def rebuild_indexes(settings: Settings, policy: str, yes: bool) -> None:
    """Reconcile the username and email indexes with the account records."""
    chosen = Policy(policy)
    if chosen is Policy.DESTRUCTIVE and not yes:
        click.confirm('Logins will fail for some accounts until the rebuild '
                      'finishes. Continue?', abort=True)
    directory = AccountDirectory.from_settings(settings)
    try:
        report = directory.rebuild_all(chosen)
    except StorageError as e:
        logger.error('Rebuild aborted: %s', e)
        raise click.ClickException(f'Rebuild aborted: {e}') from e
    click.echo(json.dumps(report.to_dict(), indent=2))


if __name__ == '__main__':
    main()
