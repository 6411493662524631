"""
Command line entry point for the Soter pipeline scan.
"""

import logging
import pathlib
import sys

import click

from . import conf
from .exceptions import ReportCollectionFailed, ScanError
from .workflow import run_scan


logger = logging.getLogger(__name__)


def init_logging(verbose):
    logging.basicConfig(
        level = logging.DEBUG if verbose else logging.INFO,
        format = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
    )
    # httpx logs every request at INFO, which duplicates our own request logging
    logging.getLogger('httpx').setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.command()
@click.option('--url', help = 'Base URL of the analysis service API.')
@click.option('--username', help = 'Username for the analysis service.')
@click.option('--password', help = 'Password for the analysis service.')
@click.option('--image', help = 'The image to scan, e.g. docker.io/library/nginx:latest.')
@click.option(
    '--policy-bundle-id',
    help = 'Policy bundle to evaluate against. If omitted, the active bundle is used.'
)
@click.option(
    '--analysis-timeout',
    type = click.FLOAT,
    help = 'Minutes to wait for analysis to complete (default: 10).'
)
@click.option(
    '--poll-interval',
    type = click.FLOAT,
    help = 'Seconds between analysis status checks (default: 10).'
)
@click.option(
    '--request-timeout',
    type = click.FLOAT,
    help = 'Timeout for individual HTTP requests in seconds (default: 30).'
)
@click.option(
    '--output-dir', '-o',
    type = click.Path(file_okay = False, path_type = pathlib.Path),
    help = 'Directory to write the reports to (default: current directory).'
)
@click.option('-v', '--verbose', is_flag = True, help = 'Enable debug logging.')
def main(verbose, **options):
    """
    Scan an image with the analysis service and write the reports.

    Any option that is not given is taken from the SOTER_SCAN_* environment variables
    or the configuration file named by SOTER_SCAN_CONFIG.
    """
    init_logging(verbose)
    try:
        settings = conf.load(options)
        result = run_scan(settings)
    except ReportCollectionFailed as exc:
        for outcome in exc.failures:
            logger.error('%s', outcome.as_error())
        click.echo(
            f'Scan of {exc.result.digest} failed: '
            f'{len(exc.failures)} of {len(exc.result.report_outcomes)} reports could not be fetched',
            err = True
        )
        sys.exit(exc.code)
    except ScanError as exc:
        logger.error('%s', exc, exc_info = verbose)
        click.echo(f'Scan failed: {exc}', err = True)
        sys.exit(exc.code)
    click.echo(
        f'Scan of {result.digest} succeeded: '
        f'{len(result.report_outcomes)} reports written'
    )


if __name__ == '__main__':
    main()
