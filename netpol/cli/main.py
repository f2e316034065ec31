import click

from netpol.utils.logging import setup_logging
from .graph import check_connection_cmd, generate, validate


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enables verbose mode.')
@click.option('--quiet', '-q', is_flag=True, help='Enables quiet mode.')
@click.pass_context
def app(ctx, verbose, quiet):
    """
    netpol: NetworkPolicy compiler CLI.
    """
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet

    if verbose:
        setup_logging(force=True, level="DEBUG")
    elif quiet:
        setup_logging(force=True, level="ERROR")
    else:
        setup_logging()

# Add subcommands
app.add_command(validate, name='validate')
app.add_command(generate, name='generate')
app.add_command(check_connection_cmd, name='check-connection')

if __name__ == '__main__':
    app()
