"""
Serve Command - Run the HTTP API
"""

import click

from xlcompare.core.config import get_settings
from xlcompare.utils.logging_setup import setup_logging


@click.command('serve')
@click.option('--host', help='Bind address (default: HOST setting)')
@click.option('--port', type=int, help='Port (default: PORT setting)')
@click.option('--reload', is_flag=True, help='Reload on code changes (development)')
def serve_command(host, port, reload):
    """
    Run the comparison API server.

    \b
    Examples:
      xlcompare serve
      xlcompare serve --host 127.0.0.1 --port 9000
    """
    import uvicorn

    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, str(settings.LOG_DIR) if settings.LOG_DIR else None, component='xlcompare-api')

    uvicorn.run(
        "xlcompare.api.main:app",
        host=host or settings.HOST,
        port=port or settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=reload,
    )
