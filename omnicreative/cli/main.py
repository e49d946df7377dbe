"""
Main CLI entry point for OmniCreative
"""

import logging
import subprocess
import sys
from pathlib import Path

import click

from .. import __version__
from ..core.config import Config
from ..core.observability import setup_logfire
from .chat import chat, generate


@click.group()
@click.version_option(version=__version__)
def cli():
    """
    OmniCreative - AI creative director

    Strategic copywriting, market research, image and video generation
    on Google Gemini and Veo.
    """
    logging.basicConfig(level=Config.LOG_LEVEL)
    setup_logfire()


@click.command()
def ui():
    """Launch the Streamlit dashboard."""
    app_path = Path(__file__).resolve().parent.parent / "ui" / "app.py"
    raise SystemExit(subprocess.call([sys.executable, "-m", "streamlit", "run", str(app_path)]))


# Register commands
cli.add_command(chat)
cli.add_command(generate)
cli.add_command(ui)


if __name__ == '__main__':
    cli()
