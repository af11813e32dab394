"""AWS Lambda entry point for the sample app (managed Python runtime).

Event source, lifespan and encoding overrides come from the environment, see
src/config/settings.py. For a custom runtime use ``python -m src.cli serve``.
"""

from src.hosting.server import LambdaRuntimeSupportServer
from src.logging.hosting import setup_logging
from src.main import app

setup_logging()

server = LambdaRuntimeSupportServer.from_settings(app)
handler = server.create_lambda_handler()
