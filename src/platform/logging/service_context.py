"""
Service context extraction for client logging.

Identifies which client process produced a log line so interleaved logs
from several booking clients stay traceable.
"""

from functools import lru_cache
import os
import socket

from src.platform.config.core_setting import settings


@lru_cache(maxsize=1)
def get_service_context() -> str:
    client_name = os.getenv('CLIENT_NAME', settings.PROJECT_NAME.lower().replace(' ', '-'))
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')
    return f'{client_name}@{deploy_env}:{socket.gethostname()}:{os.getpid()}'
