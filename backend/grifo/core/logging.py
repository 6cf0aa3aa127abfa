"""
Logging estruturado com structlog.

JSON fora do modo DEBUG (Cloud Logging); console colorido em
desenvolvimento. O middleware de requisição vincula request_id, método
e caminho via contextvars, e todos os eventos os herdam.
"""

import logging
import sys

import structlog

from grifo.core.config import settings

# Bibliotecas que poluem o log no nível INFO
RUIDOSOS = ("httpx", "httpcore", "google.auth", "urllib3", "aiosqlite", "celery.app.trace")


def _processadores_base() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def setup_logging(debug: bool | None = None) -> None:
    """
    Configura structlog e o logging da stdlib.

    Chamado no lifespan da API e no boot do worker Celery.
    """
    debug = settings.DEBUG if debug is None else debug

    if debug:
        renderizador: list[structlog.types.Processor] = [
            structlog.dev.ConsoleRenderer(colors=True)
        ]
    else:
        renderizador = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]

    structlog.configure(
        processors=_processadores_base() + renderizador,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
    )

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if debug else logging.WARNING
    )
    for nome in RUIDOSOS:
        logging.getLogger(nome).setLevel(logging.WARNING)

    structlog.contextvars.bind_contextvars(ambiente=settings.ENVIRONMENT)
