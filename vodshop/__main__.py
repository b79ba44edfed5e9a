"""
Serveur de développement: `python -m vodshop`.

HOST, PORT, LOG_LEVEL et UVICORN_RELOAD viennent de vodshop.config (.env compris).
Le niveau de LOG_LEVEL s'applique aussi aux loggers `vodshop.*` via la config de logs d'uvicorn.
"""
import copy

import uvicorn
from uvicorn.config import LOGGING_CONFIG

from vodshop import config


def log_config(level: str) -> dict:
    """Config uvicorn par défaut + logger `vodshop` sur le handler 'default'."""
    cfg = copy.deepcopy(LOGGING_CONFIG)
    cfg["loggers"]["vodshop"] = {"handlers": ["default"], "level": level.upper(), "propagate": False}
    return cfg


def main() -> None:
    uvicorn.run(
        "vodshop.asgi:app",
        host=config.HOST,
        port=config.PORT,
        reload=config.UVICORN_RELOAD,
        log_level=config.LOG_LEVEL,
        log_config=log_config(config.LOG_LEVEL),
    )


if __name__ == "__main__":
    main()
