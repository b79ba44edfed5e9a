"""
ASGI entrypoint: `uvicorn vodshop.asgi:app` (ou gunicorn -k uvicorn.workers.UvicornWorker).
Les logs sont ceux du serveur ASGI; en local, préférer `python -m vodshop`.
"""

from vodshop.app import app

__all__ = ["app"]
