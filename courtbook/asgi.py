"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (ex: gunicorn avec workers uvicorn) importe `courtbook.asgi:app`.
- Toute la configuration (routes, middlewares, lifespan, balayage TTL) est centralisée
  dans courtbook.app_setup.factory; ce fichier ne fait qu'exposer l'instance `app`.
"""

from courtbook.app_setup import create_app

app = create_app()
