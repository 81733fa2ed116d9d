import secrets
from fastapi import Request, HTTPException
from courtbook import config

def _bearer_token(request: Request) -> str:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip()
    return ""

def require_admin(request: Request) -> None:
    """
    Protège les opérations de maintenance par jeton Bearer (ADMIN_API_KEY).
    - Clé configurée + jeton valide: autorisé
    - Clé configurée + jeton absent/faux: 401
    - Clé absente: autorisé seulement en DEBUG, sinon 403 (verrouillé en production)
    """
    key = config.ADMIN_API_KEY
    if not key:
        if config.DEBUG:
            return
        raise HTTPException(status_code=403, detail="ADMIN_API_KEY non configurée")
    token = _bearer_token(request)
    if not token or not secrets.compare_digest(token.encode("utf-8"), key.encode("utf-8")):
        raise HTTPException(status_code=401, detail="Jeton d'administration invalide", headers={"WWW-Authenticate": "Bearer"})
