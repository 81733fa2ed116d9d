from typing import Optional
from supabase import create_client, Client
from courtbook.config import SUPABASE_URL, SUPABASE_SERVICE_KEY

_service_supabase: Optional[Client] = None

def get_service_supabase() -> Client:
    """
    Client service-role partagé: toutes les lectures/écritures sur 'reservations'.
    Le webhook et la création de commande n'ont pas de session utilisateur, et la table
    n'a pas de policy publique (RLS): aucun client 'anon' n'est nécessaire.
    """
    global _service_supabase
    if not SUPABASE_SERVICE_KEY:
        raise RuntimeError("SUPABASE_SERVICE_KEY manquant pour get_service_supabase()")
    if _service_supabase is None:
        _service_supabase = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _service_supabase
