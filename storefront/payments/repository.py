"""
Accès aux données pour la feature 'payments' (écritures sur la table des commandes).
Les erreurs Supabase sont remontées en PersistenceError: le service décide
(elles ne bloquent jamais le paiement).
"""
from typing import Any, Dict, Iterable, List

# Importer le module (et non les fonctions) pour rester patchable en tests
import storefront.infra.supabase_client as supabase_client
from storefront.config import Settings
from .errors import PersistenceError

# module storefront.payments.repository
def insert_pending_order(order: Dict[str, Any], settings: Settings) -> dict:
    """
    Insère une commande 'pending' via service-role.
    - Retourne la ligne insérée, ou le payload si la réponse ne contient pas la ligne
      (certaines versions de supabase-py ne la renvoient pas).
    """
    try:
        res = (
            supabase_client.get_service_supabase(settings)
            .table(settings.orders_table)
            .insert(order)
            .execute()
        )
    except Exception as e:
        raise PersistenceError(f"order insert failed ({order.get('order_number')}): {e}") from e
    rows = getattr(res, "data", None) or []
    if isinstance(rows, list) and rows:
        return rows[0]
    return dict(order)

def update_order_by_session(
    session_id: str,
    data: Dict[str, Any],
    settings: Settings,
    only_statuses: Iterable[str],
) -> List[dict]:
    """
    Met à jour la commande jointe par payment_session_id.
    - only_statuses: seules les lignes dont le statut courant est dans cette liste sont touchées
      (pending -> {paid, failed}, jamais de retour arrière).
    - Retourne les lignes mises à jour ([] si aucune ne correspond).
    """
    try:
        res = (
            supabase_client.get_service_supabase(settings)
            .table(settings.orders_table)
            .update(data)
            .eq("payment_session_id", session_id)
            .in_("status", list(only_statuses))
            .execute()
        )
    except Exception as e:
        raise PersistenceError(f"order update failed (session_id={session_id}): {e}") from e
    return getattr(res, "data", None) or []
