from enum import Enum


class OrderStatus(str, Enum):
    # checkout synchrone: panier vidé dans la même requête
    COMPLETED = "completed"
    # checkout différé: en attente de la confirmation du fournisseur
    PENDING = "pending"
    # créé par le webhook de paiement
    PAID = "paid"
    # checkout annulé (conflit) dont la suppression compensatoire a échoué
    ABORTED = "aborted"
