# Services package
from occasions.services.shopify_client import ShopifyClient
from occasions.services.metaobject_service import MetaobjectService
from occasions.services.ledger_service import LedgerService, ReconcileResult
from occasions.services.occasion_service import OccasionService
from occasions.services.definition_service import DefinitionService

__all__ = [
    "ShopifyClient",
    "MetaobjectService",
    "LedgerService",
    "ReconcileResult",
    "OccasionService",
    "DefinitionService",
]
