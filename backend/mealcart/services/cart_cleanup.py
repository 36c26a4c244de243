# mealcart/services/cart_cleanup.py
from __future__ import annotations

import logging

from google.api_core.exceptions import FailedPrecondition
from google.cloud.firestore_v1 import FieldFilter

logger = logging.getLogger("mealcart.cleanup")


def prune_empty_carts(db, collection: str) -> int:
    """
    Delete cart documents left with no items (last line removed, never cleared).
    Returns the number of deleted documents.
    """
    deleted = 0
    q = db.collection(collection).where(filter=FieldFilter("items", "==", [])).stream()
    for doc in q:
        # Only delete if nobody wrote to the cart since the query saw it empty
        option = db.write_option(last_update_time=doc.update_time)
        try:
            doc.reference.delete(option=option)
        except FailedPrecondition:
            logger.debug("Cart %s changed while pruning, kept", doc.id)
            continue
        deleted += 1
    if deleted:
        logger.info("Pruned %d empty carts from %s", deleted, collection)
    return deleted
