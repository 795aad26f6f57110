"""
Vendor directory and collaboration shortlist repositories.
"""

from typing import Any, Dict, List, Optional

import structlog
from bson import ObjectId
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from plannora.models.common import utc_now
from plannora.models.vendor import VendorStatus
from plannora.repositories.base import BaseRepository

logger = structlog.get_logger(__name__)


class VendorRepository(BaseRepository):
    """Read access to the vendor directory."""

    collection_name = "vendors"

    async def list_vendors(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        query = {"category": category} if category else {}
        return await self.find_many(query, sort=[("category", ASCENDING), ("name", ASCENDING)])

    async def find_by_ids(self, vendor_ids: List[ObjectId]) -> Dict[ObjectId, Dict[str, Any]]:
        if not vendor_ids:
            return {}
        documents = await self.find_many({"_id": {"$in": list(set(vendor_ids))}})
        return {document["_id"]: document for document in documents}


class CollaborationVendorRepository(BaseRepository):
    """Vendors shortlisted inside a collaboration."""

    collection_name = "collaborationVendors"

    async def list_for_collaboration(self, collaboration_id: ObjectId) -> List[Dict[str, Any]]:
        return await self.find_many(
            {"collaborationId": collaboration_id},
            sort=[("createdAt", ASCENDING)],
        )

    async def add_vendor(
        self,
        collaboration_id: ObjectId,
        vendor_id: ObjectId,
        added_by: Any,
        status: VendorStatus = VendorStatus.CONSIDERING,
    ) -> Dict[str, Any]:
        """
        Shortlist a vendor.

        Raises:
            ValueError: If the vendor is already on the shortlist
        """
        existing = await self._run(
            self.collection.find_one,
            {"collaborationId": collaboration_id, "vendorId": vendor_id},
        )
        if existing:
            raise ValueError("Vendor already added")

        now = utc_now()
        document = {
            "collaborationId": collaboration_id,
            "vendorId": vendor_id,
            "addedBy": added_by,
            "status": status.value,
            "createdAt": now,
            "updatedAt": now,
        }
        try:
            await self.insert(document)
        except DuplicateKeyError as e:
            raise ValueError("Vendor already added") from e

        logger.info(
            "collaboration_vendor_added",
            collaboration_id=str(collaboration_id),
            vendor_id=str(vendor_id),
        )
        return document

    async def set_status(
        self,
        collaboration_id: ObjectId,
        vendor_id: ObjectId,
        status: VendorStatus,
    ) -> Optional[Dict[str, Any]]:
        return await self._run(
            self.collection.find_one_and_update,
            {"collaborationId": collaboration_id, "vendorId": vendor_id},
            {"$set": {"status": status.value, "updatedAt": utc_now()}},
            return_document=ReturnDocument.AFTER,
        )

    async def remove_vendor(self, collaboration_id: ObjectId, vendor_id: ObjectId) -> bool:
        result = await self._run(
            self.collection.delete_one,
            {"collaborationId": collaboration_id, "vendorId": vendor_id},
        )
        if result.deleted_count:
            logger.info(
                "collaboration_vendor_removed",
                collaboration_id=str(collaboration_id),
                vendor_id=str(vendor_id),
            )
        return result.deleted_count > 0
