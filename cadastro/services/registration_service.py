"""
cadastro/services/registration_service.py

Purpose: Registration persistence

- Inserts completed registrations into MongoDB
- All-or-nothing: one document per finished attempt
"""

from pymongo.errors import PyMongoError

from cadastro.core.exceptions import PersistenceError
from cadastro.core.logging import get_logger, mask_email
from cadastro.db.mongo import get_registrations_collection
from cadastro.models.registration import RegistrationRecord
from utils.time_utils import utcnow

logger = get_logger(__name__)


class MongoRegistrationRepository:
    """Writes RegistrationRecord documents to the registrations collection."""

    async def save(self, record: RegistrationRecord) -> str:
        """
        Persists a completed registration.

        Args:
            record: Validated registration

        Returns:
            Inserted document id as string

        Raises:
            PersistenceError: if the insert fails
        """
        document = {
            **record.model_dump(),
            "created_at": utcnow(),
        }

        try:
            registrations = get_registrations_collection()
            result = await registrations.insert_one(document)
        except (PyMongoError, RuntimeError) as e:
            logger.error(f"Failed to save registration for {mask_email(record.email)}: {e}")
            raise PersistenceError(details={"email": mask_email(record.email)}) from e

        logger.info(f"✅ Registration saved: {result.inserted_id}")
        return str(result.inserted_id)
