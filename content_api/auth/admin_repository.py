"""Repository for admin accounts."""

from bson import ObjectId
from bson.errors import InvalidId
from pydantic_mongo import AsyncAbstractRepository

from content_api.mongodb.client import get_mongodb_client
from content_api.mongodb.schemas import AdminDocument


class AdminRepository(AsyncAbstractRepository[AdminDocument]):
    """Repository for storing and retrieving admin accounts."""

    class Meta:  # pyright: ignore[reportIncompatibleVariableOverride]
        collection_name = "admins"

    @classmethod
    def create(cls) -> "AdminRepository":
        """Create a repository instance with the default database."""
        client = get_mongodb_client()
        return cls(client.database)  # pyright: ignore[reportArgumentType]

    async def get_admin(self, admin_id: str) -> AdminDocument | None:
        """Get an admin by ID, or ``None`` if the id is unknown or malformed."""
        try:
            return await self.find_one_by_id(ObjectId(admin_id))
        except InvalidId:
            return None

    async def get_by_email(self, email: str) -> AdminDocument | None:
        return await self.find_one_by({"email": email.lower()})

    async def create_admin(self, email: str, password_hash: str) -> AdminDocument:
        """Create an admin account.

        Args:
            email: Login email, stored lower-cased.
            password_hash: bcrypt hash of the password.

        Returns:
            The created AdminDocument with ID populated.
        """
        doc = AdminDocument(email=email.lower(), password_hash=password_hash)
        await self.save(doc)
        return doc
