"""Repository for sponsors and partners."""

from content_api.mongodb.repositories.ordered_repository import OrderedRepository
from content_api.mongodb.schemas import SponsorDocument, SponsorType
from content_api.ordering.listing import ChainedListing
from content_api.ordering.partition import OrderingPolicy


class SponsorRepository(OrderedRepository[SponsorDocument]):
    """Sponsors and partners are ordered independently of each other."""

    policy = OrderingPolicy(
        collection="sponsors",
        entity="Sponsor",
        flag_field="active",
        scope_fields=("type",),
    )
    document_type = SponsorDocument

    async def list_grouped(self) -> dict[str, list[SponsorDocument]]:
        """Active sponsors and partners, each in display order."""
        return {
            "sponsors": await self.list_public({"type": SponsorType.SPONSOR}),
            "partners": await self.list_public({"type": SponsorType.PARTNER}),
        }

    async def list_admin_all(self) -> list[SponsorDocument]:
        """Active sponsors, then active partners, then every inactive entry by recency."""
        manager = self._manager
        listing = ChainedListing(
            manager.list_active({"type": SponsorType.SPONSOR}),
            manager.list_active({"type": SponsorType.PARTNER}),
            manager.list_inactive({"type": SponsorType.SPONSOR}),
            manager.list_inactive({"type": SponsorType.PARTNER}),
        )
        return self.to_documents(await listing.to_list())

    async def list_admin_for(self, document: SponsorDocument) -> list[SponsorDocument]:
        return await self.list_admin_all()
