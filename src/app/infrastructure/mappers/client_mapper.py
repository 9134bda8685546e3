from typing import Any

from src.shared.database.base_mapper import BaseEntityMapper
from src.app.core.domain.models import Client, ClientPatch, ClientStatus
from src.app.infrastructure.entities.client_entity import ClientEntity


class ClientMapper(BaseEntityMapper[Client, ClientEntity]):
    """Mapper for converting between Client domain model and ClientEntity."""

    @staticmethod
    def to_entity(model_instance: Client) -> ClientEntity:
        """Convert a Client (domain model) to ClientEntity (database entity)."""
        values = model_instance.model_dump()
        values["status"] = model_instance.status.value
        # client_id comes from the identity column
        if values.get("client_id") is None:
            values.pop("client_id", None)
        return ClientEntity(**values)

    @staticmethod
    def to_model(entity: ClientEntity) -> Client:
        """Convert a ClientEntity (database entity) to Client (domain model)."""
        return Client.model_validate(entity)

    @staticmethod
    def to_update_values(patch: ClientPatch) -> dict[str, Any]:
        """Column values for an UPDATE statement built from a partial update."""
        values = patch.changes()
        status = values.get("status")
        if isinstance(status, ClientStatus):
            values["status"] = status.value
        return values
