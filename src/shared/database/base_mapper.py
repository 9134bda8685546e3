import abc
from collections.abc import Iterable
from typing import Generic, TypeVar


TModel = TypeVar("TModel")
TEntity = TypeVar("TEntity")


class BaseEntityMapper(abc.ABC, Generic[TModel, TEntity]):
    """Converts between a domain model and its database entity."""

    @staticmethod
    @abc.abstractmethod
    def to_entity(model_instance: TModel) -> TEntity:
        pass

    @staticmethod
    @abc.abstractmethod
    def to_model(entity: TEntity) -> TModel:
        pass

    def to_models(self, entities: Iterable[TEntity]) -> list[TModel]:
        return [self.to_model(entity) for entity in entities]
