"""Dependency injection container using dependency-injector library."""
from dependency_injector import containers, providers

from src.app.config import Settings
from src.shared.cache.ttl_cache import TTLCache
from src.shared.database.database import Database, DatabaseSettings
from src.shared.resilience.retry import RetryPolicy

from src.app.infrastructure.mappers.client_mapper import ClientMapper
from src.app.infrastructure.client_repository import ClientRepository

from src.app.core.services.client_service import ClientService
from src.app.core.services.health_service import HealthService


class Container(containers.DeclarativeContainer):
    """Main application dependency injection container."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "src.app.api.v1.clients",
            "src.app.api.v1.health",
        ]
    )

    # =========================================================================
    # CONFIGURATION - Singleton (loaded once, cached)
    # =========================================================================
    config = providers.Singleton(Settings)

    # =========================================================================
    # SINGLETONS - Stateless Mappers (reusable across all requests)
    # =========================================================================
    client_mapper = providers.Singleton(ClientMapper)

    # =========================================================================
    # SINGLETON - Cache (one per process, shared by every service instance)
    # =========================================================================
    cache = providers.Singleton(
        TTLCache.from_settings,
        settings=config.provided.cache,
    )

    retry_policy = providers.Singleton(
        RetryPolicy.from_settings,
        settings=config.provided.retry,
    )

    # =========================================================================
    # SINGLETON - Database (shared connection pool)
    # =========================================================================
    database_settings = providers.Singleton(
        DatabaseSettings,
        db_url=config.provided.database_url,
    )

    database = providers.Singleton(
        Database,
        db_settings=database_settings,
    )

    # =========================================================================
    # FACTORIES - Repositories (per-request, share database singleton)
    # =========================================================================
    client_repository = providers.Factory(
        ClientRepository,
        db=database,
        mapper=client_mapper,
    )

    # =========================================================================
    # FACTORIES - Services
    # =========================================================================
    client_service = providers.Factory(
        ClientService,
        repository=client_repository,
        cache=cache,
        retry_policy=retry_policy,
        cache_settings=config.provided.cache,
    )

    health_service = providers.Factory(
        HealthService,
        repository=client_repository,
    )
