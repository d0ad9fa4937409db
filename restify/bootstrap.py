"""Repository boot hook invoked by the registry at registration time."""
import logging

logger = logging.getLogger(__name__)


def boot_repository(repository, registry) -> None:
    """Run the repository's boot hook; exceptions propagate and abort its registration."""
    logger.debug("boot_repository: key=%s class=%s", repository.uri_key(), repository.__qualname__)
    repository.boot(registry)
