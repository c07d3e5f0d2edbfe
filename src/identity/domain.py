"""Identity bounded context: customers, their address book and contact messages."""

from protean.domain import Domain

from shared.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
identity = Domain(name="identity")
