"""Bootstrap module for quick Aureus setup.

Wires a SessionController from configuration, primarily for notebooks and
local testing:
- Loading configuration from TOML files and AUREUS_* variables
- Configuring structured logging
- Creating the message store and generation source

Example usage:

    from aureus.bootstrap import bootstrap
    from aureus.conversation.models import UserIdentity

    controller, ctx = bootstrap()
    me = UserIdentity(user_id="local")
    controller.set_active_conversation("scratch", me)
    result = await controller.submit("Hello!", me)
"""

from dataclasses import dataclass

from aureus.config import Settings, get_settings
from aureus.conversation.store import MessageStore
from aureus.conversation.stores.inmemory import InMemoryMessageStore
from aureus.observability.logging import get_logger, setup_logging_from_config
from aureus.providers.llm import GenerationSource, create_generation_source
from aureus.session.controller import SessionController

logger = get_logger(__name__)


@dataclass
class BootstrapContext:
    """Collaborators created by bootstrap()."""

    settings: Settings
    store: MessageStore
    source: GenerationSource


def bootstrap(
    settings: Settings | None = None,
    store: MessageStore | None = None,
    source: GenerationSource | None = None,
    configure_logging: bool = True,
) -> tuple[SessionController, BootstrapContext]:
    """Build a SessionController with its dependencies.

    Args:
        settings: Settings to use (default: get_settings())
        store: Message store (default: a fresh InMemoryMessageStore)
        source: Generation source (default: from settings.generation)
        configure_logging: Apply settings.observability.logging

    Returns:
        Tuple of (controller, context)
    """
    settings = settings or get_settings()
    if configure_logging:
        setup_logging_from_config(settings.observability.logging)

    store = store or InMemoryMessageStore()
    source = source or create_generation_source(settings.generation)

    controller = SessionController(
        store,
        source,
        reasoning=settings.reasoning,
        config=settings.session,
    )
    logger.info(
        "bootstrap_complete",
        provider=source.provider_name,
        store=type(store).__name__,
        switch_policy=settings.session.switch_policy,
    )
    return controller, BootstrapContext(settings=settings, store=store, source=source)
