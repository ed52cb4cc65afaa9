"""
PackSync - Security Package

Pluggable authentication strategies and the factory that builds one from
the 'security' configuration section.

Author: PackSync Project
"""

import logging
from typing import Any, Dict, Optional

from ..exceptions import PackSyncConfigError
from .base import SecurityStrategy
from .keypair import KeyPairSecurityStrategy
from .none import NoSecurityStrategy
from .password import PasswordSecurityStrategy

# Configure logging
logger = logging.getLogger(__name__)

STRATEGIES = {
    NoSecurityStrategy.name: NoSecurityStrategy,
    PasswordSecurityStrategy.name: PasswordSecurityStrategy,
    KeyPairSecurityStrategy.name: KeyPairSecurityStrategy,
}


def create_security_strategy(settings: Optional[Dict[str, Any]] = None) -> SecurityStrategy:
    """
    Build, validate and initialize the strategy named by settings["type"].

    Args:
        settings: The 'security' configuration section. None or a missing
                  type selects "none".

    Returns:
        Initialized SecurityStrategy

    Raises:
        PackSyncConfigError: If the type is unknown or its settings are invalid
    """
    settings = settings or {}
    strategy_type = str(settings.get("type") or NoSecurityStrategy.name).lower()

    strategy_class = STRATEGIES.get(strategy_type)
    if strategy_class is None:
        raise PackSyncConfigError(
            f"Unknown security type '{strategy_type}'. Must be one of: {', '.join(STRATEGIES)}"
        )

    strategy = strategy_class()
    strategy.validate_configuration(settings)
    strategy.initialize(settings)
    logger.info(f"Using '{strategy_type}' security")
    return strategy


__all__ = [
    'SecurityStrategy',
    'NoSecurityStrategy',
    'PasswordSecurityStrategy',
    'KeyPairSecurityStrategy',
    'STRATEGIES',
    'create_security_strategy'
]
