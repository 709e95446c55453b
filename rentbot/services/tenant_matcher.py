"""Landlord-scoped tenant lookup by partial name."""

from dataclasses import dataclass, field
from typing import List, Optional

from rentbot.core.exceptions import ConfigurationError
from rentbot.core.logging import get_logger
from rentbot.models import Tenant
from rentbot.services.database import DatabaseService

logger = get_logger(__name__)

POLICY_FIRST = "first"
POLICY_PROMPT = "prompt"


@dataclass
class TenantMatch:
    """Outcome of a tenant lookup: a chosen tenant, an ambiguity, or nothing."""

    tenant: Optional[Tenant] = None
    candidates: List[Tenant] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.tenant is not None

    @property
    def ambiguous(self) -> bool:
        return self.tenant is None and len(self.candidates) > 1


class TenantMatcher:
    """Case-insensitive substring matching of tenants within a landlord's properties."""

    def __init__(self, database: DatabaseService, policy: str = POLICY_FIRST):
        if policy not in (POLICY_FIRST, POLICY_PROMPT):
            raise ConfigurationError(f"Unknown tenant match policy: {policy}", policy=policy)
        self.database = database
        self.policy = policy

    async def match(self, landlord_id: str, name: str) -> TenantMatch:
        candidates = await self.database.find_tenants(landlord_id, name)
        if not candidates:
            return TenantMatch()
        if len(candidates) == 1:
            return TenantMatch(tenant=candidates[0], candidates=candidates)

        wanted = name.strip().casefold()
        exact = [t for t in candidates if t.name.strip().casefold() == wanted]
        if len(exact) == 1:
            return TenantMatch(tenant=exact[0], candidates=candidates)

        if self.policy == POLICY_PROMPT:
            logger.info("Tenant name is ambiguous, asking landlord", query=name, candidates=len(candidates))
            return TenantMatch(candidates=candidates)

        logger.warning(
            "Tenant name is ambiguous, using first match",
            query=name,
            candidates=[t.name for t in candidates],
            chosen=candidates[0].name,
        )
        return TenantMatch(tenant=candidates[0], candidates=candidates)
