"""Database service integration with Supabase."""

from typing import Any, List, Optional

from pydantic import ValidationError
from supabase import Client, create_client

from rentbot.core.config import get_settings
from rentbot.core.exceptions import DatabaseConnectionError, DatabaseError
from rentbot.core.logging import get_logger
from rentbot.models import Landlord, NewPayment, Payment, PaymentDetails, Tenant

logger = get_logger(__name__)

TENANT_COLUMNS = "id, name, phone, properties!inner(id, address, landlord_id)"
PAYMENT_DETAIL_COLUMNS = "*, tenants(name, phone, properties(address, landlords(name, phone, email)))"


class DatabaseService:
    """Service for landlord, tenant and payment queries using Supabase."""

    def __init__(self, client: Optional[Client] = None):
        if client is None:
            settings = get_settings()
            client = create_client(str(settings.supabase_url), settings.supabase_key)
        self.client = client

    async def test_connection(self) -> bool:
        """Probe the landlords table; raises DatabaseConnectionError on failure."""
        try:
            self.client.table("landlords").select("id").limit(1).execute()
            logger.info("Supabase connected")
            return True
        except Exception as e:
            logger.error("Supabase connection failed", error=str(e))
            raise DatabaseConnectionError(str(e)) from e

    async def health_check(self) -> bool:
        """Non-raising variant of test_connection for health endpoints."""
        try:
            return await self.test_connection()
        except DatabaseConnectionError:
            return False

    # Landlords
    async def find_landlord_by_phone(self, phone: str) -> Optional[Landlord]:
        """Exact-match lookup of a landlord by normalized phone."""
        try:
            response = self.client.table("landlords").select("*").eq("phone", phone).execute()
        except Exception as e:
            logger.error("Failed to look up landlord", error=str(e))
            raise DatabaseError(str(e), operation="find_landlord") from e

        rows = response.data if response and response.data else []
        if not rows:
            return None
        if len(rows) > 1:
            logger.warning("Multiple landlords share a phone number", count=len(rows), landlord_id=rows[0].get("id"))
        return self._validate(Landlord, rows[0], "find_landlord")

    # Tenants
    async def find_tenants(self, landlord_id: str, name: str) -> List[Tenant]:
        """Tenants of the landlord's properties whose name contains ``name``."""
        try:
            response = (
                self.client.table("tenants")
                .select(TENANT_COLUMNS)
                .eq("properties.landlord_id", landlord_id)
                .ilike("name", f"%{name}%")
                .execute()
            )
        except Exception as e:
            logger.error("Failed to query tenants", landlord_id=landlord_id, error=str(e))
            raise DatabaseError(str(e), operation="find_tenants") from e

        rows = response.data if response and response.data else []
        return [self._validate(Tenant, row, "find_tenants") for row in rows]

    # Payments
    async def insert_payment(self, payment: NewPayment) -> Payment:
        """Insert a payment row and return it as stored."""
        try:
            response = self.client.table("payments").insert(payment.to_row()).execute()
        except Exception as e:
            logger.error("Failed to insert payment", tenant_id=payment.tenant_id, error=str(e))
            raise DatabaseError(str(e), operation="insert_payment") from e

        if not response or not response.data:
            raise DatabaseError("Insert returned no row", operation="insert_payment")
        return self._validate(Payment, response.data[0], "insert_payment")

    async def find_payment_for_period(self, tenant_id: str, period: str) -> Optional[Payment]:
        """Latest payment for ``(tenant_id, period)``; duplicates are tolerated."""
        try:
            response = (
                self.client.table("payments")
                .select("id, amount, period, recorded_at, payment_method")
                .eq("tenant_id", tenant_id)
                .eq("period", period)
                .order("recorded_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("Failed to query payment", tenant_id=tenant_id, period=period, error=str(e))
            raise DatabaseError(str(e), operation="find_payment") from e

        if not response or not response.data:
            return None
        return self._validate(Payment, response.data[0], "find_payment")

    async def get_payment_details(self, payment_id: str) -> Optional[PaymentDetails]:
        """Payment joined with tenant, property and landlord, or None if missing."""
        try:
            response = (
                self.client.table("payments")
                .select(PAYMENT_DETAIL_COLUMNS)
                .eq("id", payment_id)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            logger.error("Failed to fetch payment details", payment_id=payment_id, error=str(e))
            raise DatabaseError(str(e), operation="get_payment_details") from e

        if not response or not response.data:
            return None
        return self._validate(PaymentDetails, response.data, "get_payment_details")

    @staticmethod
    def _validate(model, row: Any, operation: str):
        try:
            return model.model_validate(row)
        except ValidationError as e:
            raise DatabaseError(f"Unexpected row shape: {e}", operation=operation) from e
