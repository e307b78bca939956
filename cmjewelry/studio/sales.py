"""Sale records, staff sign-in and the spreadsheet ledger webhook."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime

import requests

from .errors import LedgerError, ValidationError

logger = logging.getLogger(__name__)

_DERIVED_FIELDS = frozenset({"subtotal", "total", "profit"})


@dataclass(frozen=True)
class SaleRecord:
    """One sale. ``subtotal``, ``total`` and ``profit`` derive from the inputs."""

    client: str = ""
    contact: str = ""
    client_type: str = ""
    product: str = ""
    code: str = ""
    category: str = ""
    quantity: int = 1
    unit_price: float = 0
    discount: float = 0
    total_cost: float = 0
    payment_method: str = ""
    notes: str = ""
    staff: str = ""

    def __post_init__(self) -> None:
        if self.quantity < 0:
            raise ValidationError("Quantity cannot be negative.")
        if self.unit_price < 0:
            raise ValidationError("Unit price cannot be negative.")
        if self.discount < 0:
            raise ValidationError("Discount cannot be negative.")

    @property
    def subtotal(self) -> float:
        return self.quantity * self.unit_price

    @property
    def total(self) -> float:
        return self.subtotal - self.discount

    @property
    def profit(self) -> float:
        return self.total - self.total_cost

    def with_changes(self, **changes) -> SaleRecord:
        """Return a copy with some input fields changed."""
        derived = _DERIVED_FIELDS.intersection(changes)
        if derived:
            raise TypeError(
                f"Derived fields cannot be set: {', '.join(sorted(derived))}"
            )
        return dataclasses.replace(self, **changes)

    def to_ledger_payload(self) -> dict:
        """Row for the sales spreadsheet, keyed by its column names."""
        return {
            "cliente": self.client,
            "contacto": self.contact,
            "tipoCliente": self.client_type,
            "producto": self.product,
            "codigo": self.code,
            "categoria": self.category,
            "cantidad": self.quantity,
            "precioUnitario": self.unit_price,
            "subtotal": self.subtotal,
            "descuento": self.discount,
            "total": self.total,
            "costoTotal": self.total_cost,
            "ganancia": self.profit,
            "metodoPago": self.payment_method,
            "observaciones": self.notes,
            "recibeVenta": self.staff,
        }


class StaffRoster:
    """The fixed set of staff and the one currently signed in, if any."""

    def __init__(self, members: list[str] | None = None) -> None:
        self._members = list(members or ["Carlos", "Mario"])
        self._current: str | None = None

    @property
    def members(self) -> list[str]:
        return list(self._members)

    @property
    def current(self) -> str | None:
        return self._current

    def sign_in(self, name: str) -> None:
        if name not in self._members:
            raise ValidationError(f"Unknown staff member: {name}")
        self._current = name

    def sign_out(self) -> None:
        self._current = None

    def require(self) -> str:
        """Return the signed-in name or raise ValidationError."""
        if self._current is None:
            raise ValidationError("A staff member must sign in to record sales.")
        return self._current


@dataclass
class LedgerReceipt:
    idempotency_key: str
    acknowledged: bool
    recorded_at: str = field(default_factory=lambda: datetime.now().isoformat())


class SaleLedger:
    """Post sales to a spreadsheet web app.

    With ``require_ack`` the web app must answer 2xx with the JSON body
    ``{"result": "success"}``. Without it, a request that leaves
    without a network error counts as recorded.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: float = 15.0,
        require_ack: bool = True,
        session: requests.Session | None = None,
    ) -> None:
        self._webhook_url = webhook_url
        self._timeout = timeout
        self._require_ack = require_ack
        self._session = session or requests.Session()

    async def record(
        self,
        sale: SaleRecord,
        roster: StaffRoster,
        idempotency_key: str | None = None,
    ) -> LedgerReceipt:
        """Record a sale on behalf of the signed-in staff member.

        Raises:
            ValidationError: If nobody is signed in or no webhook is configured.
            LedgerError: If the sale could not be delivered or was rejected.
        """
        staff = roster.require()
        if not self._webhook_url:
            raise ValidationError(
                "Sale ledger URL is not set. "
                "Check the config file or the SALE_LEDGER_URL environment variable."
            )
        if not sale.staff:
            sale = sale.with_changes(staff=staff)

        key = idempotency_key or uuid.uuid4().hex
        payload = sale.to_ledger_payload()
        payload["idempotencyKey"] = key
        return await asyncio.to_thread(self._post, payload, key)

    def _post(self, payload: dict, key: str) -> LedgerReceipt:
        try:
            response = self._session.post(
                self._webhook_url,
                data=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
                # text/plain avoids a CORS preflight on Apps Script endpoints
                headers={"Content-Type": "text/plain;charset=utf-8"},
                timeout=self._timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.warning("Sale ledger request failed: %s", e)
            raise LedgerError(f"Could not reach the sale ledger: {e}") from e

        if not self._require_ack:
            logger.info("Sale dispatched (key=%s)", key)
            return LedgerReceipt(idempotency_key=key, acknowledged=False)

        if not response.ok:
            raise LedgerError(
                f"Sale ledger rejected the sale (HTTP {response.status_code})."
            )

        try:
            body = response.json()
        except ValueError:
            # Apps Script answers a failed doPost with an HTML page and HTTP 200
            raise LedgerError(
                "Sale ledger did not confirm the sale (unexpected non-JSON reply)."
            ) from None
        if not isinstance(body, dict):
            raise LedgerError("Sale ledger did not confirm the sale.")
        if body.get("result") != "success":
            message = body.get("error") or body.get("message") or body.get("result")
            raise LedgerError(f"Sale ledger rejected the sale: {message}")

        logger.info("Sale recorded (key=%s)", key)
        return LedgerReceipt(idempotency_key=key, acknowledged=True)
