"""Repository for the whole clients/orders dataset (a single :class:`Payload`)."""
import datetime
from typing import Optional

from pydantic import ValidationError

from ..models import Client, Order, OrderStatus, Payload, ServiceTemplate, utcnow
from .base import BaseRepository

DEFAULT_FILE_NAME = 'grindomapp.data.json'

_MISSING = object()


class PayloadRepository(BaseRepository):
    """Loads and saves the complete dataset as one JSON document.

    * :meth:`load` never fails: a missing, unreadable or malformed file is
      replaced by the demo dataset from :meth:`seed`.
    * :meth:`save` never raises: failures are logged and reported through the
      return value so the caller's in-memory change stands.
    """

    def __init__(self, file_path: str = DEFAULT_FILE_NAME) -> None:
        super().__init__(file_path)

    def load(self) -> Payload:
        if not self.exists():
            self._log.info("No data file at %s; seeding demo data.", self._path)
            return self.seed()
        raw = self._load(_MISSING)
        if raw is _MISSING:
            return self.seed()
        try:
            payload = Payload.model_validate(raw)
        except ValidationError as exc:
            self._log.warning("Malformed data in %s, falling back to seed data: %s",
                              self._path, exc)
            return self.seed()
        self._log.debug("Loaded %d clients and %d orders from %s.",
                        len(payload.clients), len(payload.orders), self._path)
        return payload

    def save(self, payload: Payload) -> bool:
        """Persist *payload*.  Returns ``False`` (after logging) on failure."""
        try:
            self._save(payload.to_document())
        except (OSError, TypeError, ValueError) as exc:
            self._log.error("Could not save %s: %s", self._path, exc)
            return False
        self._log.debug("Saved %d clients and %d orders to %s.",
                        len(payload.clients), len(payload.orders), self._path)
        return True

    def seed(self, now: Optional[datetime.datetime] = None) -> Payload:
        """Build the demo dataset, persist it, and return it."""
        now = now or utcnow()
        templates = ServiceTemplate.default_templates()

        anna = Client(name='Anna', note='Prefers short style', created_at=now)
        mark = Client(name='Mark', note='Frequent visitor', created_at=now)
        sofia = Client(name='Sofia', note='Wedding shoot package', created_at=now)

        def order(client: Client, template: ServiceTemplate, price: float,
                  status: OrderStatus, offset: int) -> Order:
            return Order(
                client_id=client.id,
                service_name=template.name,
                service_icon=template.icon,
                service_color_hex=template.color_hex,
                price=price,
                date=now + datetime.timedelta(days=offset),
                status=status,
                created_at=now,
            )

        payload = Payload(
            clients=[anna, mark, sofia],
            orders=[
                order(anna, templates[0], 30, OrderStatus.NEW, 0),
                order(mark, templates[1], 25, OrderStatus.IN_PROGRESS, -1),
                order(sofia, templates[3], 70, OrderStatus.DONE, -2),
            ],
            seeded_at=now,
        )
        self.save(payload)
        return payload

    def clear(self) -> bool:
        """Delete the data file.  Returns ``True`` if a file was removed."""
        return self._remove()
