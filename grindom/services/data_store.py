"""The in-memory data store: clients, orders, workflow and analytics."""
import datetime
import logging
import uuid
from typing import Callable, Dict, List, NamedTuple, Optional, Set, Tuple, Union

from ..errors import UnknownClientError
from ..models import Client, Order, OrderStatus, Payload, ServiceTemplate, utcnow
from ..repositories.payload_repository import PayloadRepository
from ..validation import (
    normalize_currency_code, normalize_name, normalize_note, parse_price,
)
from . import analytics
from .analytics import ServiceTotal, Totals
from .currency import format_currency
from .status_workflow import StatusOrder

ClientRef = Union[Client, uuid.UUID]
OrderRef = Union[Order, uuid.UUID]


class ChangeEvent(NamedTuple):
    """Emitted to subscribers after every mutation."""

    kind: str
    persisted: bool


Listener = Callable[[ChangeEvent], None]


def _id_of(ref) -> uuid.UUID:
    return ref.id if hasattr(ref, 'id') else ref


def _revise(record, **changes):
    """Return a re-validated copy of *record* with *changes* applied."""
    return type(record).model_validate({**dict(record), **changes})


class DataStore:
    """Owns the canonical clients/orders collections for one running process.

    Every mutating operation works in two steps: it changes the in-memory
    collections, then calls :meth:`persist` to write the full
    :class:`~grindom.models.Payload` through the repository.  A store built
    without a repository stays purely in memory.  A failed save does not undo
    the change; the outcome is reported to subscribers as
    ``ChangeEvent.persisted``.

    Caller input goes through :mod:`grindom.validation`, so invalid names or
    prices raise :class:`~grindom.errors.InvalidInputError` before any state
    changes.  Orders for a client the store does not hold raise
    :class:`~grindom.errors.UnknownClientError`.
    """

    def __init__(self, repository: Optional[PayloadRepository] = None,
                 currency_code: str = 'USD',
                 status_order=None,
                 clock: Callable[[], datetime.datetime] = utcnow) -> None:
        self._repo = repository
        self._clock = clock
        self._log = logging.getLogger('grindom.store')
        self._clients: List[Client] = []
        self._orders: List[Order] = []
        self._seeded_at: Optional[datetime.datetime] = None
        self._listeners: List[Listener] = []

        # View filters / preferences
        self.search_query: str = ''
        self.selected_statuses: Set[OrderStatus] = set(OrderStatus)
        self._status_order = StatusOrder(status_order)
        self._currency_code = normalize_currency_code(currency_code)

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------

    @property
    def clients(self) -> Tuple[Client, ...]:
        return tuple(self._clients)

    @property
    def orders(self) -> Tuple[Order, ...]:
        return tuple(self._orders)

    @property
    def currency_code(self) -> str:
        return self._currency_code

    @currency_code.setter
    def currency_code(self, value: str) -> None:
        self._currency_code = normalize_currency_code(value)

    @property
    def status_order(self) -> StatusOrder:
        return self._status_order

    @status_order.setter
    def status_order(self, value) -> None:
        self._status_order = StatusOrder(value)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> Payload:
        """Adopt the repository's payload (or seed data) as working state."""
        if self._repo is None:
            return self.snapshot()
        payload = self._repo.load()
        self.adopt(payload)
        return payload

    def adopt(self, payload: Payload) -> None:
        self._clients = list(payload.clients)
        self._orders = list(payload.orders)
        self._seeded_at = payload.seeded_at
        self._log.debug("Adopted %d clients and %d orders.",
                        len(self._clients), len(self._orders))

    def snapshot(self) -> Payload:
        return Payload(clients=list(self._clients), orders=list(self._orders),
                       seeded_at=self._seeded_at)

    def persist(self) -> bool:
        """Write the current state to disk.  Returns ``True`` if it was saved."""
        if self._repo is None:
            return False
        return self._repo.save(self.snapshot())

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for change events; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _commit(self, kind: str) -> bool:
        persisted = self.persist()
        if self._repo is not None and not persisted:
            self._log.warning("Change '%s' applied in memory but not saved.", kind)
        event = ChangeEvent(kind, persisted)
        for listener in list(self._listeners):
            listener(event)
        return persisted

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    def client_by_id(self, client_id: uuid.UUID) -> Optional[Client]:
        for c in self._clients:
            if c.id == client_id:
                return c
        return None

    def _client_index(self, client_id: uuid.UUID) -> Optional[int]:
        for i, c in enumerate(self._clients):
            if c.id == client_id:
                return i
        return None

    def add_client(self, name: str, note: Optional[str] = None) -> Client:
        client = Client(name=normalize_name(name, 'client name'),
                        note=normalize_note(note),
                        created_at=self._clock())
        self._clients.append(client)
        self._commit('client_added')
        return client

    def update_client(self, client: ClientRef, name: str,
                      note: Optional[str], archived: bool) -> Optional[Client]:
        """Replace name, note and archived flag.  ``None`` if the id is unknown."""
        name = normalize_name(name, 'client name')
        idx = self._client_index(_id_of(client))
        if idx is None:
            return None
        updated = _revise(self._clients[idx], name=name,
                          note=normalize_note(note), is_archived=bool(archived))
        self._clients[idx] = updated
        self._commit('client_updated')
        return updated

    def delete_client(self, client: ClientRef) -> bool:
        """Remove the client and every order that belongs to it."""
        client_id = _id_of(client)
        kept_clients = [c for c in self._clients if c.id != client_id]
        kept_orders = [o for o in self._orders if o.client_id != client_id]
        if (len(kept_clients) == len(self._clients)
                and len(kept_orders) == len(self._orders)):
            return False
        removed = len(self._orders) - len(kept_orders)
        self._clients = kept_clients
        self._orders = kept_orders
        self._log.info("Deleted client %s and %d of its orders.", client_id, removed)
        self._commit('client_deleted')
        return True

    def active_clients(self, query: str = '') -> List[Client]:
        """Non-archived clients matching *query* on name or note, sorted by name."""
        q = query.strip().casefold()
        result = [
            c for c in self._clients
            if not c.is_archived and (
                not q or q in c.name.casefold() or q in (c.note or '').casefold())
        ]
        result.sort(key=lambda c: c.name.casefold())
        return result

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def order_by_id(self, order_id: uuid.UUID) -> Optional[Order]:
        for o in self._orders:
            if o.id == order_id:
                return o
        return None

    def _order_index(self, order_id: uuid.UUID) -> Optional[int]:
        for i, o in enumerate(self._orders):
            if o.id == order_id:
                return i
        return None

    def add_order(self, client: ClientRef, service_name: str,
                  service_icon: str, service_color_hex: str,
                  price, date: datetime.datetime,
                  note: Optional[str] = None,
                  status: OrderStatus = OrderStatus.NEW) -> Order:
        client_id = _id_of(client)
        if self.client_by_id(client_id) is None:
            raise UnknownClientError(client_id)
        order = Order(
            client_id=client_id,
            service_name=normalize_name(service_name, 'service name'),
            service_icon=service_icon or '',
            service_color_hex=service_color_hex or '',
            price=parse_price(price),
            date=date,
            note=normalize_note(note),
            status=OrderStatus(status),
            created_at=self._clock(),
        )
        self._orders.append(order)
        self._commit('order_added')
        return order

    def add_order_from_template(self, client: ClientRef, template: ServiceTemplate,
                                date: datetime.datetime,
                                price_override=None,
                                note: Optional[str] = None,
                                status: OrderStatus = OrderStatus.NEW) -> Order:
        """Create an order pre-filled from *template*; price defaults to its base price."""
        price = price_override if price_override is not None else template.base_price
        return self.add_order(client, template.name, template.icon,
                              template.color_hex, price, date, note, status)

    def update_order(self, order: OrderRef,
                     status: Optional[OrderStatus] = None,
                     price=None,
                     date: Optional[datetime.datetime] = None,
                     note: Optional[str] = None) -> Optional[Order]:
        """Patch only the supplied fields.  ``None`` if the id is unknown.

        Passing an empty *note* clears it.
        """
        changes: Dict = {}
        if status is not None:
            changes['status'] = OrderStatus(status)
        if price is not None:
            changes['price'] = parse_price(price)
        if date is not None:
            changes['date'] = date
        if note is not None:
            changes['note'] = normalize_note(note)
        idx = self._order_index(_id_of(order))
        if idx is None:
            return None
        updated = _revise(self._orders[idx], **changes)
        self._orders[idx] = updated
        self._commit('order_updated')
        return updated

    def delete_order(self, order: OrderRef) -> bool:
        idx = self._order_index(_id_of(order))
        if idx is None:
            return False
        del self._orders[idx]
        self._commit('order_deleted')
        return True

    def duplicate_order(self, order: OrderRef, new_date: datetime.datetime) -> Order:
        """Clone *order* under a new id and creation time, scheduled at *new_date*."""
        source = self.order_by_id(_id_of(order))
        if source is None:
            if not isinstance(order, Order):
                raise LookupError(f"Unknown order id: {order}")
            source = order
        if self.client_by_id(source.client_id) is None:
            raise UnknownClientError(source.client_id)
        copy = _revise(source, id=uuid.uuid4(), created_at=self._clock(), date=new_date)
        self._orders.append(copy)
        self._commit('order_added')
        return copy

    def orders_for_client(self, client: ClientRef) -> List[Order]:
        """All orders of *client*, newest first."""
        client_id = _id_of(client)
        result = [o for o in self._orders if o.client_id == client_id]
        result.sort(key=lambda o: o.date, reverse=True)
        return result

    def orders_on_day(self, day: datetime.date) -> List[Order]:
        """Orders scheduled on the local calendar *day*, earliest first."""
        result = [o for o in self._orders if analytics.local_day(o.date) == day]
        result.sort(key=lambda o: o.date)
        return result

    def done_revenue_on_day(self, day: datetime.date) -> float:
        return round(sum(o.price for o in self.orders_on_day(day)
                         if o.status == OrderStatus.DONE), 2)

    # ------------------------------------------------------------------
    # Filtered views
    # ------------------------------------------------------------------

    def _query_predicate(self) -> Callable[[Order], bool]:
        if not self.search_query.strip():
            return lambda order: True
        q = self.search_query.casefold()
        names = {c.id: c.name.casefold() for c in self._clients}

        def matches(order: Order) -> bool:
            return (q in names.get(order.client_id, '')
                    or q in order.service_name.casefold()
                    or q in (order.note or '').casefold())
        return matches

    def matches_query(self, order: Order) -> bool:
        """Case-insensitive match of the search query on client, service or note."""
        return self._query_predicate()(order)

    def all_orders_filtered(self) -> List[Order]:
        matches = self._query_predicate()
        return [o for o in self._orders
                if o.status in self.selected_statuses and matches(o)]

    def orders_for_status(self, status: OrderStatus) -> List[Order]:
        """Visible orders in one board column, earliest date first."""
        status = OrderStatus(status)
        result = [o for o in self.all_orders_filtered() if o.status == status]
        result.sort(key=lambda o: o.date)
        return result

    def reset_search(self) -> None:
        self.search_query = ''
        self.selected_statuses = set(OrderStatus)

    # ------------------------------------------------------------------
    # Status workflow
    # ------------------------------------------------------------------

    def cycle_status_forward(self, order: OrderRef) -> Optional[Order]:
        """Advance to the next status in :attr:`status_order`, wrapping around."""
        current = self.order_by_id(_id_of(order))
        if current is None:
            return None
        nxt = self.status_order.next_after(current.status)
        if nxt is None:
            return None
        return self.update_order(current, status=nxt)

    def move(self, order: OrderRef, status: OrderStatus) -> Optional[Order]:
        return self.update_order(order, status=status)

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    def totals(self, period_days: int) -> Totals:
        return analytics.totals(self._orders, period_days, self._clock())

    def service_breakdown(self, period_days: int) -> List[ServiceTotal]:
        return analytics.service_breakdown(self._orders, period_days, self._clock())

    def daily_revenue(self, period_days: int) -> List[Tuple[datetime.date, float]]:
        return analytics.daily_revenue(self._orders, period_days, self._clock())

    def format_currency(self, value: float) -> str:
        return format_currency(value, self._currency_code)
