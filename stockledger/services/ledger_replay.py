"""
Ledger replay for point-in-time valuation.

Batch remaining quantities are mutated destructively by real stock-outs, so
historical cost layers cannot be read back from the batch table. Instead the
full In/Out history of an item is replayed from the beginning against a
private FIFO queue, and the timeline is partitioned at the report window:

    before window   ->  opening balance follows the running balance
    inside window   ->  events are reported and totalled
    after window    ->  replayed but otherwise ignored

The window is inclusive on both ends.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from stockledger.core.constants import FLOW_IN, FLOW_OUT, ZERO
from stockledger.core.dates import as_utc

_FLOW_RANK = {FLOW_IN: 0, FLOW_OUT: 1}


@dataclass(frozen=True)
class LedgerEvent:
    time: datetime
    flow: str
    quantity: Decimal
    unit_price: Optional[Decimal] = None
    sequence: int = 0

    @property
    def sort_key(self):
        # Stock-ins sort ahead of stock-outs sharing a timestamp.
        return (as_utc(self.time), _FLOW_RANK[self.flow], self.sequence)


@dataclass(frozen=True)
class ReplayLine:
    time: datetime
    flow: str
    quantity: Decimal
    unit_value: Decimal


@dataclass
class _CostLayer:
    quantity: Decimal
    price: Decimal

    @property
    def value(self) -> Decimal:
        return self.quantity * self.price


@dataclass(frozen=True)
class ValuationResult:
    opening_quantity: Decimal
    opening_value: Decimal
    period_quantity: Decimal
    period_value: Decimal
    usage_quantity: Decimal
    usage_value: Decimal
    lines: tuple[ReplayLine, ...] = field(default_factory=tuple)

    @property
    def total_in(self) -> Decimal:
        return sum((line.quantity for line in self.lines if line.flow == FLOW_IN), ZERO)

    @property
    def total_out(self) -> Decimal:
        return sum((line.quantity for line in self.lines if line.flow == FLOW_OUT), ZERO)

    @property
    def closing_quantity(self) -> Decimal:
        return self.opening_quantity + self.total_in - self.total_out

    @property
    def opening_average(self) -> Decimal:
        if self.opening_quantity == 0:
            return ZERO
        return self.opening_value / self.opening_quantity

    @property
    def closing_average(self) -> Decimal:
        if self.period_quantity == 0:
            return ZERO
        return self.period_value / self.period_quantity


def _consume_layers(layers: deque, quantity: Decimal) -> Decimal:
    remaining = quantity
    consumed_value = ZERO
    while remaining > 0 and layers:
        layer = layers[0]
        taken = min(remaining, layer.quantity)
        consumed_value += taken * layer.price
        layer.quantity -= taken
        if layer.quantity == 0:
            layers.popleft()
        remaining -= taken
    return consumed_value


def replay_ledger(
    events: Iterable[LedgerEvent],
    window_start: datetime,
    window_end: datetime,
) -> ValuationResult:
    window_start = as_utc(window_start)
    window_end = as_utc(window_end)

    layers: deque = deque()
    running_quantity = ZERO
    running_value = ZERO
    opening_quantity = ZERO
    opening_value = ZERO
    period_quantity = ZERO
    period_value = ZERO
    usage_quantity = ZERO
    usage_value = ZERO
    window_entered = False
    lines = []

    for event in sorted(events, key=lambda e: e.sort_key):
        event_time = as_utc(event.time)
        before_window = event_time < window_start
        in_window = window_start <= event_time <= window_end
        quantity = event.quantity

        if event.flow == FLOW_IN:
            price = event.unit_price if event.unit_price is not None else ZERO
            value = quantity * price
            layers.append(_CostLayer(quantity=quantity, price=price))
            running_quantity += quantity
            running_value += value

            if in_window:
                if not window_entered:
                    opening_quantity = running_quantity - quantity
                    opening_value = running_value - value
                    period_quantity = opening_quantity
                    period_value = opening_value
                    window_entered = True
                period_quantity += quantity
                period_value += value
                lines.append(ReplayLine(event_time, FLOW_IN, quantity, price))
        else:
            out_value = _consume_layers(layers, quantity)
            average_cost = out_value / quantity if quantity > 0 else ZERO
            running_quantity = max(ZERO, running_quantity - quantity)
            running_value = max(ZERO, running_value - out_value)

            if in_window:
                if not window_entered:
                    opening_quantity = running_quantity + quantity
                    opening_value = running_value + out_value
                    period_quantity = opening_quantity
                    period_value = opening_value
                    window_entered = True
                period_quantity -= quantity
                period_value -= out_value
                lines.append(ReplayLine(event_time, FLOW_OUT, quantity, average_cost))
                usage_quantity += quantity
                usage_value += out_value

        if before_window:
            opening_quantity = running_quantity
            opening_value = running_value

    if not window_entered:
        period_quantity = opening_quantity
        period_value = opening_value

    return ValuationResult(
        opening_quantity=opening_quantity,
        opening_value=opening_value,
        period_quantity=period_quantity,
        period_value=period_value,
        usage_quantity=usage_quantity,
        usage_value=usage_value,
        lines=tuple(lines),
    )


__all__ = ["LedgerEvent", "ReplayLine", "ValuationResult", "replay_ledger"]
