"""Candidate order generation for the exhaustive and stepwise searches"""

import itertools
from typing import Iterable, List

from .config import SelectionConfig
from .models import SarimaOrder


def _make_order(config: SelectionConfig, p: int, q: int, P: int, Q: int,
                constant: bool) -> SarimaOrder:
    return SarimaOrder(
        p=p, d=config.d, q=q,
        P=P, D=config.D, Q=Q,
        period=config.seasonal_period,
        include_constant=constant,
    )


def _within_bounds(config: SelectionConfig, p: int, q: int, P: int, Q: int) -> bool:
    if min(p, q, P, Q) < 0:
        return False
    max_p, max_q, max_P, max_Q = config.max_orders
    if p > max_p or q > max_q or P > max_P or Q > max_Q:
        return False
    return p + q + P + Q <= config.max_order


def _constant_options(config: SelectionConfig) -> List[bool]:
    return [True, False] if config.constant_allowed else [False]


def enumerate_orders(config: SelectionConfig) -> List[SarimaOrder]:
    """Every (p, q, P, Q) within bounds, in a fixed enumeration order"""
    orders = []
    for p, q, P, Q, constant in itertools.product(
        range(config.max_p + 1),
        range(config.max_q + 1),
        range(config.max_P + 1),
        range(config.max_Q + 1),
        _constant_options(config),
    ):
        if _within_bounds(config, p, q, P, Q):
            orders.append(_make_order(config, p, q, P, Q, constant))
    return orders


def stepwise_seeds(config: SelectionConfig) -> List[SarimaOrder]:
    """Starting models for the stepwise search"""
    constant = config.constant_allowed
    raw = [
        (2, 2, 1, 1, constant),
        (0, 0, 0, 0, constant),
        (1, 0, 1, 0, constant),
        (0, 1, 0, 1, constant),
    ]
    if constant:
        raw.append((0, 0, 0, 0, False))

    seeds = []
    for p, q, P, Q, c in raw:
        p, q = min(p, config.max_p), min(q, config.max_q)
        P, Q = min(P, config.max_P), min(Q, config.max_Q)
        # Shrink seasonal first, then non-seasonal, until the total cap fits
        while p + q + P + Q > config.max_order:
            if P or Q:
                P, Q = max(P - 1, 0), max(Q - 1, 0)
            else:
                p, q = max(p - 1, 0), max(q - 1, 0)
        order = _make_order(config, p, q, P, Q, c)
        if order not in seeds:
            seeds.append(order)
    return seeds


_STEPS = [
    (-1, 0, 0, 0), (1, 0, 0, 0),
    (0, -1, 0, 0), (0, 1, 0, 0),
    (0, 0, -1, 0), (0, 0, 1, 0),
    (0, 0, 0, -1), (0, 0, 0, 1),
    (-1, -1, 0, 0), (1, 1, 0, 0),
    (0, 0, -1, -1), (0, 0, 1, 1),
]


def neighbours(order: SarimaOrder, config: SelectionConfig) -> Iterable[SarimaOrder]:
    """Orders one step away: ±1 per term, joint ±1 on (p, q) and (P, Q), constant toggle"""
    seen = set()
    for dp, dq, dP, dQ in _STEPS:
        p, q, P, Q = order.p + dp, order.q + dq, order.P + dP, order.Q + dQ
        if _within_bounds(config, p, q, P, Q):
            candidate = _make_order(config, p, q, P, Q, order.include_constant)
            if candidate not in seen:
                seen.add(candidate)
                yield candidate

    if config.constant_allowed:
        yield _make_order(config, order.p, order.q, order.P, order.Q,
                          not order.include_constant)
