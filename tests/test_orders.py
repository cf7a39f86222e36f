import sys
import os

# Add project root to Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.append(project_root)

import pytest

from sarima.config import SelectionConfig
from sarima.exceptions import InvalidInputError
from sarima.models import SarimaOrder
from sarima.orders import enumerate_orders, neighbours, stepwise_seeds


def test_default_candidate_count():
    """p,q <= 5, P,Q <= 2, p+q+P+Q <= 5, no constant with d=D=1"""
    orders = enumerate_orders(SelectionConfig())
    assert len(orders) == 96
    assert len(set(orders)) == 96
    assert orders[0] == SarimaOrder(0, 1, 0, 0, 1, 0, period=12)


def test_candidates_within_bounds():
    config = SelectionConfig()
    for order in enumerate_orders(config):
        assert order.p + order.q + order.P + order.Q <= config.max_order
        assert order.P <= 2 and order.Q <= 2
        assert order.d == 1 and order.D == 1
        assert not order.include_constant


def test_constant_doubles_candidates_when_allowed():
    orders = enumerate_orders(SelectionConfig(d=0, D=1))
    assert len(orders) == 192
    assert sum(o.include_constant for o in orders) == 96
    assert all(o.constant_name == 'drift' for o in orders if o.include_constant)

    orders = enumerate_orders(SelectionConfig(d=0, D=1, allow_constant=False))
    assert len(orders) == 96


def test_period_one_drops_seasonal_terms():
    config = SelectionConfig(seasonal_period=1, D=0)
    orders = enumerate_orders(config)
    assert all(o.P == 0 and o.Q == 0 for o in orders)
    # p + q <= 5 with a drift option
    assert len(orders) == 2 * 21


def test_neighbours_stay_in_bounds():
    config = SelectionConfig()
    order = SarimaOrder(1, 1, 1, 1, 1, 1, period=12)
    result = list(neighbours(order, config))
    assert order not in result
    assert SarimaOrder(2, 1, 1, 1, 1, 1, period=12) in result
    assert SarimaOrder(1, 1, 1, 0, 1, 0, period=12) in result
    for candidate in result:
        assert candidate.p + candidate.q + candidate.P + candidate.Q <= 5
        assert min(candidate.p, candidate.q, candidate.P, candidate.Q) >= 0


def test_neighbours_toggle_constant():
    config = SelectionConfig(d=1, D=0)
    order = SarimaOrder(1, 1, 0, 0, 0, 0, period=12, include_constant=True)
    result = list(neighbours(order, config))
    assert SarimaOrder(1, 1, 0, 0, 0, 0, period=12, include_constant=False) in result


def test_stepwise_seeds_respect_total_order():
    seeds = stepwise_seeds(SelectionConfig())
    assert seeds[0] == SarimaOrder(2, 1, 2, 0, 1, 0, period=12)
    assert SarimaOrder(0, 1, 0, 0, 1, 0, period=12) in seeds
    assert len(seeds) == len(set(seeds))
    for seed in seeds:
        assert seed.p + seed.q + seed.P + seed.Q <= 5


def test_max_orders_bound_the_grid():
    config = SelectionConfig(max_p=1, max_q=2, max_P=0, max_Q=1, max_order=10)
    assert config.max_orders == (1, 2, 0, 1)
    orders = enumerate_orders(config)
    assert len(orders) == 2 * 3 * 1 * 2
    assert max(o.q for o in orders) == 2 and max(o.P for o in orders) == 0


def test_invalid_config():
    with pytest.raises(InvalidInputError):
        SelectionConfig(search_mode='random')
    with pytest.raises(InvalidInputError):
        SelectionConfig(seasonal_period=0)
    with pytest.raises(InvalidInputError):
        SelectionConfig(max_p=-1)
    with pytest.raises(InvalidInputError):
        SelectionConfig(horizon=0)


def test_order_label():
    assert str(SarimaOrder(0, 1, 1, 0, 1, 1, period=12)) == "ARIMA(0,1,1)(0,1,1)[12]"
    assert str(SarimaOrder(1, 1, 0, 0, 0, 0, period=12, include_constant=True)) == \
        "ARIMA(1,1,0)(0,0,0)[12] with drift"


if __name__ == '__main__':
    pytest.main([__file__])
