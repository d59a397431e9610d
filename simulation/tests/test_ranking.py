"""Tests for the leaderboard ranking."""

import pytest

from models.instrument import Commodity
from models.ledger import TraderIdentity
from simulation.ledger import Ledger
from simulation.random_source import RandomNumberSource
from simulation.ranking import RankingService

PRICES = {Commodity.DOGE: 100.0, Commodity.GOLD: 1000.0}


def _ledger(trader_id: str, credits: float, is_bot: bool = True, **cargo: float) -> Ledger:
    return Ledger(
        TraderIdentity(trader_id=trader_id, name=trader_id.title(), is_bot=is_bot),
        credits=credits,
        cargo={Commodity(t): q for t, q in cargo.items()},
    )


@pytest.fixture
def traders() -> list[Ledger]:
    return [
        _ledger("player", 9000.0, is_bot=False, DOGE=5),  # 9500
        _ledger("alpha", 8000.0, GOLD=3),  # 11000
        _ledger("beta", 9500.0),  # 9500, ties with player
        _ledger("gamma", 12000.0),  # 12000
    ]


class TestRankingService:
    def test_orders_by_net_worth_desc(self, traders):
        ranking = RankingService().rank(traders, PRICES)
        assert [e.trader_id for e in ranking] == ["gamma", "alpha", "player", "beta"]
        assert [e.rank for e in ranking] == [1, 2, 3, 4]
        assert ranking[1].net_worth == 11000.0

    def test_ties_keep_input_order(self, traders):
        ranking = RankingService().rank(traders, PRICES)
        tied = [e.trader_id for e in ranking if e.net_worth == 9500.0]
        assert tied == ["player", "beta"]

    def test_player_flag(self, traders):
        ranking = RankingService().rank(traders, PRICES)
        assert [e.is_player for e in ranking] == [False, False, True, False]

    def test_leaderboard_top_k(self, traders):
        board = RankingService().leaderboard(traders, PRICES, top_k=2)
        assert [e.trader_id for e in board] == ["gamma", "alpha"]

    def test_position_of(self, traders):
        service = RankingService()
        assert service.position_of("player", traders, PRICES) == 3
        with pytest.raises(KeyError):
            service.position_of("nobody", traders, PRICES)

    def test_recomputed_when_prices_move(self, traders):
        service = RankingService()
        moved = {**PRICES, Commodity.GOLD: 2000.0}
        assert service.rank(traders, moved)[0].trader_id == "alpha"

    def test_total_order_property(self):
        rng = RandomNumberSource(seed=8)
        ledgers = [
            _ledger(f"t{i}", round(rng.uniform(0, 20000), 2), DOGE=rng.randint(1, 50))
            for i in range(30)
        ]
        ranking = RankingService().rank(ledgers, PRICES)
        for a, b in zip(ranking, ranking[1:]):
            assert a.net_worth >= b.net_worth
