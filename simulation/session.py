"""Trading sessions: the explicit object that owns every piece of simulation
state for one bounded game.

Lifecycle:
    1. ``TradingSession.__init__`` builds the price engine, the player ledger,
       the bots, the event injector and three periodic timers (price, bot,
       countdown) on a fresh ``SimulationClock``.
    2. The clock is advanced (``advance``, ``run_to_end`` or ``run``). Each
       price tick moves prices, may inject an event, then refreshes net
       worths. Each bot tick polls every bot.
    3. When the countdown reaches zero all timers are cancelled together and
       the session moves to ``ENDED``. Nothing mutates after that.

``Simulation`` holds the current session and replaces it wholesale on
restart.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from bots.agent import BotAgent
from bots.registry import create_policy
from bots.sizing import LotSizer
from models.bot import BotStrategy
from models.config import BotSpec, SimulationConfig
from models.events import AppliedEvent
from models.instrument import Commodity
from models.ledger import TraderIdentity, TraderView
from models.ranking import RankingEntry
from models.session import SessionSnapshot, SessionState
from models.trade import ExecutedTrade, TradeAction, TradeResult
from simulation.clock import SimulationClock
from simulation.event_injector import EventInjector
from simulation.ledger import Ledger, TradeError
from simulation.persistence import LedgerStore, open_ledger
from simulation.price_engine import PriceEngine
from simulation.random_source import RandomNumberSource
from simulation.ranking import RankingService

logger = logging.getLogger(__name__)

PRICE_TIMER = "price"
BOT_TIMER = "bots"
COUNTDOWN_TIMER = "countdown"

Observer = Callable[[str, "TradingSession"], None]


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-") or "trader"


def player_identity(name: str | None) -> TraderIdentity:
    """Identity for the human trader; a generated guest when *name* is empty."""
    if not name:
        return TraderIdentity.guest()
    return TraderIdentity(trader_id=f"player-{_slug(name)}", name=name)


class TradingSession:
    """One bounded game: prices, ledgers, bots and the clock that drives them."""

    def __init__(
        self,
        config: SimulationConfig,
        player: TraderIdentity | None = None,
        store: LedgerStore | None = None,
        rng: RandomNumberSource | None = None,
    ) -> None:
        self.config = config
        self._rng = rng or RandomNumberSource(config.seed)
        self.clock = SimulationClock()
        self.engine = PriceEngine(
            config.instruments,
            self._rng,
            history_capacity=config.history_capacity,
            rounding=config.rounding,
            start_time=self.clock.now,
        )
        self.injector = EventInjector(
            config.events.catalog,
            config.events.probability,
            self._rng,
        )
        self.ranking = RankingService()

        identity = player or player_identity(config.player_name)
        if store is not None:
            self.player: Ledger = open_ledger(
                identity,
                store,
                default_credits=config.initial_credits,
                rounding=config.rounding,
                cargo_epsilon=config.cargo_epsilon,
                tickers=self.engine.tickers,
            )
        else:
            self.player = Ledger(
                identity,
                credits=config.initial_credits,
                rounding=config.rounding,
                cargo_epsilon=config.cargo_epsilon,
            )
        self.bots: list[BotAgent] = [
            self._build_bot(idx, spec) for idx, spec in enumerate(config.bots)
        ]

        self._ledgers: dict[str, Ledger] = {self.player.trader_id: self.player}
        for bot in self.bots:
            if bot.trader_id in self._ledgers:
                raise ValueError(f"Duplicate trader id: {bot.trader_id}")
            self._ledgers[bot.trader_id] = bot.ledger

        self.state = SessionState.RUNNING
        self.time_remaining: int = config.session_duration
        self._trades: list[ExecutedTrade] = []
        self._events: list[AppliedEvent] = []
        self._net_worths: dict[str, float] = {}
        self._observers: list[Observer] = []
        self._refresh_net_worths()
        self._starting_net_worths = dict(self._net_worths)

        self.clock.schedule(PRICE_TIMER, config.price_interval, self._on_price_tick)
        self.clock.schedule(BOT_TIMER, config.bot_interval, self._on_bot_tick)
        self.clock.schedule(COUNTDOWN_TIMER, config.countdown_interval, self._on_countdown)

        logger.info(
            "Session started: %d instrument(s), %d bot(s), %ds on the clock, player '%s'.",
            len(config.instruments),
            len(self.bots),
            config.session_duration,
            self.player.name,
        )

    def _build_bot(self, idx: int, spec: BotSpec) -> BotAgent:
        identity = TraderIdentity(
            trader_id=f"bot-{idx:02d}-{_slug(spec.name)}",
            name=spec.name,
            is_bot=True,
        )
        ledger = Ledger(
            identity,
            credits=spec.credits or self.config.initial_credits,
            rounding=self.config.rounding,
            cargo_epsilon=self.config.cargo_epsilon,
        )
        return BotAgent(
            ledger,
            create_policy(spec.strategy, self.config.strategies, self._rng),
            LotSizer(spec.sizing or self.config.sizing, self._rng, self.config.rounding),
            self._rng,
            think_interval=self.config.think_interval,
            start_time=self.clock.now,
        )

    # ------------------------------------------------------------------
    # Timer callbacks
    # ------------------------------------------------------------------

    def _on_price_tick(self, now: float) -> None:
        if not self.is_running:
            return
        self.engine.tick(now)
        event = self.injector.maybe_apply(self.engine, now)
        if event is not None:
            self._events.append(event)
        self._refresh_net_worths()
        self._notify(PRICE_TIMER)

    def _on_bot_tick(self, now: float) -> None:
        if not self.is_running:
            return
        for bot in self.bots:
            executed = bot.poll(self.engine, now)
            if executed is not None:
                self._trades.append(executed)
        self._refresh_net_worths()
        self._notify(BOT_TIMER)

    def _on_countdown(self, now: float) -> None:
        if not self.is_running:
            return
        self.time_remaining -= 1
        if self.time_remaining <= 0:
            self.end()
        else:
            self._notify(COUNTDOWN_TIMER)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self.state is SessionState.RUNNING

    def end(self) -> list[RankingEntry]:
        """Stop the session: cancel all timers, freeze state, return the final ranking."""
        if self.is_running:
            self.clock.cancel_all()
            self.state = SessionState.ENDED
            self.time_remaining = 0
            self._close_ledgers()
            self._refresh_net_worths()
            final = self.rankings()
            winner = final[0] if final else None
            logger.info(
                "Session ended at t=%.1f. Winner: %s (%.2f). Player rank: #%d.",
                self.clock.now,
                winner.name if winner else "-",
                winner.net_worth if winner else 0.0,
                self.player_rank(),
            )
            self._notify("ended")
        return self.rankings()

    def abandon(self) -> None:
        """Cancel all timers without producing a result (used on restart)."""
        self.clock.cancel_all()
        self.state = SessionState.ENDED
        self._close_ledgers()

    def _close_ledgers(self) -> None:
        for ledger in self._ledgers.values():
            ledger.close()

    def advance(self, seconds: float) -> None:
        """Advance the session clock, firing every activity that falls due."""
        self.clock.advance(seconds)

    def run_to_end(self) -> list[RankingEntry]:
        """Fast-forward until the countdown expires."""
        while self.is_running:
            due = self.clock.next_due()
            if due is None:
                break
            self.clock.advance_to(due)
        return self.rankings()

    async def run(self, realtime: bool = True) -> list[RankingEntry]:
        await self.clock.run(realtime=realtime)
        return self.rankings()

    def add_observer(self, observer: Observer) -> None:
        """Call ``observer(activity, session)`` after every price, bot and
        countdown tick and once when the session ends."""
        self._observers.append(observer)

    def _notify(self, activity: str) -> None:
        for observer in self._observers:
            observer(activity, self)

    # ------------------------------------------------------------------
    # Trading (the only external write)
    # ------------------------------------------------------------------

    def trade(
        self,
        trader_id: str,
        action: TradeAction,
        ticker: Commodity,
        quantity: float,
        price: float | None = None,
    ) -> TradeResult:
        """Execute a trade for *trader_id*; at the current price unless given.

        Recoverable problems (funds, inventory, quantity, session over) come
        back as a rejected ``TradeResult`` with the ledger untouched.
        Unknown traders or instruments raise ``KeyError``.
        """
        ledger = self.ledger(trader_id)
        if not self.is_running:
            return TradeResult(
                status="rejected",
                reason="session_ended",
                message="The session has ended; no further trades are accepted.",
            )

        ticker = self._resolve_ticker(ticker)
        exec_price = self.engine.price(ticker) if price is None else price
        try:
            executed = ledger.trade(action, ticker, quantity, exec_price, timestamp=self.clock.now)
        except TradeError as exc:
            logger.info("Trade rejected for '%s': %s", trader_id, exc)
            return TradeResult(status="rejected", reason=exc.reason, message=str(exc))

        self._trades.append(executed)
        self._refresh_net_worths()
        logger.info(
            "%s %s %g %s @ %.2f",
            ledger.name,
            executed.action.value,
            executed.quantity,
            executed.ticker.value,
            executed.price,
        )
        return TradeResult(
            status="accepted",
            trade=executed,
            message=f"{executed.action.value} {executed.quantity:g} {executed.ticker.value}.",
        )

    def buy(self, ticker: Commodity, quantity: float = 1.0) -> TradeResult:
        """Player buy at the current price."""
        return self.trade(self.player.trader_id, TradeAction.BUY, ticker, quantity)

    def sell(self, ticker: Commodity, quantity: float = 1.0) -> TradeResult:
        """Player sell at the current price."""
        return self.trade(self.player.trader_id, TradeAction.SELL, ticker, quantity)

    def _resolve_ticker(self, ticker: Commodity | str) -> Commodity:
        try:
            resolved = Commodity(ticker)
        except ValueError:
            raise KeyError(f"Unknown instrument: {ticker}") from None
        if resolved not in self.engine.tickers:
            raise KeyError(f"Instrument not traded in this session: {resolved.value}")
        return resolved

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def ledger(self, trader_id: str) -> Ledger:
        try:
            return self._ledgers[trader_id]
        except KeyError:
            raise KeyError(f"Unknown trader: {trader_id}") from None

    @property
    def ledgers(self) -> list[Ledger]:
        """Player first, then bots in roster order."""
        return list(self._ledgers.values())

    @property
    def trades(self) -> list[ExecutedTrade]:
        return list(self._trades)

    @property
    def events(self) -> list[AppliedEvent]:
        return list(self._events)

    @property
    def last_event(self) -> AppliedEvent | None:
        return self.injector.last_event

    def net_worths(self) -> dict[str, float]:
        """Net worth per trader as of the latest tick or trade."""
        return dict(self._net_worths)

    def starting_net_worth(self, trader_id: str) -> float:
        """Net worth of *trader_id* when the session began."""
        try:
            return self._starting_net_worths[trader_id]
        except KeyError:
            raise KeyError(f"Unknown trader: {trader_id}") from None

    def _refresh_net_worths(self) -> None:
        prices = self.engine.prices()
        self._net_worths = {
            trader_id: ledger.net_worth(prices) for trader_id, ledger in self._ledgers.items()
        }

    def rankings(self) -> list[RankingEntry]:
        return self.ranking.rank(self.ledgers, self.engine.prices())

    def leaderboard(self) -> list[RankingEntry]:
        return self.ranking.leaderboard(
            self.ledgers, self.engine.prices(), top_k=self.config.leaderboard_size
        )

    def player_rank(self) -> int:
        return self.ranking.position_of(
            self.player.trader_id, self.ledgers, self.engine.prices()
        )

    def final_ranking(self) -> list[RankingEntry] | None:
        """Full end-of-session ranking, or ``None`` while still running."""
        if self.is_running:
            return None
        return self.rankings()

    def snapshot(self) -> SessionSnapshot:
        prices = self.engine.prices()
        strategies: dict[str, BotStrategy] = {bot.trader_id: bot.strategy for bot in self.bots}
        traders: list[TraderView] = [
            ledger.view(
                prices,
                strategy=strategies[ledger.trader_id].value
                if ledger.trader_id in strategies
                else None,
            )
            for ledger in self.ledgers
        ]
        return SessionSnapshot(
            state=self.state,
            time_remaining=self.time_remaining,
            elapsed=self.clock.elapsed,
            prices=self.engine.quotes(),
            traders=traders,
            leaderboard=self.leaderboard(),
            last_event=self.last_event,
        )


class Simulation:
    """Holds the current ``TradingSession`` and replaces it on restart.

    A restart builds every entity from scratch; only the player identity
    carries over. With a store configured, the player's saved record is
    wiped on restart so the new session starts on fresh credits. A new
    ``Simulation`` over the same store resumes from the saved record.
    """

    def __init__(
        self,
        config: SimulationConfig,
        store: LedgerStore | None = None,
        player: TraderIdentity | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.player_identity = player or player_identity(config.player_name)
        self.generation = 0
        self.session = self._new_session()

    def restart(self) -> TradingSession:
        self.session.abandon()
        if self.store is not None:
            self.store.delete(self.player_identity.trader_id)
        self.generation += 1
        self.session = self._new_session()
        logger.info("Session restarted (generation %d).", self.generation)
        return self.session

    def _new_session(self) -> TradingSession:
        seed = self.config.seed
        rng = RandomNumberSource(None if seed is None else seed + self.generation)
        return TradingSession(
            self.config,
            player=self.player_identity,
            store=self.store,
            rng=rng,
        )
