"""Order executor implementation.

Settles buy and sell orders and accrues dividends against a Ledger using
point-in-time prices from a MarketDataProvider.

Policy:
- Buys that capital cannot cover are clamped to the whole number of shares
  that (capital - fee) affords.
- Sells are clamped to the shares held; selling an instrument not held is
  refused (no shorting).
- Capital and trade proceeds are rounded to the money quantum after every
  trade.
- Batched orders settle legs in mapping order and charge the fee once.
- Failures (no price, nothing held) are reported in the ExecutionResult and
  logged, never raised, so a batch always runs every leg.
"""

from datetime import date
from decimal import ROUND_FLOOR, ROUND_HALF_EVEN, Decimal
from typing import Any, Mapping, Optional

from qledger.services.data.models import Instrument
from qledger.services.data.provider import MarketDataProvider, to_decimal
from qledger.services.portfolio.config import ExecutionConfig
from qledger.services.portfolio.models import ExecutionResult, ExecutionStatus, Ledger
from qledger.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()


class OrderExecutor:
    """
    Executes orders against caller-owned ledgers.

    The executor holds no ledger state of its own; every call mutates the
    ledger it is given in place.

    Example:
        >>> data = InMemoryMarketData()
        >>> data.set_price(ko, date(2020, 1, 2), "25")
        >>> executor = OrderExecutor(data)
        >>> ledger = Ledger(capital=Decimal("1000"))
        >>> executor.buy(ledger, ko, 50, date(2020, 1, 2), fee=10).as_tuple()
        (Decimal('39'), Decimal('25'))
        >>> ledger.capital
        Decimal('15.00')
    """

    def __init__(self, provider: MarketDataProvider, config: Optional[ExecutionConfig] = None):
        """
        Initialize order executor.

        Args:
            provider: Source of prices and dividend amounts
            config: Execution policy (defaults if None)
        """
        self.provider = provider
        self.config = config or ExecutionConfig()
        self._quantum = self.config.money_quantum

        logger.debug(
            "order_executor.initialized",
            provider=type(provider).__name__,
            default_fee=str(self.config.default_fee),
            charge_fee_on_empty_batch=self.config.charge_fee_on_empty_batch,
            round_dividends=self.config.round_dividends,
        )

    # ==================== Single Instrument ====================

    def buy(
        self,
        ledger: Ledger,
        instrument: Instrument,
        shares: Any,
        on_date: date,
        fee: Any = None,
        apply_fee: bool = True,
    ) -> ExecutionResult:
        """
        Buy shares of one instrument at the on_date price.

        If capital does not cover shares * price + fee, the quantity is
        clamped to floor((capital - fee) / price). Nothing changes when the
        clamped quantity is not positive.

        Args:
            ledger: Ledger to debit capital from and credit shares to
            instrument: Instrument to buy
            shares: Requested quantity (non-negative)
            on_date: Trade date
            fee: Transaction fee (config default_fee if None)
            apply_fee: Charge the fee on this trade (False inside batches)

        Returns:
            ExecutionResult with shares bought and price paid

        Raises:
            ValueError: If shares or fee is negative
        """
        quantity = self._validate_quantity(shares)
        fee_amount = self._resolve_fee(fee)

        price = self._lookup_price(instrument, on_date, side="buy")
        if price is None:
            return ExecutionResult.no_transaction(ExecutionStatus.PRICE_UNAVAILABLE)

        status = ExecutionStatus.FILLED
        if ledger.capital < quantity * price + fee_amount:
            affordable = ((ledger.capital - fee_amount) / price).to_integral_value(rounding=ROUND_FLOOR)
            logger.debug(
                "order_executor.buy_clamped",
                instrument=str(instrument),
                date=on_date.isoformat(),
                requested=str(quantity),
                affordable=str(affordable),
                capital=str(ledger.capital),
            )
            quantity = affordable
            status = ExecutionStatus.CLAMPED

        if quantity <= 0:
            return ExecutionResult(quantity=Decimal("0"), price=price, status=ExecutionStatus.ZERO_QUANTITY)

        cost = quantity * price
        if apply_fee:
            cost += fee_amount
        ledger.capital = self._round(ledger.capital - cost)
        ledger.add_shares(instrument, quantity)

        logger.info(
            "order_executor.buy_filled",
            instrument=str(instrument),
            date=on_date.isoformat(),
            quantity=str(quantity),
            price=str(price),
            fee=str(fee_amount if apply_fee else Decimal("0")),
            capital=str(ledger.capital),
        )
        return ExecutionResult(quantity=quantity, price=price, status=status)

    def sell(
        self,
        ledger: Ledger,
        instrument: Instrument,
        shares: Any,
        on_date: date,
        fee: Any = None,
        apply_fee: bool = True,
    ) -> ExecutionResult:
        """
        Sell shares of one instrument at the on_date price.

        The quantity is clamped to the shares held. Instruments not held
        cannot be sold (no shorting).

        Args:
            ledger: Ledger to debit shares from and credit capital to
            instrument: Instrument to sell
            shares: Requested quantity (non-negative)
            on_date: Trade date
            fee: Transaction fee (config default_fee if None)
            apply_fee: Deduct the fee from the proceeds (False inside batches)

        Returns:
            ExecutionResult with shares sold and price received

        Raises:
            ValueError: If shares or fee is negative
        """
        quantity = self._validate_quantity(shares)
        fee_amount = self._resolve_fee(fee)

        if not ledger.holds(instrument):
            logger.warning(
                "order_executor.short_sell_refused",
                instrument=str(instrument),
                date=on_date.isoformat(),
                requested=str(quantity),
            )
            return ExecutionResult.no_transaction(ExecutionStatus.NOT_HELD)

        status = ExecutionStatus.FILLED
        held = ledger.shares(instrument)
        if held < quantity:
            logger.debug(
                "order_executor.sell_clamped",
                instrument=str(instrument),
                date=on_date.isoformat(),
                requested=str(quantity),
                held=str(held),
            )
            quantity = held
            status = ExecutionStatus.CLAMPED

        price = self._lookup_price(instrument, on_date, side="sell")
        if price is None:
            return ExecutionResult.no_transaction(ExecutionStatus.PRICE_UNAVAILABLE)

        if quantity > 0:
            ledger.remove_shares(instrument, quantity)
        else:
            status = ExecutionStatus.ZERO_QUANTITY

        proceeds = quantity * price
        if apply_fee:
            proceeds -= fee_amount
        ledger.capital = self._round(ledger.capital + self._round(proceeds))

        logger.info(
            "order_executor.sell_filled",
            instrument=str(instrument),
            date=on_date.isoformat(),
            quantity=str(quantity),
            price=str(price),
            fee=str(fee_amount if apply_fee else Decimal("0")),
            capital=str(ledger.capital),
        )
        return ExecutionResult(quantity=quantity, price=price, status=status)

    # ==================== Batches ====================

    def buy_batch(
        self,
        ledger: Ledger,
        orders: Mapping[Instrument, Any],
        on_date: date,
        fee: Any = None,
    ) -> dict[Instrument, ExecutionResult]:
        """
        Buy several instruments, settling legs in mapping order.

        Earlier legs get first claim on capital. The fee is charged once for
        the whole batch after all legs settle.

        Args:
            ledger: Ledger to trade against
            orders: Instrument -> requested quantity, in priority order
            on_date: Trade date
            fee: Fee for the whole batch (config default_fee if None)

        Returns:
            Instrument -> ExecutionResult, one entry per requested instrument
        """
        return self._run_batch("buy", ledger, orders, on_date, fee)

    def sell_batch(
        self,
        ledger: Ledger,
        orders: Mapping[Instrument, Any],
        on_date: date,
        fee: Any = None,
    ) -> dict[Instrument, ExecutionResult]:
        """Sell several instruments in mapping order, charging the fee once. See buy_batch."""
        return self._run_batch("sell", ledger, orders, on_date, fee)

    def _run_batch(
        self,
        side: str,
        ledger: Ledger,
        orders: Mapping[Instrument, Any],
        on_date: date,
        fee: Any,
    ) -> dict[Instrument, ExecutionResult]:
        fee_amount = self._resolve_fee(fee)
        leg = self.buy if side == "buy" else self.sell

        results: dict[Instrument, ExecutionResult] = {}
        for instrument, shares in orders.items():
            results[instrument] = leg(ledger, instrument, shares, on_date, fee_amount, apply_fee=False)

        executed = sum(1 for result in results.values() if result.executed)
        fee_charged = self.config.charge_fee_on_empty_batch or executed > 0
        if fee_charged:
            ledger.capital = self._round(ledger.capital - fee_amount)

        logger.info(
            "order_executor.batch_settled",
            side=side,
            date=on_date.isoformat(),
            legs=len(results),
            executed_legs=executed,
            fee=str(fee_amount if fee_charged else Decimal("0")),
            capital=str(ledger.capital),
        )
        return results

    # ==================== Dividends ====================

    def add_dividend(self, ledger: Ledger, on_date: date) -> Decimal:
        """
        Credit dividends paid on on_date for every held instrument.

        Instruments with no dividend record, or a zero amount, are skipped
        silently.

        Args:
            ledger: Ledger whose holdings earn the dividend
            on_date: Dividend date

        Returns:
            Total amount credited to capital
        """
        total = Decimal("0")
        for instrument, shares in list(ledger.holdings.items()):
            amount = self.provider.get_dividend(on_date, instrument)
            if amount is None or amount == 0:
                continue

            credit = amount * shares
            if self.config.round_dividends:
                credit = self._round(credit)
            ledger.capital += credit
            total += credit

            logger.info(
                "order_executor.dividend_accrued",
                instrument=str(instrument),
                date=on_date.isoformat(),
                amount_per_share=str(amount),
                shares=str(shares),
                credit=str(credit),
            )
        return total

    # ==================== Helpers ====================

    def _lookup_price(self, instrument: Instrument, on_date: date, side: str) -> Optional[Decimal]:
        price = self.provider.get_price(on_date, instrument)
        if price is None or price <= 0:
            logger.warning(
                "order_executor.price_unavailable",
                instrument=str(instrument),
                date=on_date.isoformat(),
                side=side,
                price=None if price is None else str(price),
            )
            return None
        return price

    def _resolve_fee(self, fee: Any) -> Decimal:
        fee_amount = self.config.default_fee if fee is None else to_decimal(fee)
        if fee_amount < 0:
            raise ValueError(f"Fee cannot be negative, got {fee_amount}")
        return fee_amount

    def _validate_quantity(self, shares: Any) -> Decimal:
        quantity = to_decimal(shares)
        if quantity < 0:
            raise ValueError(f"Quantity cannot be negative, got {quantity}")
        return quantity

    def _round(self, amount: Decimal) -> Decimal:
        return amount.quantize(self._quantum, rounding=ROUND_HALF_EVEN)


def buy(
    ledger: Ledger,
    order: Instrument | Mapping[Instrument, Any],
    *args: Any,
    provider: MarketDataProvider,
    **kwargs: Any,
) -> Any:
    """
    Functional entry point: buy one instrument or a batch.

    buy(ledger, instrument, shares, on_date, fee, provider=...) for one leg,
    buy(ledger, {instrument: shares}, on_date, fee, provider=...) for a batch.
    """
    executor = OrderExecutor(provider)
    if isinstance(order, Mapping):
        return executor.buy_batch(ledger, order, *args, **kwargs)
    return executor.buy(ledger, order, *args, **kwargs)


def sell(
    ledger: Ledger,
    order: Instrument | Mapping[Instrument, Any],
    *args: Any,
    provider: MarketDataProvider,
    **kwargs: Any,
) -> Any:
    """Functional entry point: sell one instrument or a batch. See buy()."""
    executor = OrderExecutor(provider)
    if isinstance(order, Mapping):
        return executor.sell_batch(ledger, order, *args, **kwargs)
    return executor.sell(ledger, order, *args, **kwargs)


def add_dividend(on_date: date, provider: MarketDataProvider, ledger: Ledger) -> Decimal:
    """Functional entry point for dividend accrual."""
    return OrderExecutor(provider).add_dividend(ledger, on_date)
