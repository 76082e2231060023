"""
Division index store.

The store is the single source of truth for the active period, the index value
and colour band of every division in that period, and the premium rates table.
It is created once per session by the composition root and handed to whatever
renders the map; there is no module-level state.

Period changes are resolved on a worker thread. Every request carries a
generation number and only the newest generation may publish its result, so a
slow response for a period the user has already moved away from is dropped.
A failed resolution moves the store to ERROR but keeps the last READY snapshot
available, so the map keeps showing the previous data.
"""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from color_bands import ColorBand, classify, classify_by_rank
from config import BAND_THRESHOLDS, CLASSIFICATION_SCHEME, FETCH_TIMEOUT_SECONDS
from index_parser import DataFormatError, ParsedIndex, Period, parse_index_csv
from premium import RatesTable, lookup_rate, parse_rates

SCHEMES = ("threshold", "rank")


class StoreStatus(Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class IndexSnapshot:
    """Everything the map needs for one period. Replaced as a whole, never patched."""
    period: Period
    index: ParsedIndex
    index_by_division: Mapping[int, float]
    color_by_division: Mapping[int, ColorBand]

    @property
    def periods(self) -> Tuple[Period, ...]:
        return self.index.periods


class DivisionIndexStore:
    """
    Holds the active period and the resolved division index for it.

    Args:
        fetch_index: Returns the raw index CSV text.
        fetch_rates: Returns the decoded rates JSON object. Optional; without it
            every rate is unknown.
        thresholds: Cut points for the threshold classification scheme.
        scheme: "threshold" (index values are classified against thresholds)
            or "rank" (index values are precomputed ranks 1..5).
        timeout: Seconds `resolve` waits for a period before reporting an error.
        executor: Executor running the fetches. A private thread pool is
            created when omitted.
    """

    def __init__(
        self,
        fetch_index: Callable[[], str],
        fetch_rates: Optional[Callable[[], Mapping[str, Any]]] = None,
        thresholds=BAND_THRESHOLDS,
        scheme: str = CLASSIFICATION_SCHEME,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        executor: Optional[Executor] = None,
    ):
        if scheme not in SCHEMES:
            raise ValueError(f"Unknown classification scheme '{scheme}', expected one of {SCHEMES}.")
        if scheme == "threshold":
            classify(0.0, thresholds)  # validates the thresholds up front

        self._fetch_index = fetch_index
        self._fetch_rates = fetch_rates
        self._thresholds = tuple(thresholds)
        self._scheme = scheme
        self._timeout = timeout
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=3, thread_name_prefix="division-store")

        self._lock = threading.RLock()
        self._status = StoreStatus.UNINITIALIZED
        self._generation = 0
        self._requested: Optional[str] = None
        self._pending: Optional[Tuple[int, Future]] = None
        self._snapshot: Optional[IndexSnapshot] = None
        self._error: Optional[BaseException] = None

        self._rates: Optional[RatesTable] = None
        self._rates_future: Optional[Future] = None
        self._rates_error: Optional[BaseException] = None

    # --- State ---

    @property
    def status(self) -> StoreStatus:
        with self._lock:
            return self._status

    @property
    def snapshot(self) -> Optional[IndexSnapshot]:
        """The last READY snapshot, kept through later loading and error states."""
        with self._lock:
            return self._snapshot

    @property
    def error(self) -> Optional[BaseException]:
        with self._lock:
            return self._error

    @property
    def requested_period(self) -> Optional[str]:
        with self._lock:
            return self._requested

    @property
    def rates_loaded(self) -> bool:
        with self._lock:
            return self._rates is not None

    @property
    def rates_error(self) -> Optional[BaseException]:
        with self._lock:
            return self._rates_error

    # --- Period resolution ---

    def set_period(self, period: Union[Period, str, None] = None) -> Optional[Future]:
        """
        Requests the index for a period.

        ``None`` asks for the most recent period when nothing has been requested
        yet and is a no-op otherwise. Asking for the period that is already
        loading or ready does nothing.

        Returns:
            The future of the new resolution, or None when no fetch was started.
        """
        value = period.value if isinstance(period, Period) else period
        with self._lock:
            if self._status in (StoreStatus.LOADING, StoreStatus.READY):
                if value is None or value == self._requested:
                    return None

            self._generation += 1
            generation = self._generation
            self._requested = value
            self._status = StoreStatus.LOADING
            self._error = None

            future = self._executor.submit(self._run, generation, value)
            self._pending = (generation, future)
            return future

    def resolve(self, period: Union[Period, str, None] = None, timeout: Optional[float] = None) -> Optional[IndexSnapshot]:
        """
        Requests a period and waits for it, at most ``timeout`` seconds.

        Failures and timeouts are reported through `status` and `error`; the
        return value is the current snapshot, which may be the previous one.
        """
        with self._lock:
            self.set_period(period)
            pending = self._pending

        if pending is not None:
            generation, future = pending
            limit = self._timeout if timeout is None else timeout
            done, _ = wait([future], timeout=limit)
            if not done:
                self._fail(generation, TimeoutError(f"The index data did not arrive within {limit} seconds."))
        return self.snapshot

    def _run(self, generation: int, value: Optional[str]) -> IndexSnapshot:
        try:
            snapshot = self._build_snapshot(value)
        except Exception as e:
            self._fail(generation, e)
            raise
        self._commit(generation, snapshot)
        return snapshot

    def _build_snapshot(self, value: Optional[str]) -> IndexSnapshot:
        parsed = parse_index_csv(self._fetch_index())
        period = parsed.latest if value is None else parsed.get_period(value)
        if period is None:
            if value is None:
                raise DataFormatError("The index data has no period columns.")
            raise DataFormatError(f"Period '{value}' is not present in the index data.")

        values = parsed.values_for(period)
        colors = {division_id: self._classify(index) for division_id, index in values.items()}
        return IndexSnapshot(period=period, index=parsed, index_by_division=values, color_by_division=colors)

    def _classify(self, value: float) -> ColorBand:
        if self._scheme == "rank":
            try:
                return classify_by_rank(value)
            except (ValueError, OverflowError):
                return ColorBand.NO_DATA
        return classify(value, self._thresholds)

    def _commit(self, generation: int, snapshot: IndexSnapshot) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._snapshot = snapshot
            self._requested = snapshot.period.value
            self._status = StoreStatus.READY
            self._error = None
            self._pending = None
        print(
            f"[INDEX] {snapshot.period.label}: {len(snapshot.index_by_division)} divisions "
            f"({snapshot.index.skipped_cells} cells skipped)."
        )

    def _fail(self, generation: int, error: BaseException) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._status = StoreStatus.ERROR
            self._error = error
            self._pending = None
        print(f"[INDEX] Could not resolve period {self._requested or 'latest'}: {error}")

    # --- Rates ---

    def load_rates(self) -> Optional[Future]:
        """Starts the rates fetch once per store. Independent of period resolution."""
        with self._lock:
            if self._fetch_rates is None or self._rates is not None:
                return None
            if self._rates_future is not None and not self._rates_future.done():
                return self._rates_future
            self._rates_error = None
            self._rates_future = self._executor.submit(self._run_rates)
            return self._rates_future

    def _run_rates(self) -> RatesTable:
        try:
            rates = parse_rates(self._fetch_rates())
        except Exception as e:
            with self._lock:
                self._rates_error = e
            print(f"[RATES] Could not load premium rates: {e}")
            raise
        with self._lock:
            self._rates = rates
        print(f"[RATES] Loaded premium rates for {len(rates)} divisions.")
        return rates

    # --- Reads ---

    def color_for(self, division_id: int) -> ColorBand:
        snapshot = self.snapshot
        if snapshot is None:
            return ColorBand.NO_DATA
        return snapshot.color_by_division.get(division_id, ColorBand.NO_DATA)

    def value_for(self, division_id: int) -> Optional[float]:
        snapshot = self.snapshot
        if snapshot is None:
            return None
        return snapshot.index_by_division.get(division_id)

    def rate_for(self, division_id: int) -> Optional[float]:
        """Premium rate of a division in the active period, or None when unknown."""
        with self._lock:
            snapshot, rates = self._snapshot, self._rates
        if snapshot is None or rates is None:
            return None
        return lookup_rate(rates, division_id, snapshot.period)

    def period_options(self) -> List[Dict[str, str]]:
        snapshot = self.snapshot
        if snapshot is None:
            return []
        return [period.as_option() for period in snapshot.periods]

    def history_for(self, division_id: int) -> List[Tuple[Period, Optional[float]]]:
        """Index value of a division in every period, oldest first."""
        snapshot = self.snapshot
        if snapshot is None:
            return []
        return [(period, snapshot.index.values_for(period).get(division_id)) for period in reversed(snapshot.periods)]

    def shutdown(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False)
