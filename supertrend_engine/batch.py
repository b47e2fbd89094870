from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, List, Optional, Tuple

from .bars import Dataset, SeriesBySymbol, SingleSeries, to_bar_series
from .config import EngineConfig
from .errors import StructuralInputError
from .recommender import NO_DATA, Recommendation, analyze_series


def _items(dataset: Dataset) -> List[Tuple[str, Any]]:
    if isinstance(dataset, SingleSeries):
        return [(dataset.name, dataset.rows)]
    if isinstance(dataset, SeriesBySymbol):
        return [(str(k), v) for k, v in dataset.series.items()]
    raise StructuralInputError(f"unsupported dataset type: {type(dataset).__name__}")


def evaluate_symbol(symbol: str, raw: Any, cfg: EngineConfig) -> Recommendation:
    """Normalize one symbol's rows and evaluate its latest bar.

    Raises StructuralInputError if `raw` is not a bar sequence.
    """
    series = to_bar_series(raw, symbol=symbol)
    if len(series) < cfg.batch_min_bars:
        logging.info("%s: insufficient data (%s bars < %s)", symbol, len(series), cfg.batch_min_bars)
        return NO_DATA
    return analyze_series(series, cfg)


def run_batch(
    dataset: Dataset,
    cfg: Optional[EngineConfig] = None,
    *,
    max_workers: Optional[int] = None,
) -> Dict[str, Recommendation]:
    """Evaluate every symbol in `dataset`; one recommendation per symbol, input order kept.

    A symbol whose input is structurally broken is logged and left out; the rest continue.
    Unreadable rows inside a series are dropped, not fatal. Series shorter than
    cfg.batch_min_bars come back as NO_DATA.
    With max_workers > 1 symbols are evaluated in a thread pool. Only this function writes
    to the result map.
    """
    cfg = cfg or EngineConfig()
    items = _items(dataset)
    done: Dict[str, Recommendation] = {}

    if not max_workers or max_workers <= 1:
        for symbol, raw in items:
            try:
                done[symbol] = evaluate_symbol(symbol, raw, cfg)
            except StructuralInputError as exc:
                logging.warning("%s: skipped, bad input structure: %s", symbol, exc)
        return done

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_symbol = {executor.submit(evaluate_symbol, symbol, raw, cfg): symbol for symbol, raw in items}
        for future in as_completed(future_to_symbol):
            symbol = future_to_symbol[future]
            try:
                done[symbol] = future.result()
            except StructuralInputError as exc:
                logging.warning("%s: skipped, bad input structure: %s", symbol, exc)

    return {symbol: done[symbol] for symbol, _ in items if symbol in done}


def results_to_rows(results: Dict[str, Recommendation]) -> List[Dict[str, Any]]:
    """Flatten batch results to [{"symbol": ..., **recommendation}, ...]."""
    return [{"symbol": symbol, **rec.to_dict()} for symbol, rec in results.items()]
