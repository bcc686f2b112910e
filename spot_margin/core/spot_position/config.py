"""Spot market configuration loading.

Markets are described in YAML:

    markets:
      - market_index: 1
        decimals: 9
        initial_asset_weight: 8000
        maintenance_asset_weight: 9000
        initial_liability_weight: 12000
        maintenance_liability_weight: 11000
        imf_factor: 0

Keys are `SpotMarketConfig` field names; omitted fields take the dataclass
defaults (a 1:1-weighted quote-like market).
"""

from __future__ import annotations

import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import SpotConfigError
from .types import SpotMarketConfig

logger = logging.getLogger(__name__)

_MARKET_FIELDS: frozenset[str] = frozenset(f.name for f in fields(SpotMarketConfig))
_REQUIRED_FIELDS: frozenset[str] = frozenset({"market_index", "decimals"})


def spot_market_from_dict(obj: Mapping[str, Any]) -> SpotMarketConfig:
    if not isinstance(obj, Mapping):
        raise SpotConfigError("market entry must be a mapping")
    # YAML keys may be ints, bools or None; compare them as strings.
    keys = {str(k) for k in obj}
    unknown = sorted(keys - _MARKET_FIELDS)
    if unknown:
        raise SpotConfigError(f"unknown market keys: {', '.join(unknown)}")
    missing = sorted(_REQUIRED_FIELDS - keys)
    if missing:
        raise SpotConfigError(f"missing market keys: {', '.join(missing)}")
    return SpotMarketConfig(**dict(obj))


def spot_market_to_dict(market: SpotMarketConfig) -> dict[str, int]:
    return asdict(market)


def spot_markets_from_dict(obj: Mapping[str, Any]) -> dict[int, SpotMarketConfig]:
    """Parse a ``{"markets": [...]}`` document into markets keyed by index."""
    if not isinstance(obj, Mapping):
        raise SpotConfigError("config document must be a mapping")
    entries = obj.get("markets")
    if not isinstance(entries, list):
        raise SpotConfigError("config document must contain a 'markets' list")

    markets: dict[int, SpotMarketConfig] = {}
    for entry in entries:
        market = spot_market_from_dict(entry)
        if market.market_index in markets:
            raise SpotConfigError(f"duplicate market_index: {market.market_index}")
        markets[market.market_index] = market
    return markets


def load_spot_markets(path: Path | str) -> dict[int, SpotMarketConfig]:
    """Load market configs from a YAML file."""
    path = Path(path)
    try:
        obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise SpotConfigError(f"cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise SpotConfigError(f"invalid YAML in {path}: {exc}") from exc
    markets = spot_markets_from_dict(obj)
    logger.debug("loaded %d spot markets from %s", len(markets), path)
    return markets
