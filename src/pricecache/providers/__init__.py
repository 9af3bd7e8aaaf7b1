"""Price provider registry."""

from __future__ import annotations

from pricecache.errors import PriceError, PriceErrorCode
from pricecache.providers.base import BasePriceProvider

# Lazy registry — provider modules are imported on demand.
PROVIDER_CLASSES: dict[str, str] = {
    "pse": "pricecache.providers.pse.PseEdgeProvider",
    "coingecko": "pricecache.providers.coingecko.CoinGeckoProvider",
    "mock": "pricecache.providers.mock.MockProvider",
}


def create_provider(name: str, **kwargs) -> BasePriceProvider:
    """Instantiate a provider by registered name, forwarding kwargs to its constructor."""
    import importlib

    try:
        dotted = PROVIDER_CLASSES[name.strip().lower()]
    except KeyError:
        raise PriceError(
            f"Unknown provider {name!r}. Known: {sorted(PROVIDER_CLASSES)}",
            code=PriceErrorCode.NOT_FOUND,
        ) from None
    module_path, cls_name = dotted.rsplit(".", 1)
    module = importlib.import_module(module_path)
    cls = getattr(module, cls_name)
    return cls(**kwargs)


__all__ = ["BasePriceProvider", "PROVIDER_CLASSES", "create_provider"]
