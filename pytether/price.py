"""Spot price lookup against the CoinGecko ``simple/price`` endpoint.

Usage:
    eth-price
"""

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

COINGECKO_PRICE_URL = "https://api.coingecko.com/api/v3/simple/price"

ASSET_ID = "ethereum"
QUOTE_CURRENCY = "usd"


def fetch_eth_usd_price(session: Optional[requests.Session] = None) -> Optional[float]:
    """Fetch the current ETH/USD price.

    Errors are logged, never raised.

    Args:
        session: Optional requests session (a fresh ``requests.get`` otherwise)

    Returns:
        The price, or None if the request or the response shape failed
    """
    http = session if session is not None else requests
    params = {"ids": ASSET_ID, "vs_currencies": QUOTE_CURRENCY}

    try:
        logger.debug("GET %s %s", COINGECKO_PRICE_URL, params)
        response = http.get(COINGECKO_PRICE_URL, params=params)
        response.raise_for_status()
        price = response.json()[ASSET_ID][QUOTE_CURRENCY]
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            raise TypeError(f"price is not a number: {price!r}")
    except requests.exceptions.RequestException as e:
        logger.error("Error fetching price: %s", e)
        return None
    except (ValueError, KeyError, TypeError) as e:
        logger.error("Error fetching price: unexpected response shape (%r)", e)
        return None

    logger.info("Current ETH/USD Price: $%s", price)
    return price


def main():
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    fetch_eth_usd_price()


if __name__ == "__main__":
    main()
