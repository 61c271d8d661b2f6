"""Reference prices used to seed synthetic estimates.

Values are BRL closes for B3 tickers. Bump ``REFERENCE_PRICES_VERSION`` when
the table is refreshed so cached synthetic quotes can be traced back to it.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

REFERENCE_PRICES_VERSION = "2025-09"

_PRICES: dict[str, float] = {
    # Ibovespa heavyweights
    "PETR4": 38.45,
    "PETR3": 40.18,
    "VALE3": 58.82,
    "ITUB4": 32.25,
    "ITUB3": 33.30,
    "BBDC4": 13.12,
    "BBDC3": 14.28,
    "ABEV3": 11.94,
    "B3SA3": 12.52,
    "WEGE3": 51.95,
    # Mid and small caps
    "MGLU3": 4.72,
    "RENT3": 59.48,
    "LREN3": 15.18,
    "VIVT3": 41.95,
    "JBSS3": 28.64,
    "SUZB3": 47.35,
    "CIEL3": 6.22,
    "RADL3": 23.52,
    "EMBR3": 39.28,
    "CSNA3": 12.85,
    # Utilities
    "ELETB4": 37.05,
    "CMIG4": 10.92,
    "TAEE11": 35.32,
    "EGIE3": 40.76,
    "CPFE3": 32.18,
    # Telecom and tech
    "TIMS3": 12.41,
    "TOTS3": 28.95,
    "LWSA3": 7.83,
    # Financials
    "BPAC11": 23.85,
    "SANB11": 36.72,
    "BBSE3": 26.45,
    # Retail and consumer
    "HYPE3": 22.98,
    "NTCO3": 14.74,
    "SOMA3": 8.67,
    "AMAR3": 18.92,
    # Commodities
    "USIM5": 7.28,
    "GOAU4": 4.68,
    "KLBN11": 3.98,
    # Healthcare
    "HAPV3": 3.89,
    "FLRY3": 13.63,
    "QUAL3": 18.97,
    "DASA3": 12.45,
    # Logistics
    "RAIL3": 18.52,
    "CCRO3": 14.30,
    "UGPA3": 15.74,
    # Oil and gas
    "PRIO3": 41.35,
    "RECV3": 28.67,
    # Education
    "YDUQ3": 12.96,
    "COGN3": 1.89,
    # Other
    "BEEF3": 16.23,
    "MRFG3": 7.45,
    "ARZZ3": 52.18,
}

REFERENCE_PRICES: Mapping[str, float] = MappingProxyType(_PRICES)
