"""Broker export adapters, one module per source format."""

from .avanza_csv import AvanzaParser
from .base import BrokerParser
from .nordnet_csv import NordnetParser

__all__ = ["AvanzaParser", "BrokerParser", "NordnetParser"]
