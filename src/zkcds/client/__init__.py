"""Client-side components for blinded contact discovery."""
from zkcds.client.crypto import Client
from zkcds.client.search import LookupClient

__all__ = ["Client", "LookupClient"]
