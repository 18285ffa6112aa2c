"""
zkcds: Privacy-preserving contact discovery.

A client learns whether a phone number is registered, and the identifier
behind it, through a double-blind Diffie-Hellman exchange over P-256:

1. The client sends a hash prefix and its blinding of H(phone number)
2. The server returns the prefix bucket and its blinding of the client's point
3. The client finds its row and strips the phone number mask
4. The server strips its own mask and decodes the identifier

The server learns only the prefix. The client learns nothing about other
rows in the bucket.
"""
from zkcds.client import Client, LookupClient
from zkcds.server import Server

__version__ = "0.1.0"

__all__ = ["Client", "LookupClient", "Server", "__version__"]
