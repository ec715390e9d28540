"""client/ -- Terminal client for the RecordKeeper API.

Layer rule: client/ talks to the API only over HTTP. It does NOT import
from api/, auth/, records/, or core/.
"""
