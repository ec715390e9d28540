"""records/ -- Record persistence for the RecordKeeper API.

Layer rule: records/ imports only core/, stdlib and third-party libraries.
It does NOT import from api/, auth/, or client/.
"""
