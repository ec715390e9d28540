"""auth/ -- Authentication package for the RecordKeeper API.

Layer rule: auth/ imports only core/, stdlib and third-party libraries.
It does NOT import from api/, records/, or client/.
api/ imports from auth/, not the other way around.
"""
