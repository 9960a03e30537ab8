"""
Cache package for Jokes Service.

Provides a single-slot, process-local cache holding the last result set
fetched from the backing store together with its refill time.
"""
