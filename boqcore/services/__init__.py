"""
services/ — Business logic for the catalog and BOQ store.

Services take a Session plus plain values, raise domain errors from
exceptions.py, and own every commit through database.unit_of_work.
"""
