from metgen.airports.directory import AirportDirectory

__all__ = ['AirportDirectory']
