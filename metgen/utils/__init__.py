from metgen.utils.units import UnitConverter

__all__ = ['UnitConverter']
