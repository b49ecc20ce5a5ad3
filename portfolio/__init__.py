"""portfolio — Portfolio Construction

Asset-class catalogue, preset allocations and holdings-file import that
produce the baseline drift / vol / correlation inputs for the shock engine.
"""
