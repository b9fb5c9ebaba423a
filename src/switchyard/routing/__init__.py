"""Routing — route kinds, the route factory, and the route table.

Routes are registered during setup into a table indexed by kind;
matching reads the indexes and never recompiles a pattern.
"""
