"""Test fixtures for costexplorer.

- oracles: deterministic fake solvers implementing the capability protocols
"""
