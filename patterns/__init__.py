"""Reusable patterns shared by the bookstore domain packages.

Each module is a self-contained pattern: a pure rules engine, frozen
dataclass configuration, and a read-only repository layer.
"""
