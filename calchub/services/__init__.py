"""Stateful services layered over the storage adapter and the registry."""
