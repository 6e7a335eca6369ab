"""Primitive containers used by the seating engine."""

from .containers import Graph, MaxPriorityQueue, Queue

__all__ = ["Graph", "MaxPriorityQueue", "Queue"]
