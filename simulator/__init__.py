"""
Simulator package for the turn-based combat core.

This package contains the combat math, the status effect engine, the actor
model, the action resolution engine and the adversary decision policy.
"""
