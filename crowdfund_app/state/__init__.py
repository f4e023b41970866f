"""
Product lifecycle state machine module.

Manages the crowdfunding product lifecycle and the rules gating each step.
Handles transitions between ACTIVE → FUNDED → COMPLETED and ACTIVE → FAILED.
"""
