"""
Crowdfund App - Crowdfunding Product Lifecycle Engine

Bookkeeping and state-transition logic for a crowdfunding platform. Creators
register products with a funding goal and deadline, backers contribute, and
milestones gate the release of funds before backers claim reward tiers.
"""

__version__ = "0.1.0"
__author__ = "Crowdfund Team"
