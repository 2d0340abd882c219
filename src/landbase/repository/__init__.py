"""Persistence adapters for land-base campaigns."""

from .json_store import JsonCampaignRepository

__all__ = ["JsonCampaignRepository"]
