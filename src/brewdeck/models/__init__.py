"""Data models for brewdeck."""

from brewdeck.models.package import PackageKind, PackageRecord
from brewdeck.models.brew_info import BrewInfoResponse, BrewFormula, BrewCask

__all__ = ["PackageKind", "PackageRecord", "BrewInfoResponse", "BrewFormula", "BrewCask"]
